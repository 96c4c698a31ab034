# step_workflows/rails.py
from __future__ import annotations

from ..dsl import deploy, sh
from ..model import Deploy, Step


# ---------------------------------------------------------------------
# Bundler step helpers
# ---------------------------------------------------------------------

def bundle(name: str, args: str, *, cwd: str | None = None) -> Step:
    """Create a step that runs `bundle <args>`."""
    return sh(name, f"bundle {args}".strip(), cwd=cwd)


def rake(name: str, task: str, *, cwd: str | None = None) -> Step:
    """Create a step that runs a rake task through Bundler."""
    return bundle(name, f"exec rake {task}", cwd=cwd)


# ---------------------------------------------------------------------
# Default build
# ---------------------------------------------------------------------

def rails_build(*, cwd: str | None = None) -> Deploy:
    """
    The standard Rails build: install gems, precompile assets, drop stale
    assets, then migrate the database. Order matters; migrations run last so a
    broken asset build never touches the schema.
    """
    return deploy(
        "rails-build",
        bundle("Install dependencies", "install"),
        rake("Precompile assets", "assets:precompile"),
        rake("Clean assets", "assets:clean"),
        rake("Migrate database", "db:migrate"),
        cwd=cwd,
    )
