# render_build_workflow.py
# Same sequence as the built-in default, spelled out as a workflow file.
# Copy and edit this to change the steps for a particular app.
from __future__ import annotations

from renderbuild.dsl import deploy
from renderbuild.step_workflows.rails import bundle, rake


def workflow():
    return deploy(
        "rails-build",
        # rails build
        bundle("Install dependencies", "install"),
        rake("Precompile assets", "assets:precompile"),
        rake("Clean assets", "assets:clean"),
        # run database migrations
        rake("Migrate database", "db:migrate"),
    )
