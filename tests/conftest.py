from __future__ import annotations

from pathlib import Path

import pytest

from renderbuild.dsl import sh
from renderbuild.ui.console import Console, set_console


@pytest.fixture(autouse=True)
def fresh_console():
    """Each test starts with a default console; the CLI replaces it per run."""
    console = Console()
    set_console(console)
    yield console
    set_console(Console())


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("RENDERBUILD_WORKDIR", "RENDERBUILD_WORKFLOW", "RENDERBUILD_DEBUG", "RENDERBUILD_VERBOSE"):
        monkeypatch.delenv(name, raising=False)


@pytest.fixture
def trail(tmp_path: Path) -> Path:
    """File each recording step appends its name to."""
    return tmp_path / "trail.log"


@pytest.fixture
def record(trail: Path):
    """Build a step that records that it ran, then exits with `code`."""

    def _record(name: str, code: int = 0):
        return sh(name, f"echo {name} >> '{trail}'; exit {code}")

    return _record


@pytest.fixture
def ran(trail: Path):
    """Names of the recording steps that ran, in order."""

    def _ran() -> list[str]:
        if not trail.exists():
            return []
        return trail.read_text().split()

    return _ran
