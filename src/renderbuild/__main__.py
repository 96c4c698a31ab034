"""Module entry-point for ``python -m renderbuild``."""

from __future__ import annotations

from .cli import cli


if __name__ == "__main__":  # pragma: no cover - invoked via module execution
    cli(prog_name="renderbuild")
