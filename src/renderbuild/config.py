from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

TRUTHY = {"1", "true", "yes", "on"}


def _flag(env: Mapping[str, str], name: str) -> bool:
    return env.get(name, "").strip().lower() in TRUTHY


@dataclass(frozen=True)
class Settings:
    workdir: str = "."
    workflow: Optional[str] = None
    debug: bool = False
    verbose: bool = False


def load_settings(env: Optional[Mapping[str, str]] = None) -> Settings:
    """Read settings from the environment; CLI flags override these."""
    env = os.environ if env is None else env
    return Settings(
        workdir=env.get("RENDERBUILD_WORKDIR", "."),
        workflow=env.get("RENDERBUILD_WORKFLOW") or None,
        debug=_flag(env, "RENDERBUILD_DEBUG"),
        verbose=_flag(env, "RENDERBUILD_VERBOSE"),
    )
