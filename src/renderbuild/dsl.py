# src/renderbuild/dsl.py
from __future__ import annotations

from dataclasses import replace
from typing import Dict, List, Optional

from .model import Deploy, Step


# ---------------------------------------------------------------------
# Step helper
# ---------------------------------------------------------------------

def sh(name: str, cmd: str, *, cwd: str | None = None) -> Step:
    """Create a shell step."""
    return Step(name=name, run=cmd, cwd=cwd)


# ---------------------------------------------------------------------
# Deploy helper
# ---------------------------------------------------------------------

def deploy(
    name: str,
    *steps: Step,  # allow: deploy("x", sh(...), sh(...))
    steps_list: Optional[List[Step]] = None,  # allow: deploy("x", steps_list=[...])
    env: Optional[Dict[str, str]] = None,
    cwd: str | None = None,  # default cwd applied to steps missing cwd
) -> Deploy:
    steps_final: List[Step] = []
    if steps_list:
        steps_final.extend(list(steps_list))
    steps_final.extend(list(steps))

    if not steps_final:
        raise ValueError(f"deploy({name!r}) must have at least one step")

    if cwd is not None:
        steps_final = [s if s.cwd is not None else replace(s, cwd=cwd) for s in steps_final]

    # force values to str so they can go straight into a subprocess env
    env_final = {k: str(v) for k, v in (env or {}).items()}

    return Deploy(name=name, steps=steps_final, env=env_final)
