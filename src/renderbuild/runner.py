# runner.py
from __future__ import annotations

import os
import runpy
import shlex
import subprocess
import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, Optional

from .model import Deploy, RunResult, Step, StepResult
from .ui.console import Console, get_console


# ----------------------------------------------------------------------
# Errors
# ----------------------------------------------------------------------

@dataclass
class DeployError(Exception):
    """
    Structured runner error with enough context for:
      - clean CLI output
      - debugging without full tracebacks
    """
    kind: str
    step: str | None
    message: str
    details: dict = field(default_factory=dict)

    def __str__(self) -> str:
        lines = [f"{self.kind}: {self.message}"]
        if self.step:
            lines.append(f"step={self.step}")
        for k, v in self.details.items():
            lines.append(f"{k}={v}")
        return "\n".join(lines)


@dataclass
class StepFailure(Exception):
    step: str
    cmd: str
    exit_code: int
    duration: float = 0.0

    def __str__(self) -> str:
        return f"step '{self.step}' failed (exit={self.exit_code}): {self.cmd}"


TOOL_HINTS = {
    "bundle": "Install Bundler (gem install bundler) or fix PATH.",
    "gem": "Install Ruby (includes gem) or fix PATH.",
    "ruby": "Install Ruby or fix PATH.",
    "rake": "Add rake to the Gemfile or run it through `bundle exec`.",
    "node": "Install Node.js or fix PATH.",
    "yarn": "Install Yarn (e.g., npm install -g yarn) or fix PATH.",
}

# Shell conventions for commands that never started.
EXIT_NOT_FOUND = 127
EXIT_NOT_EXECUTABLE = 126


def tool_of(step: Step) -> str | None:
    """First word of the command, i.e. the program the shell will look up."""
    try:
        parts = shlex.split(step.run)
    except ValueError:
        parts = step.run.split()
    return parts[0] if parts else None


def hint_for(step: Step, exit_code: int) -> str | None:
    if exit_code != EXIT_NOT_FOUND:
        return None
    tool = tool_of(step)
    if tool is None:
        return None
    return TOOL_HINTS.get(tool, f"Install {tool} and ensure it is on PATH.")


def normalize_exit_code(returncode: int) -> int:
    """Map a Popen return code to what a shell would report."""
    if returncode < 0:
        # killed by signal N -> 128 + N
        return 128 - returncode
    return returncode


# ----------------------------------------------------------------------
# Workflow loading (local file)
# ----------------------------------------------------------------------

def load_workflow(path: str | Path) -> Deploy:
    """
    Load a deploy from a python file path.

    The file must define one of:
      - workflow() -> Deploy | List[Step]
      - DEPLOY = Deploy(...)
      - STEPS = [Step, ...]
    """
    wf_path = Path(path).expanduser().resolve()
    if not wf_path.exists():
        raise FileNotFoundError(f"Workflow file not found: {wf_path}")
    if wf_path.suffix != ".py":
        raise ValueError(f"Workflow must be a .py file, got: {wf_path.name}")

    module_name = f"renderbuild_workflow_{wf_path.stem}"
    globals_dict = runpy.run_path(str(wf_path), run_name=module_name)

    found = None
    if "workflow" in globals_dict and callable(globals_dict["workflow"]):
        found = globals_dict["workflow"]()
    elif "DEPLOY" in globals_dict:
        found = globals_dict["DEPLOY"]
    elif "STEPS" in globals_dict:
        found = globals_dict["STEPS"]

    if isinstance(found, Deploy):
        deploy = found
    elif isinstance(found, list) and found and all(isinstance(s, Step) for s in found):
        deploy = Deploy(name=wf_path.stem, steps=list(found))
    else:
        raise TypeError(
            "Workflow must return/define a Deploy or a non-empty List[Step]. "
            "Define workflow(), DEPLOY = deploy(...) or STEPS = [sh(...), ...]."
        )

    if not deploy.steps:
        raise TypeError(f"Workflow {wf_path.name} defines a deploy with no steps")
    return deploy


# ----------------------------------------------------------------------
# Execution primitives
# ----------------------------------------------------------------------

def _step_cwd(step: Step, workdir: Path) -> Path:
    return (workdir / (step.cwd or ".")).resolve()


def preflight(deploy: Deploy, workdir: Path) -> None:
    """Check every directory up front so a typo never leaves a half-run deploy."""
    if not workdir.is_dir():
        raise DeployError(
            kind="BadWorkingDirectory",
            step=None,
            message="Working directory does not exist",
            details={"workdir": str(workdir)},
        )
    for s in deploy.steps:
        cwd = _step_cwd(s, workdir)
        if not cwd.is_dir():
            raise DeployError(
                kind="BadWorkingDirectory",
                step=s.name,
                message="Step cwd does not exist",
                details={"cwd": str(cwd)},
            )


def _step_env(deploy: Deploy) -> Dict[str, str]:
    env = os.environ.copy()
    env.update(deploy.env or {})
    return env


def run_step(deploy: Deploy, step: Step, workdir: Path) -> StepResult:
    """
    Run one step with the terminal inherited, so the tool's own output is
    what the operator sees. Raises StepFailure on a non-zero exit.
    """
    cwd = _step_cwd(step, workdir)
    started = time.monotonic()

    try:
        proc = subprocess.run(
            step.run,
            shell=True,
            cwd=str(cwd),
            env=_step_env(deploy),
        )
        exit_code = normalize_exit_code(proc.returncode)
    except FileNotFoundError:
        exit_code = EXIT_NOT_FOUND
    except OSError:
        exit_code = EXIT_NOT_EXECUTABLE

    duration = time.monotonic() - started
    if exit_code != 0:
        raise StepFailure(step=step.name, cmd=step.run, exit_code=exit_code, duration=duration)

    return StepResult(
        name=step.name,
        command=step.run,
        exit_code=0,
        duration=duration,
        status="ok",
    )


# ----------------------------------------------------------------------
# Public API
# ----------------------------------------------------------------------

def run_deploy(
    deploy: Deploy,
    *,
    workdir: str | Path = ".",
    console: Optional[Console] = None,
) -> RunResult:
    """
    Run every step of `deploy` in order, stopping at the first failure.

    Nothing is retried or rolled back: effects of steps that already
    succeeded stay in place. The returned RunResult carries the exit code
    the process should report.
    """
    console = console or get_console()
    workdir_p = Path(workdir).expanduser().resolve()
    preflight(deploy, workdir_p)

    result = RunResult(deploy=deploy)
    total = len(deploy.steps)

    for index, step in enumerate(deploy.steps, start=1):
        console.print_step(index, total, step)
        console.print_debug(f"cwd={_step_cwd(step, workdir_p)}")
        if deploy.env:
            console.print_debug(f"env overrides: {', '.join(sorted(deploy.env))}")
        try:
            step_result = run_step(deploy, step, workdir_p)
        except StepFailure as e:
            result.results.append(
                StepResult(
                    name=step.name,
                    command=step.run,
                    exit_code=e.exit_code,
                    duration=e.duration,
                    status="failed",
                )
            )
            console.print_failure(
                step.name,
                str(e),
                exit_code=e.exit_code,
                hint=hint_for(step, e.exit_code),
            )
            break

        result.results.append(step_result)
        console.print_step_done(step_result)

    return result
