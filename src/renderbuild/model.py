# model.py
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Optional


@dataclass(frozen=True)
class Step:
    """A single command (step) inside a deploy."""
    name: str
    run: str
    cwd: str | None = None


@dataclass
class Deploy:
    """
    An ordered build/deploy sequence.

    Steps run top to bottom; `env` is layered on top of the ambient
    environment for every step.
    """
    name: str
    steps: list[Step]
    env: Dict[str, str] = field(default_factory=dict)


@dataclass(frozen=True)
class StepResult:
    name: str
    command: str
    exit_code: int
    duration: float
    status: str  # "ok" | "failed"

    @property
    def ok(self) -> bool:
        return self.status == "ok"


@dataclass
class RunResult:
    """
    Outcome of one run.

    `results` holds only the steps that actually ran, in order. Since the
    runner stops at the first failure, only the last entry can be failed.
    """
    deploy: Deploy
    results: List[StepResult] = field(default_factory=list)

    @property
    def failed_step(self) -> Optional[StepResult]:
        if self.results and not self.results[-1].ok:
            return self.results[-1]
        return None

    @property
    def skipped(self) -> List[str]:
        return [s.name for s in self.deploy.steps[len(self.results):]]

    @property
    def succeeded(self) -> bool:
        return self.failed_step is None and not self.skipped

    @property
    def exit_code(self) -> int:
        failed = self.failed_step
        if failed is not None:
            return failed.exit_code
        # Stopped short with no recorded failure; never report success.
        return 0 if not self.skipped else 1

    @property
    def duration(self) -> float:
        return sum(r.duration for r in self.results)
