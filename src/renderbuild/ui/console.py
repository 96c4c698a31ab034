"""Console output formatting utilities for renderbuild."""

from __future__ import annotations

import sys
from typing import Optional

from ..model import Deploy, RunResult, Step, StepResult


class Console:
    """Centralized console output formatting."""

    def __init__(self, debug: bool = False, quiet: bool = False):
        """
        Initialize console formatter.

        Args:
            debug: If True, show detailed output including stack traces
            quiet: If True, print nothing but errors; tool output is untouched
        """
        self.debug = debug
        self.quiet = quiet

    def _out(self, message: str = "") -> None:
        if not self.quiet:
            print(message, flush=True)

    def print_run_started(
        self,
        repository: str,
        revision: Optional[str],
        deploy: str,
        step_count: int,
    ) -> None:
        """Print run start information."""
        self._out("\nRUN STARTED")
        self._out(f"Repository: {repository}")
        if revision:
            self._out(f"Revision: {revision}")
        self._out(f"Deploy: {deploy}")
        self._out(f"Steps: {step_count}")
        self._out()

    def print_step(self, index: int, total: int, step: Step) -> None:
        """Print step start message."""
        self._out(f"\nSTEP {index}/{total}: {step.name}")
        self._out(f"$ {step.run}")

    def print_step_done(self, result: StepResult) -> None:
        """Print the status line after a step finishes."""
        if result.ok:
            self._out(f"STATUS: success ({result.duration:.1f}s)")

    def print_failure(
        self,
        name: str,
        reason: str,
        exit_code: Optional[int] = None,
        hint: Optional[str] = None,
    ) -> None:
        """
        Print failure message.

        Args:
            name: Step name
            reason: Failure reason/error message
            exit_code: Optional exit code
            hint: Optional hint for user
        """
        if self.quiet:
            return
        print(f"STEP FAILED: {name}", file=sys.stderr)
        if exit_code is not None:
            print(f"Exit code: {exit_code}", file=sys.stderr)
        if hint:
            print(f"Hint: {hint}", file=sys.stderr)
        if self.debug:
            print(f"Error details: {reason}", file=sys.stderr)

    def print_plan(self, deploy: Deploy) -> None:
        """Print the ordered steps of a deploy without running them."""
        print(f"PLAN: {deploy.name}")
        for i, step in enumerate(deploy.steps, start=1):
            where = f" (cwd: {step.cwd})" if step.cwd else ""
            print(f"  {i}. {step.name}: {step.run}{where}")
        for key in sorted(deploy.env):
            print(f"  env {key}={deploy.env[key]}")

    def print_results(self, result: RunResult) -> None:
        """Print final results summary."""
        self._out("\n" + "=" * 40)
        self._out("RESULTS")
        self._out("=" * 40)
        for r in result.results:
            status_display = "SUCCESS" if r.ok else f"FAILED (exit {r.exit_code})"
            self._out(f"  {r.name}: {status_display}")
        for name in result.skipped:
            self._out(f"  {name}: NOT RUN")
        self._out(f"Duration: {result.duration:.1f}s")

    def print_error(
        self,
        title: str,
        message: str,
        details: Optional[list[str]] = None,
        suggestion: Optional[str] = None,
    ) -> None:
        """
        Print structured error message.

        Args:
            title: Error title
            message: Main error message
            details: Optional list of detail lines
            suggestion: Optional suggestion for user
        """
        print(f"\nERROR: {title}", file=sys.stderr)
        print(f"{message}", file=sys.stderr)
        if details:
            for detail in details:
                print(f"  {detail}", file=sys.stderr)
        if suggestion:
            print(f"\n{suggestion}", file=sys.stderr)

    def print_exception(self, exc: Exception) -> None:
        """Print exception, with full traceback only in debug mode."""
        if self.debug:
            import traceback
            traceback.print_exc()
        else:
            print(f"Error: {exc}", file=sys.stderr)

    def print_info(self, message: str) -> None:
        """Print informational message."""
        self._out(message)

    def print_debug(self, message: str) -> None:
        """Print debug message (only if debug mode enabled)."""
        if self.debug:
            print(f"[DEBUG] {message}", file=sys.stderr)


# Global console instance (will be initialized by CLI)
_console: Optional[Console] = None


def get_console() -> Console:
    """Get the global console instance."""
    global _console
    if _console is None:
        _console = Console()
    return _console


def set_console(console: Console) -> None:
    """Set the global console instance."""
    global _console
    _console = console
