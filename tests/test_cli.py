from __future__ import annotations

from pathlib import Path

import pytest
from click.testing import CliRunner

from renderbuild import cli as cli_module
from renderbuild.cli import cli
from renderbuild.dsl import deploy, sh


@pytest.fixture
def runner() -> CliRunner:
    return CliRunner()


@pytest.fixture
def workflow_file(tmp_path: Path, trail: Path):
    """Write a workflow whose steps record themselves; `codes` are exit codes."""

    def _write(*codes: int) -> Path:
        steps = ",\n".join(
            f"    sh('step{i}', \"echo step{i} >> '{trail}'; exit {code}\")"
            for i, code in enumerate(codes, start=1)
        )
        path = tmp_path / "deploy_workflow.py"
        path.write_text(f"from renderbuild.dsl import sh\nSTEPS = [\n{steps},\n]\n")
        return path

    return _write


def test_run_success_exits_zero(runner, workflow_file, tmp_path, ran) -> None:
    path = workflow_file(0, 0, 0, 0)

    result = runner.invoke(cli, ["--verbose", "run", "--workflow", str(path), "--workdir", str(tmp_path)])

    assert result.exit_code == 0
    assert ran() == ["step1", "step2", "step3", "step4"]
    assert "RUN STARTED" in result.output
    assert "step4: SUCCESS" in result.output


def test_run_propagates_failing_exit_code(runner, workflow_file, tmp_path, ran) -> None:
    path = workflow_file(0, 0, 0, 1)

    result = runner.invoke(cli, ["--verbose", "run", "--workflow", str(path), "--workdir", str(tmp_path)])

    assert result.exit_code == 1
    assert ran() == ["step1", "step2", "step3", "step4"]
    assert "step4: FAILED (exit 1)" in result.output


def test_first_step_failure_stops_everything(runner, workflow_file, tmp_path, ran) -> None:
    path = workflow_file(127, 0, 0, 0)

    result = runner.invoke(cli, ["--verbose", "run", "--workflow", str(path), "--workdir", str(tmp_path)])

    assert result.exit_code == 127
    assert ran() == ["step1"]
    assert "step2: NOT RUN" in result.output


def test_no_arguments_runs_built_in_deploy(runner, monkeypatch, tmp_path, record, ran) -> None:
    monkeypatch.setattr(
        cli_module,
        "rails_build",
        lambda: deploy("rails-build", record("install"), record("migrate", code=3)),
    )
    monkeypatch.chdir(tmp_path)

    result = runner.invoke(cli, [])

    assert result.exit_code == 3
    assert ran() == ["install", "migrate"]
    # Like the shell script: only the tools speak, even on failure.
    assert result.output == ""


def test_run_is_silent_by_default(runner, workflow_file, tmp_path) -> None:
    path = workflow_file(0)

    result = runner.invoke(cli, ["run", "--workflow", str(path), "--workdir", str(tmp_path)])

    assert result.exit_code == 0
    assert result.output == ""


def test_workflow_and_workdir_from_environment(runner, monkeypatch, workflow_file, tmp_path, ran) -> None:
    path = workflow_file(0, 0)
    monkeypatch.setenv("RENDERBUILD_WORKFLOW", str(path))
    monkeypatch.setenv("RENDERBUILD_WORKDIR", str(tmp_path))

    result = runner.invoke(cli, [])

    assert result.exit_code == 0
    assert ran() == ["step1", "step2"]
    assert result.output == ""


def test_missing_workflow_exits_one(runner, tmp_path) -> None:
    result = runner.invoke(cli, ["run", "--workflow", str(tmp_path / "nope")])

    assert result.exit_code == 1
    assert "Workflow file not found" in result.output


def test_invalid_workflow_exits_one(runner, tmp_path) -> None:
    path = tmp_path / "bad.py"
    path.write_text("X = 1\n")

    result = runner.invoke(cli, ["run", "--workflow", str(path)])

    assert result.exit_code == 1
    assert "Invalid workflow" in result.output


def test_bad_workdir_exits_one(runner, workflow_file, tmp_path, ran) -> None:
    path = workflow_file(0)

    result = runner.invoke(cli, ["run", "--workflow", str(path), "--workdir", str(tmp_path / "missing")])

    assert result.exit_code == 1
    assert "BadWorkingDirectory" in result.output
    assert ran() == []


def test_interrupt_exits_130(runner, monkeypatch, tmp_path) -> None:
    def _interrupt(*args, **kwargs):
        raise KeyboardInterrupt

    monkeypatch.setattr(cli_module, "run_deploy", _interrupt)
    monkeypatch.setattr(cli_module, "rails_build", lambda: deploy("x", sh("a", "true")))

    result = runner.invoke(cli, ["--verbose", "run", "--workdir", str(tmp_path)])

    assert result.exit_code == 130
    assert "Interrupted by user" in result.output


def test_plan_lists_default_steps_without_running(runner, monkeypatch) -> None:
    def _explode(*args, **kwargs):
        raise AssertionError("plan must not execute steps")

    monkeypatch.setattr(cli_module, "run_deploy", _explode)

    result = runner.invoke(cli, ["plan"])

    assert result.exit_code == 0
    assert "PLAN: rails-build" in result.output
    lines = [line.strip() for line in result.output.splitlines()]
    assert "1. Install dependencies: bundle install" in lines
    assert "2. Precompile assets: bundle exec rake assets:precompile" in lines
    assert "3. Clean assets: bundle exec rake assets:clean" in lines
    assert "4. Migrate database: bundle exec rake db:migrate" in lines


def test_syntax_error_workflow_is_reported(runner, tmp_path) -> None:
    path = tmp_path / "broken.py"
    path.write_text("def workflow(:\n")

    result = runner.invoke(cli, ["run", "--workflow", str(path)])

    assert result.exit_code == 1
    assert "Invalid workflow" in result.output
    assert "SyntaxError" in result.output


def test_workflow_that_raises_is_reported_by_plan(runner, tmp_path) -> None:
    path = tmp_path / "boom.py"
    path.write_text("def workflow():\n    raise RuntimeError('no')\n")

    result = runner.invoke(cli, ["plan", "--workflow", str(path)])

    assert result.exit_code == 1
    assert "Invalid workflow" in result.output
    assert "RuntimeError: no" in result.output


def test_bad_workdir_fails_before_run_header(runner, workflow_file, tmp_path) -> None:
    path = workflow_file(0)

    result = runner.invoke(
        cli, ["--verbose", "run", "--workflow", str(path), "--workdir", str(tmp_path / "missing")]
    )

    assert result.exit_code == 1
    assert "BadWorkingDirectory" in result.output
    assert "RUN STARTED" not in result.output


def test_verbose_from_environment(runner, monkeypatch, workflow_file, tmp_path) -> None:
    path = workflow_file(0)
    monkeypatch.setenv("RENDERBUILD_VERBOSE", "1")

    result = runner.invoke(cli, ["run", "--workflow", str(path), "--workdir", str(tmp_path)])

    assert result.exit_code == 0
    assert "STEP 1/1: step1" in result.output


def test_run_help_marks_options_as_authored(runner) -> None:
    result = runner.invoke(cli, ["run", "--help"])

    assert result.exit_code == 0
    assert "no deploy-time arguments" in result.output
    assert "Authored workflow file" in result.output
