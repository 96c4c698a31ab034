# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from renderbuild.config import load_settings
from renderbuild.git_facts.git import current_revision, repository_name
from renderbuild.model import Deploy
from renderbuild.runner import DeployError, load_workflow, preflight, run_deploy
from renderbuild.step_workflows.rails import rails_build
from renderbuild.ui.console import Console, get_console, set_console

# Both are part of how a deploy is authored (which steps, where they run),
# not knobs chosen per deploy.
WORKFLOW_HELP = "Authored workflow file defining the steps (defaults to the built-in Rails build)"
WORKDIR_HELP = "Directory the authored steps run in (default: current directory)"


def resolve_deploy(workflow: str | None) -> Deploy:
    """
    The deploy to run: a workflow file if one was given, otherwise the
    built-in Rails build.

    Raises:
        SystemExit: If the workflow file cannot be loaded
    """
    console = get_console()

    if not workflow:
        return rails_build()

    workflow_path = Path(workflow)
    if not workflow_path.exists() and workflow_path.suffix != ".py":
        workflow_path = Path(str(workflow_path) + ".py")

    try:
        return load_workflow(workflow_path)
    except FileNotFoundError:
        console.print_error(
            "Workflow file not found",
            f"Could not find workflow file: {workflow}",
            suggestion="Run the built-in Rails build by omitting --workflow, or point at an existing file:\n  renderbuild run --workflow deploy_workflow.py",
        )
        sys.exit(1)
    except Exception as e:
        # Syntax errors, NameErrors and anything raised by workflow() itself.
        console.print_error(
            "Invalid workflow",
            f"Could not load a deploy from {workflow_path}",
            details=[f"{type(e).__name__}: {e}"],
        )
        if console.debug:
            console.print_exception(e)
        sys.exit(1)


@click.group(invoke_without_command=True)
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.option(
    "--verbose",
    is_flag=True,
    default=False,
    help="Narrate the run (header, step markers, results); by default only the tools' own output is shown",
)
@click.pass_context
def cli(ctx, debug, verbose):
    """renderbuild: fail-fast build and deploy runner."""
    settings = load_settings()
    debug = debug or settings.debug
    verbose = verbose or settings.verbose or debug

    console = Console(debug=debug, quiet=not verbose)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug
    ctx.obj["settings"] = settings

    # No subcommand: behave like the plain build script.
    if ctx.invoked_subcommand is None:
        ctx.invoke(run)


@cli.command()
@click.option("--workflow", default=None, help=WORKFLOW_HELP)
@click.option("--workdir", default=None, help=WORKDIR_HELP)
@click.pass_context
def run(ctx, workflow, workdir):
    """
    Run the deploy steps in order, stopping at the first failure.

    Takes no deploy-time arguments: the step list and its directory are fixed
    when the workflow is written. --workflow/--workdir only point at that
    authored definition.
    """
    console = get_console()
    settings = ctx.obj["settings"]
    workflow = workflow or settings.workflow
    workdir = workdir or settings.workdir

    deploy = resolve_deploy(workflow)

    try:
        preflight(deploy, Path(workdir).expanduser().resolve())

        console.print_run_started(
            repository=repository_name(workdir),
            revision=current_revision(workdir),
            deploy=deploy.name,
            step_count=len(deploy.steps),
        )

        result = run_deploy(deploy, workdir=workdir, console=console)

        console.print_results(result)
        sys.exit(result.exit_code)

    except KeyboardInterrupt:
        console.print_info("\nInterrupted by user")
        sys.exit(130)
    except DeployError as e:
        console.print_error(
            e.kind,
            e.message,
            details=[f"{k}: {v}" for k, v in e.details.items()],
        )
        sys.exit(1)
    except Exception as e:
        console.print_exception(e)
        sys.exit(1)


@cli.command()
@click.option("--workflow", default=None, help=WORKFLOW_HELP)
@click.pass_context
def plan(ctx, workflow):
    """Print the steps that would run, without running them."""
    settings = ctx.obj["settings"]
    deploy = resolve_deploy(workflow or settings.workflow)
    get_console().print_plan(deploy)


if __name__ == "__main__":
    cli()
