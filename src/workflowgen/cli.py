# cli.py
from __future__ import annotations

import sys
from pathlib import Path

import click

from workflowgen.compiler import compile_workflow
from workflowgen.dag import validate_jobs
from workflowgen.errors import DriftError, WorkflowError
from workflowgen.generate import check_workflows, generate_workflows, workflows_dir
from workflowgen.git_facts.git import repo_root_or_cwd
from workflowgen.loader import find_workflow_files, load_workflow
from workflowgen.model import Workflow
from workflowgen.settings import load_settings
from workflowgen.ui.console import Console, set_console, get_console


def discover_workflow(workflow_arg: str | None) -> Path:
    """
    Discover workflow file from argument, environment or default.

    Args:
        workflow_arg: Optional workflow argument from CLI

    Returns:
        Path to workflow file

    Raises:
        SystemExit: If workflow cannot be found or multiple workflows exist
    """
    console = get_console()

    configured = load_settings().workflow
    if workflow_arg is None and configured is not None:
        workflow_arg = str(configured)

    # If workflow is explicitly provided, use it
    if workflow_arg:
        workflow_path = Path(workflow_arg)
        if not workflow_path.exists() and not workflow_path.suffix:
            workflow_path = Path(str(workflow_path) + ".py")
        if not workflow_path.exists():
            console.print_error(
                "Workflow file not found",
                f"Could not find workflow file: {workflow_arg}",
                suggestion="Create a workflow file or specify a different path:\n  workflowgen generate --workflow my_workflow.py",
            )
            sys.exit(1)
        return workflow_path

    workflow_files = find_workflow_files()

    if len(workflow_files) == 0:
        console.print_error(
            "No workflow file found",
            "Could not find any workflow description.",
            details=[
                "Looked for:",
                "  workflowgen_workflow.py",
                "  *_workflow.py",
                "  *_workflow.json",
            ],
            suggestion="Create a workflow file:\n  workflowgen_workflow.py\n\nOr specify a workflow explicitly:\n  workflowgen generate --workflow my_workflow.py",
        )
        sys.exit(1)

    if len(workflow_files) > 1:
        file_list = "\n".join(f"  {f}" for f in workflow_files)
        console.print_error(
            "Multiple workflow files found",
            "Found multiple workflow files. Please specify which one to use:",
            details=[file_list],
            suggestion="Specify a workflow explicitly:\n  workflowgen generate --workflow workflowgen_workflow.py",
        )
        sys.exit(1)

    return workflow_files[0]


def _load(ctx: click.Context, workflow_arg: str | None) -> Workflow:
    console = get_console()
    workflow_path = discover_workflow(workflow_arg)
    console.print_debug(f"Loading workflow from {workflow_path}")

    try:
        workflow = load_workflow(workflow_path)
        console.print_stages(validate_jobs(workflow.jobs))
    except Exception as e:
        console.print_error("Invalid workflow", f"Could not load workflow from {workflow_path}", details=[str(e)])
        if ctx.obj.get("debug", False):
            console.print_exception(e)
        sys.exit(1)
    return workflow


def _resolve_base_dir(base_dir: str | None) -> Path:
    if base_dir:
        return Path(base_dir)
    configured = load_settings().base_dir
    if configured is not None:
        return configured
    return repo_root_or_cwd()


def _resolve_tool_command(tool_command: str | None) -> str:
    return tool_command or load_settings().tool_command


workflow_option = click.option(
    "--workflow",
    default=None,
    help="Workflow description (.py or .json; defaults to workflowgen_workflow.py if present)",
)
base_dir_option = click.option(
    "--base-dir",
    default=None,
    help="Directory holding .github/workflows (defaults to the git repository root)",
)
tool_command_option = click.option(
    "--tool-command",
    default=None,
    help="Build tool command used by tool steps (default: sbt, or $WORKFLOWGEN_TOOL_COMMAND)",
)


@click.group()
@click.option(
    "--debug",
    is_flag=True,
    default=False,
    help="Enable debug mode (show stack traces and detailed output)",
)
@click.pass_context
def cli(ctx, debug):
    """workflowgen: generate and verify GitHub Actions workflows."""
    console = Console(debug=debug)
    set_console(console)
    ctx.ensure_object(dict)
    ctx.obj["debug"] = debug


@cli.command()
@workflow_option
@base_dir_option
@tool_command_option
@click.pass_context
def generate(ctx, workflow, base_dir, tool_command):
    """Write ci.yml and clean.yml into .github/workflows."""
    console = get_console()
    wf_model = _load(ctx, workflow)
    target = _resolve_base_dir(base_dir)

    try:
        written = generate_workflows(wf_model, target, _resolve_tool_command(tool_command))
    except WorkflowError as e:
        console.print_error("Could not generate workflows", str(e))
        sys.exit(1)
    except OSError as e:
        console.print_exception(e)
        sys.exit(1)

    console.print_generated(written)


@cli.command()
@workflow_option
@base_dir_option
@tool_command_option
@click.pass_context
def check(ctx, workflow, base_dir, tool_command):
    """Fail if .github/workflows is out of date with the workflow description."""
    console = get_console()
    wf_model = _load(ctx, workflow)
    target = _resolve_base_dir(base_dir)

    try:
        checked = check_workflows(wf_model, target, _resolve_tool_command(tool_command))
    except DriftError as e:
        console.print_error("Workflows out of date", str(e), details=[str(workflows_dir(target))])
        sys.exit(1)
    except WorkflowError as e:
        console.print_error("Could not check workflows", str(e))
        sys.exit(1)
    except FileNotFoundError as e:
        console.print_error(
            "Workflow file missing",
            str(e),
            suggestion="Generate the workflows first:\n  workflowgen generate",
        )
        sys.exit(1)

    console.print_check_passed(checked)


@cli.command()
@workflow_option
@tool_command_option
@click.pass_context
def render(ctx, workflow, tool_command):
    """Print the generated ci.yml to stdout."""
    console = get_console()
    wf_model = _load(ctx, workflow)

    try:
        click.echo(compile_workflow(wf_model, _resolve_tool_command(tool_command)))
    except WorkflowError as e:
        console.print_error("Could not render workflow", str(e))
        sys.exit(1)


if __name__ == "__main__":
    cli()
