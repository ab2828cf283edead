"""Apply command - execute the plan against the provider."""

import json
import sys
import click
from ...config import load_executor_settings
from ...declare.loader import load_declaration
from ...execution.executor import apply_plan
from ...planning.planner import plan as build_plan
from ...presentation.human_formatter import format_apply_result, format_plan
from ...providers.simulated import SimulatedProvider
from ...state.store import JsonFileStateStore
from ...utils.errors import PartialApplyError, StackPlanError
from ...utils.logging import get_logger
from ..utils import format_error, load_cli_config, resolve_file_path, resolve_state_path, echo_safe

logger = get_logger("cli.apply")


@click.command()
@click.argument('declaration', type=click.Path(exists=False))
@click.option('--state', '-s', type=click.Path(), help='State file (default from config: .stackplan/state.json)')
@click.option('--config', 'config_path', type=click.Path(), help='Extra config file layered over user/project config')
@click.option('--concurrency', type=click.IntRange(min=1), help='Maximum actions in flight')
@click.option('--max-attempts', type=click.IntRange(min=1), help='Attempts per action on transient errors')
@click.option('--json', 'json_output', is_flag=True, help='Output the apply result as JSON')
@click.option('--quiet', is_flag=True, help='Suppress progress messages')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def apply(declaration, state, config_path, concurrency, max_attempts, json_output, quiet, verbose):
    """
    Apply a stack declaration.

    Runs against the bundled simulated provider, seeded with the resources
    already in state. Exit code 0 means every action succeeded; 1 means
    nothing ran or the apply stopped part way (progress is listed).
    """
    try:
        try:
            declaration_path = resolve_file_path(declaration)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(1)

        config = load_cli_config(config_path, verbose)
        settings = load_executor_settings(config, concurrency=concurrency, max_attempts=max_attempts)
        store = JsonFileStateStore(resolve_state_path(state, config))

        graph = load_declaration(str(declaration_path))
        prior_state = store.load()
        stack_plan = build_plan(graph, prior_state)

        if not quiet:
            echo_safe(format_plan(stack_plan), err=True)

        if stack_plan.is_empty:
            if json_output:
                click.echo(json.dumps({"stack": stack_plan.stack, "outcomes": [], "cancelled": False}, indent=2))
            sys.exit(0)

        provider = SimulatedProvider.from_state(prior_state)
        try:
            result = apply_plan(stack_plan, provider, store, settings)
        except PartialApplyError as e:
            if e.result is not None:
                _emit_result(e.result, json_output)
            click.echo(format_error(str(e), "Fix the failing resource and run apply again; "
                                             "completed actions are recorded in state."), err=True)
            sys.exit(1)

        _emit_result(result, json_output)
        if not json_output and not quiet:
            _emit_outputs(store)

    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Apply failed: {e}"), err=True)
        sys.exit(1)


def _emit_result(result, json_output: bool) -> None:
    if json_output:
        click.echo(json.dumps(result.model_dump(mode="json"), indent=2))
    else:
        echo_safe(format_apply_result(result))


def _emit_outputs(store: JsonFileStateStore) -> None:
    """Print public endpoints (dns_name outputs) recorded in state."""
    endpoints = [
        (node_id, entry.outputs["dns_name"])
        for node_id, entry in store.load().entries.items()
        if "dns_name" in entry.outputs
    ]
    if endpoints:
        click.echo("")
        click.echo("Outputs:")
        for node_id, dns_name in endpoints:
            click.echo(f"  {node_id}.dns_name = {dns_name}")
