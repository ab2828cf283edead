"""Plan command - show what apply would change."""

import json
import sys
import click
from ...declare.loader import load_declaration
from ...planning.planner import plan as build_plan
from ...presentation.human_formatter import format_plan
from ...state.store import JsonFileStateStore
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import format_error, load_cli_config, resolve_file_path, resolve_state_path, echo_safe

logger = get_logger("cli.plan")

EXIT_NO_CHANGES = 0
EXIT_ERROR = 1
EXIT_CHANGES_PENDING = 2


@click.command()
@click.argument('declaration', type=click.Path(exists=False))
@click.option('--state', '-s', type=click.Path(), help='State file (default from config: .stackplan/state.json)')
@click.option('--config', 'config_path', type=click.Path(), help='Extra config file layered over user/project config')
@click.option('--json', 'json_output', is_flag=True, help='Output the plan as JSON')
@click.option('--quiet', is_flag=True, help='Suppress progress messages')
@click.option('--verbose', '-v', is_flag=True, help='Debug logging')
def plan(declaration, state, config_path, json_output, quiet, verbose):
    """
    Plan a stack declaration against its last applied state.

    Exit code 0 means no changes, 2 means changes are pending, 1 means
    the declaration or state could not be processed.
    """
    try:
        try:
            declaration_path = resolve_file_path(declaration)
        except FileNotFoundError as e:
            click.echo(format_error(str(e)), err=True)
            sys.exit(EXIT_ERROR)

        config = load_cli_config(config_path, verbose)
        store = JsonFileStateStore(resolve_state_path(state, config))

        if not quiet:
            click.echo(f"Loading declaration: {declaration_path}", err=True)

        graph = load_declaration(str(declaration_path))
        stack_plan = build_plan(graph, store.load())

        if json_output:
            click.echo(json.dumps(stack_plan.model_dump(mode="json"), indent=2))
        else:
            echo_safe(format_plan(stack_plan))

    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(EXIT_ERROR)
    except Exception as e:
        logger.error(f"Unexpected error: {e}", exc_info=True)
        click.echo(format_error(f"Plan failed: {e}"), err=True)
        sys.exit(EXIT_ERROR)

    sys.exit(EXIT_NO_CHANGES if stack_plan.is_empty else EXIT_CHANGES_PENDING)
