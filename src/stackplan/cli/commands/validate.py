"""Validate and graph commands - check a declaration without touching state."""

import sys
import click
from ...declare.loader import load_declaration
from ...presentation.human_formatter import format_graph
from ...utils.errors import StackPlanError
from ...utils.logging import get_logger
from ..utils import format_error, resolve_file_path

logger = get_logger("cli.validate")


def _load_valid_graph(declaration):
    declaration_path = resolve_file_path(declaration)
    graph = load_declaration(str(declaration_path))
    graph.validate()
    return graph


@click.command()
@click.argument('declaration', type=click.Path(exists=False))
def validate(declaration):
    """Validate references, cycles and per-kind schemas of a declaration."""
    try:
        graph = _load_valid_graph(declaration)
    except FileNotFoundError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    click.echo(f"Declaration valid: stack '{graph.name}' with {len(graph)} resources")


@click.command()
@click.argument('declaration', type=click.Path(exists=False))
def graph(declaration):
    """Show resources in apply order with their references."""
    try:
        deployment_graph = _load_valid_graph(declaration)
    except FileNotFoundError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)
    except StackPlanError as e:
        click.echo(format_error(str(e)), err=True)
        sys.exit(1)

    click.echo(format_graph(deployment_graph))
