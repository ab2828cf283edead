"""Main CLI entry point for StackPlan."""

import click
from .commands.plan import plan
from .commands.apply import apply
from .commands.validate import validate, graph
from .commands.template import template
from .commands.version import version as version_command
from .. import __version__


@click.group()
@click.version_option(version=__version__, prog_name="stackplan", message="%(prog)s version %(version)s")
def cli():
    """StackPlan - Plan and apply declared infrastructure in dependency order."""
    pass


cli.add_command(plan)
cli.add_command(apply)
cli.add_command(validate)
cli.add_command(graph)
cli.add_command(template)
cli.add_command(version_command)
