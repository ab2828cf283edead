"""Version command - show StackPlan version."""

import click
from ... import __version__


@click.command()
def version():
    """Show StackPlan version."""
    click.echo(f"stackplan version {__version__}")
