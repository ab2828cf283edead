"""Template command - render built-in templates as declarations."""

import sys
from pathlib import Path
import click
from pydantic import ValidationError
from ...declare.loader import dump_declaration
from ...templates.web_service import WebServiceOptions, web_service_template
from ...utils.errors import StackPlanError
from ..utils import format_error


@click.group()
def template():
    """Render built-in stack templates."""
    pass


@template.command('web-service')
@click.option('--name', default='url-shortener', show_default=True, help='Stack name')
@click.option('--instance-type', default='t3a.medium', show_default=True, help='Instance type')
@click.option('--app-port', type=int, default=3333, show_default=True, help='Port the service listens on')
@click.option('--max-azs', type=int, default=2, show_default=True, help='Availability zones (one public subnet each)')
@click.option('--load-balancer/--no-load-balancer', default=True, help='Put a load balancer in front of the instance')
@click.option('--cdn/--no-cdn', default=True, help='Put a CDN in front of the load balancer')
@click.option('--output', '-o', type=click.Path(), help='Write the declaration to a file')
def web_service(name, instance_type, app_port, max_azs, load_balancer, cdn, output):
    """Network, instance, and optionally load balancer and CDN."""
    try:
        options = WebServiceOptions(
            name=name,
            instance_type=instance_type,
            app_port=app_port,
            max_azs=max_azs,
            with_load_balancer=load_balancer,
            with_cdn=cdn,
        )
        text = dump_declaration(web_service_template(options))
    except ValidationError as e:
        click.echo(format_error(f"Invalid template options: {e}"), err=True)
        sys.exit(1)
    except StackPlanError as e:
        click.echo(format_error(str(e), "Use --no-cdn together with --no-load-balancer."), err=True)
        sys.exit(1)

    if output:
        output_path = Path(output)
        output_path.parent.mkdir(parents=True, exist_ok=True)
        with open(output_path, 'w', encoding='utf-8') as f:
            f.write(text)
        click.echo(f"Declaration written to: {output_path}", err=True)
    else:
        click.echo(text)
