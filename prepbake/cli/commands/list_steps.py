"""CLI command for listing available step types."""

import click

from prepbake.steps import list_step_types


@click.command("list")
def list_steps():
    """List available step types.

    Shows all registered step types, including legacy aliases.
    """
    click.echo("Available Steps:")
    for step_type in list_step_types():
        click.echo(f"  - {step_type}")
