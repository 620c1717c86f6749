"""CLI command for summarizing a trained pipeline."""

import sys

import click

from prepbake import load_pipeline
from prepbake.cli.io import write_csv
from prepbake.core.exceptions import PrepBakeError
from prepbake.core.state_backend import LocalStateBackend


@click.command()
@click.argument("name")
@click.option(
    "--number",
    "-n",
    type=int,
    default=None,
    help="1-based step number to summarize (default: all steps)",
)
@click.option(
    "--state-dir",
    default=".state",
    help="Directory for trained pipeline files (default: .state)",
)
def tidy(name: str, number: int | None, state_dir: str):
    """Print a CSV summary of a trained pipeline or one of its steps.

    Examples:

        prepbake tidy biomass
        prepbake tidy biomass --number 2
    """
    try:
        pipeline = load_pipeline(name, LocalStateBackend(state_dir))
        write_csv(pipeline.tidy(number), None)

    except PrepBakeError as e:
        click.echo(f"✗ Tidy failed: {e}", err=True)
        sys.exit(1)
