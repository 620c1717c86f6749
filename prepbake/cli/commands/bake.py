"""CLI command for baking new data with a trained pipeline."""

import sys

import click

from prepbake import load_pipeline
from prepbake.cli.io import read_csv, write_csv
from prepbake.core.exceptions import PrepBakeError
from prepbake.core.state_backend import LocalStateBackend


@click.command()
@click.argument("name")
@click.argument("data_path", type=click.Path(exists=True))
@click.option(
    "--state-dir",
    default=".state",
    help="Directory for trained pipeline files (default: .state)",
)
@click.option(
    "--output",
    "-o",
    default=None,
    help="Output CSV path (default: stdout)",
)
def bake(name: str, data_path: str, state_dir: str, output: str | None):
    """Apply a trained pipeline to a CSV file.

    Examples:

        prepbake bake biomass test.csv
        prepbake bake biomass test.csv -o baked.csv
    """
    try:
        pipeline = load_pipeline(name, LocalStateBackend(state_dir))
        baked = pipeline.bake(read_csv(data_path))
        write_csv(baked.to_arrow(), output)

        if output:
            click.echo(f"✓ Wrote {baked.row_count} rows to {output}")

    except PrepBakeError as e:
        click.echo(f"✗ Bake failed: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"✗ Unexpected error: {e}", err=True)
        sys.exit(1)
