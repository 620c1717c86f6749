"""CLI command for prepping (training) a pipeline."""

import sys

import click

from prepbake import save_pipeline
from prepbake.cli.io import read_csv
from prepbake.core.exceptions import PrepBakeError
from prepbake.core.logging import configure_logging
from prepbake.core.state_backend import LocalStateBackend
from prepbake.models.loader import load_pipeline_config
from prepbake.steps.pipeline import Pipeline


@click.command()
@click.argument("pipeline_path", type=click.Path(exists=True))
@click.argument("training_path", type=click.Path(exists=True))
@click.option(
    "--state-dir",
    default=".state",
    help="Directory for trained pipeline files (default: .state)",
)
@click.option(
    "--log-level",
    default=None,
    type=click.Choice(["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]),
    help="Log level (default: the pipeline's runtime.log_level)",
)
@click.option(
    "--json-logs",
    is_flag=True,
    help="Use JSON format for logs",
)
def prep(pipeline_path: str, training_path: str, state_dir: str, log_level: str | None, json_logs: bool):
    """Train a pipeline on a CSV file and save the trained state.

    Examples:

        prepbake prep pipeline.yaml train.csv
        prepbake prep pipeline.yaml train.csv --state-dir /tmp/state
    """
    try:
        config = load_pipeline_config(pipeline_path)
        configure_logging(
            level=log_level or config.runtime.log_level,
            json_format=json_logs or config.runtime.json_logs,
            pipeline_name=config.name,
        )

        pipeline = Pipeline.from_config(config)
        trained = pipeline.prep(read_csv(training_path))
        name = save_pipeline(trained, LocalStateBackend(state_dir))

        click.echo(f"✓ Pipeline '{name}' prepped ({len(trained)} steps)")
        for number, step in enumerate(trained.steps, start=1):
            click.echo(f"    {number}. {step}")

    except PrepBakeError as e:
        click.echo(f"✗ Prep failed: {e}", err=True)
        sys.exit(1)
    except Exception as e:
        click.echo(f"✗ Unexpected error: {e}", err=True)
        sys.exit(1)
