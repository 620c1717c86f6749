"""CLI command for validating pipeline definitions."""

import sys

import click

from prepbake import from_yaml
from prepbake.core.exceptions import RecipeError


@click.command()
@click.argument("pipeline_path", type=click.Path(exists=True))
def validate(pipeline_path: str):
    """Validate a pipeline YAML file.

    Checks:
    - YAML syntax
    - Pipeline schema validation
    - Step types and step arguments

    Examples:

        prepbake validate pipeline.yaml
    """
    try:
        pipeline = from_yaml(pipeline_path)

        click.echo(f"✓ Pipeline '{pipeline.name}' is valid")
        click.echo(f"  Outcomes: {', '.join(pipeline.outcomes) or '(none)'}")
        click.echo(f"  Steps: {len(pipeline)}")
        for number, step in enumerate(pipeline.steps, start=1):
            click.echo(f"    {number}. {step}")

    except RecipeError as e:
        click.echo(f"✗ Pipeline validation failed: {e}", err=True)
        sys.exit(1)
