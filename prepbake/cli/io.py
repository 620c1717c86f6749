"""CSV input/output for CLI commands."""

import io

import click
import pyarrow as pa
import pyarrow.csv as pacsv


def read_csv(path: str) -> pa.Table:
    """Read a CSV file into an Arrow table (empty cells become nulls)."""
    convert_options = pacsv.ConvertOptions(strings_can_be_null=True)
    return pacsv.read_csv(path, convert_options=convert_options)


def write_csv(table: pa.Table, output: str | None) -> None:
    """Write a table as CSV to ``output``, or to stdout when it's None."""
    if output:
        pacsv.write_csv(table, output)
        return
    buffer = io.BytesIO()
    pacsv.write_csv(table, buffer)
    click.echo(buffer.getvalue().decode("utf-8"), nl=False)
