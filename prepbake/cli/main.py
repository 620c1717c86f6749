"""Main CLI entry point for prepbake."""

import click

from prepbake import __version__
from prepbake.cli.commands.bake import bake
from prepbake.cli.commands.list_steps import list_steps
from prepbake.cli.commands.prep import prep
from prepbake.cli.commands.tidy import tidy
from prepbake.cli.commands.validate import validate


@click.group()
@click.version_option(version=__version__)
def main():
    """prepbake - prep/bake preprocessing steps for tabular data."""
    pass


# Register commands
main.add_command(list_steps)
main.add_command(validate)
main.add_command(prep)
main.add_command(bake)
main.add_command(tidy)


if __name__ == "__main__":
    main()
