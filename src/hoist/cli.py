"""CLI entry point for hoist."""

import click

from hoist import __version__
from hoist.commands import publish


@click.group()
@click.version_option(version=__version__, prog_name="hoist")
def main():
    """Hoist - publish GitHub releases from a build pipeline.

    Create a release for a tag and attach build artifacts to it.

    Examples:

        hoist publish acme/widgets v1.0.0 -a dist/widgets.zip

        hoist publish acme/widgets v1.0.0 -a dist/widgets.zip -n CHANGES.md -o release.yaml
    """
    pass


# Register commands
main.add_command(publish.publish)


if __name__ == "__main__":
    main()
