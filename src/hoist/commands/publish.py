"""Publish command implementation."""

from pathlib import Path
import logging

import click
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.table import Table

from hoist.core.config import PublishConfig, UrlStrategy
from hoist.core.errors import HoistError, PartialUploadFailure
from hoist.core.manifest import write_manifest
from hoist.core.workflow import publish_release
from hoist.models.upload import PublishResult, UploadRequest

console = Console()


def parse_asset_option(value: str) -> UploadRequest:
    """Parse ``PATH`` or ``PATH=TYPE`` into an UploadRequest.

    The text after the last ``=`` is a content type only if it contains ``/``.
    """
    path, sep, content_type = value.rpartition("=")
    if sep and path and "/" in content_type:
        return UploadRequest(Path(path), content_type)
    return UploadRequest(Path(value))


def setup_logging(verbose: bool) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(message)s",
        handlers=[RichHandler(console=console, show_path=False)],
        force=True,
    )
    # httpx logs every request at INFO
    logging.getLogger("httpx").setLevel(logging.DEBUG if verbose else logging.WARNING)


def print_result(result: PublishResult) -> None:
    """Print the release and its asset descriptors."""
    release = result.release
    console.print(
        f"[green]✓[/green] Release [bold]{release.tag_name}[/bold] "
        f"(id {release.id}): {release.html_url}"
    )

    if result.assets:
        table = Table(show_header=True, header_style="bold")
        table.add_column("Name")
        table.add_column("Content type")
        table.add_column("State")
        table.add_column("URL")
        for asset in result.assets:
            table.add_row(
                asset.metadata.get("Name", ""),
                asset.metadata.get("ContentType", ""),
                asset.metadata.get("State", ""),
                asset.url,
            )
        console.print(table)
    elif not result.failures:
        console.print("[dim]No assets uploaded[/dim]")

    for outcome in result.failures:
        console.print(f"[red]✗[/red] {outcome.request.path}: {escape(str(outcome.error))}")


@click.command()
@click.argument("repository")
@click.argument("tag_name")
@click.option(
    "--asset",
    "-a",
    "assets",
    multiple=True,
    help="File to upload, optionally with a content type: PATH or PATH=TYPE",
)
@click.option("--notes", "-n", "notes_path", help="File with the release notes body")
@click.option("--token", envvar="GITHUB_TOKEN", help="GitHub token (default: $GITHUB_TOKEN)")
@click.option("--anonymous", is_flag=True, help="Send requests without credentials")
@click.option(
    "--url-strategy",
    type=click.Choice([s.value for s in UrlStrategy]),
    help="Report the API asset URL (echo) or a public download URL (synthesized)",
)
@click.option(
    "--deadline",
    type=click.FloatRange(min=0, min_open=True),
    help="Overall time limit in seconds",
)
@click.option("--max-workers", type=click.IntRange(min=1), help="Maximum concurrent uploads")
@click.option(
    "--output",
    "-o",
    "output",
    type=click.Path(dir_okay=False, path_type=Path),
    help="Write the publish result to this file",
)
@click.option(
    "--format",
    "fmt",
    type=click.Choice(["yaml", "json"]),
    default="yaml",
    show_default=True,
    help="Format of the --output file",
)
@click.option("--verbose", "-v", is_flag=True, help="Show debug output")
def publish(
    repository: str,
    tag_name: str,
    assets: tuple[str, ...],
    notes_path: str | None,
    token: str | None,
    anonymous: bool,
    url_strategy: str | None,
    deadline: float | None,
    max_workers: int | None,
    output: Path | None,
    fmt: str,
    verbose: bool,
):
    """Create a GitHub release and upload assets to it.

    REPOSITORY is in owner/repo format. TAG_NAME is the tag to release.

    Examples:

        hoist publish acme/widgets v1.0.0 -a dist/widgets.zip

        hoist publish acme/widgets v1.0.0 -a NOTES.md=text/plain -n NOTES.md
    """
    setup_logging(verbose)

    try:
        config = PublishConfig.default()
    except HoistError as e:
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)

    if anonymous:
        config.use_explicit_credentials = False
    if url_strategy:
        config.url_strategy = UrlStrategy.parse(url_strategy)
    if deadline is not None:
        config.deadline = deadline
    if max_workers is not None:
        config.max_workers = max_workers

    requests = [parse_asset_option(value) for value in assets]

    console.print(f"[blue]Publishing[/blue] {repository} {tag_name}...")

    try:
        result = publish_release(
            repository,
            tag_name,
            requests,
            notes_path=notes_path,
            config=config,
            token=token,
        )
    except PartialUploadFailure as e:
        print_result(e.result)
        if output:
            write_manifest(e.result, output, fmt)
        console.print(f"[red]Error:[/red] {escape(str(e))}")
        raise SystemExit(1)
    except HoistError as e:
        stage = f" ({e.stage})" if e.stage else ""
        console.print(f"[red]Error{stage}:[/red] {escape(str(e))}")
        raise SystemExit(1)

    print_result(result)
    if output:
        write_manifest(result, output, fmt)
        console.print(f"[dim]Wrote {output}[/dim]")
