"""Release publication workflow: create a release, then upload its assets."""

from pathlib import Path
import logging
import time

from hoist.core.config import PublishConfig, resolve_credentials
from hoist.core.errors import (
    ConfigError,
    HoistError,
    NotesReadError,
    PartialUploadFailure,
)
from hoist.core.github import GitHubClient, parse_repo_spec
from hoist.core.mapper import map_asset
from hoist.core.uploader import upload_assets
from hoist.models.upload import PublishResult, UploadRequest


logger = logging.getLogger(__name__)


def read_notes(notes_path: str | Path | None) -> str | None:
    """Read the release notes file in full, or return None without one."""
    if notes_path is None:
        return None
    try:
        with open(notes_path, encoding="utf-8") as f:
            return f.read()
    except (OSError, UnicodeDecodeError) as e:
        raise NotesReadError(
            f"Cannot read release notes {notes_path}: {e}",
            stage="notes",
            path=str(notes_path),
        )


def _as_request(item) -> UploadRequest:
    if isinstance(item, UploadRequest):
        return item
    if isinstance(item, (str, Path)):
        return UploadRequest(Path(item))
    path, content_type = item
    return UploadRequest(Path(path), content_type)


def publish_release(
    repository: str,
    tag_name: str,
    assets=(),
    notes_path: str | Path | None = None,
    config: PublishConfig | None = None,
    token: str | None = None,
    client: GitHubClient | None = None,
) -> PublishResult:
    """Create a GitHub release for ``tag_name`` and upload ``assets`` to it.

    Args:
        repository: ``owner/repo``
        tag_name: Tag the release is created for
        assets: UploadRequest objects, paths, or (path, content_type) pairs
        notes_path: Optional file holding the release body
        config: Publish configuration (defaults to PublishConfig.default())
        token: Explicit token; otherwise taken from the environment
        client: Client to use instead of building one from the credentials

    Returns:
        PublishResult with one outcome and descriptor per asset, in input order

    Raises:
        ConfigError, NotesReadError: before anything is sent to GitHub
        AuthError, ConflictError, TransportError: release creation failed and
            no upload was attempted
        PartialUploadFailure: the release exists but at least one upload failed
    """
    config = config or PublishConfig.default()
    started = time.monotonic()

    owner, repo = parse_repo_spec(repository)
    if not tag_name or not tag_name.strip():
        raise ConfigError("A tag name is required", stage="config")
    requests = [_as_request(item) for item in assets]

    body = read_notes(notes_path)

    owns_client = client is None
    if owns_client:
        credentials = resolve_credentials(config, token)
        client = GitHubClient(credentials, config)

    try:
        try:
            release = client.create_release(
                owner, repo, tag_name, body, timeout=_remaining(config, started)
            )
        except HoistError as e:
            e.stage = "create-release"
            raise
        logger.info("Created release %s at %s", release.id, release.html_url)

        outcomes = upload_assets(
            client,
            release,
            requests,
            max_workers=config.max_workers,
            timeout=_remaining(config, started),
        )
    finally:
        if owns_client:
            client.close()

    result = PublishResult(release=release, outcomes=outcomes)
    for outcome in outcomes:
        if outcome.ok:
            result.assets.append(
                map_asset(
                    owner,
                    repo,
                    release,
                    outcome.asset,
                    strategy=config.url_strategy,
                    download_host=config.download_host,
                )
            )

    if not result.ok:
        raise PartialUploadFailure(result)
    return result


def _remaining(config: PublishConfig, started: float) -> float | None:
    """Seconds left before the overall deadline, or None without one."""
    if config.deadline is None:
        return None
    return max(config.deadline - (time.monotonic() - started), 0.0)
