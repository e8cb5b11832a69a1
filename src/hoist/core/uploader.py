"""Concurrent upload of release assets."""

from concurrent.futures import ThreadPoolExecutor
import logging
import time

from hoist.core.errors import AssetReadError, HoistError, TransportError
from hoist.core.github import GitHubClient
from hoist.models.release import Asset, Release
from hoist.models.upload import UploadOutcome, UploadRequest


logger = logging.getLogger(__name__)


def upload_one(
    client: GitHubClient,
    release: Release,
    request: UploadRequest,
    timeout: float | None = None,
) -> Asset:
    """Open the request's file and upload it.

    The file is opened here, when the upload runs, and closed when it ends.
    """
    logger.info("Uploading %s...", request.path)
    try:
        handle = open(request.path, "rb")
    except OSError as e:
        raise AssetReadError(
            f"Cannot read asset {request.path}: {e.strerror or e}",
            path=str(request.path),
        )

    with handle:
        asset = client.upload_asset(
            release,
            request.file_name,
            request.resolved_content_type,
            handle,
            timeout=timeout,
        )
    logger.info("%s was uploaded.", asset.url)
    return asset


def upload_assets(
    client: GitHubClient,
    release: Release,
    requests: list[UploadRequest],
    max_workers: int | None = None,
    timeout: float | None = None,
) -> list[UploadOutcome]:
    """Upload every request concurrently.

    Returns one outcome per request, in the order of ``requests``. A failure
    is recorded on its own outcome and does not stop the other uploads.

    With ``timeout``, each upload gets the time left until the shared deadline
    as its request timeout, and uploads that start after it fail without
    being sent. Every worker has finished when this returns.
    """
    if not requests:
        return []

    deadline = None if timeout is None else time.monotonic() + timeout
    outcomes: list[UploadOutcome | None] = [None] * len(requests)

    def run(index: int, request: UploadRequest) -> None:
        try:
            remaining = None
            if deadline is not None:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise TransportError(
                        f"Uploading {request.file_name}: deadline exceeded"
                    )
            asset = upload_one(client, release, request, timeout=remaining)
        except HoistError as e:
            if e.path is None:
                e.path = str(request.path)
            e.stage = "upload"
            logger.warning("Upload of %s failed: %s", request.path, e)
            outcomes[index] = UploadOutcome(request, error=e)
        else:
            outcomes[index] = UploadOutcome(request, asset=asset)

    workers = min(max_workers or len(requests), len(requests))
    with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="hoist-upload") as executor:
        futures = [executor.submit(run, i, r) for i, r in enumerate(requests)]

    # Errors other than HoistError are bugs; surface them.
    for future in futures:
        future.result()
    return list(outcomes)
