"""GitHub API client for creating releases and uploading assets."""

import os
from typing import BinaryIO, Iterator

import httpx

from hoist import __version__
from hoist.core.config import Credentials, PublishConfig
from hoist.core.errors import (
    AuthError,
    ConfigError,
    ConflictError,
    GitHubError,
    TransportError,
)
from hoist.models.release import Asset, Release


CHUNK_SIZE = 64 * 1024


def parse_repo_spec(spec: str) -> tuple[str, str]:
    """Parse an ``owner/repo`` spec into (owner, repo).

    Splits on the first ``/`` only; both parts must be non-empty.
    """
    owner, sep, repo = spec.partition("/")
    if not sep or not owner or not repo:
        raise ConfigError(
            f"Invalid repository: {spec!r}. Use 'owner/repo'.", stage="config"
        )
    return owner, repo


def _iter_file(handle: BinaryIO) -> Iterator[bytes]:
    for chunk in iter(lambda: handle.read(CHUNK_SIZE), b""):
        yield chunk


def _error_message(response: httpx.Response) -> str:
    try:
        data = response.json()
    except ValueError:
        return response.text.strip() or response.reason_phrase
    if isinstance(data, dict):
        return data.get("message") or response.reason_phrase
    return response.reason_phrase


def _already_exists(response: httpx.Response) -> bool:
    try:
        data = response.json()
    except ValueError:
        return False
    errors = data.get("errors", []) if isinstance(data, dict) else []
    return any(
        isinstance(e, dict) and e.get("code") == "already_exists" for e in errors
    )


def _parse(response: httpx.Response, model, what: str):
    """Build ``model`` from a success response, or raise TransportError."""
    try:
        return model.from_api_response(response.json())
    except (ValueError, KeyError, TypeError, AttributeError) as e:
        raise TransportError(
            f"{what}: unexpected response (HTTP {response.status_code}): {e!r}"
        )


def check_response(response: httpx.Response, what: str) -> None:
    """Raise the matching GitHubError for a failed response."""
    if response.is_success:
        return

    status = response.status_code
    message = _error_message(response)

    if status == 401:
        raise AuthError(f"{what}: credentials rejected ({message})")
    if status == 403:
        if "rate limit" in message.lower():
            raise TransportError(f"{what}: GitHub API rate limit exceeded")
        raise AuthError(f"{what}: permission denied ({message})")
    if status == 404:
        raise TransportError(f"{what}: not found (HTTP 404)")
    if status == 422 and _already_exists(response):
        raise ConflictError(f"{what}: already exists")
    raise TransportError(f"{what}: HTTP {status} {message}")


class GitHubClient:
    """Client for the GitHub releases API.

    Credentials are fixed at construction; the underlying ``httpx.Client`` is
    shared by every call, including concurrent uploads.
    """

    def __init__(
        self,
        credentials: Credentials | None = None,
        config: PublishConfig | None = None,
        transport: httpx.BaseTransport | None = None,
    ):
        self.config = config or PublishConfig()
        headers = {
            "Accept": "application/vnd.github+json",
            "X-GitHub-Api-Version": "2022-11-28",
            "User-Agent": f"hoist/{__version__}",
        }
        if credentials is not None:
            headers["Authorization"] = f"Bearer {credentials.token}"

        self.client = httpx.Client(
            base_url=self.config.api_base,
            headers=headers,
            timeout=self.config.timeout,
            transport=transport,
        )

    def __enter__(self):
        return self

    def __exit__(self, *args):
        self.client.close()

    def close(self) -> None:
        self.client.close()

    def create_release(
        self,
        owner: str,
        repo: str,
        tag_name: str,
        body: str | None = None,
        timeout: float | None = None,
    ) -> Release:
        """Create a release for ``tag_name``."""
        payload = {"tag_name": tag_name}
        if body is not None:
            payload["body"] = body

        if timeout is None or timeout > self.config.timeout:
            timeout = self.config.timeout

        what = f"Creating release {tag_name} in {owner}/{repo}"
        try:
            response = self.client.post(
                f"/repos/{owner}/{repo}/releases",
                json=payload,
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"{what}: timed out ({e})")
        except httpx.HTTPError as e:
            raise TransportError(f"{what}: {e}")

        check_response(response, what)
        return _parse(response, Release, what)

    def upload_asset(
        self,
        release: Release,
        file_name: str,
        content_type: str,
        handle: BinaryIO,
        timeout: float | None = None,
    ) -> Asset:
        """Upload the contents of an open file as a release asset.

        ``timeout`` can only shorten the configured upload timeout.
        """
        if not release.upload_endpoint:
            raise GitHubError(f"Release {release.id} has no upload URL")

        if timeout is None or timeout > self.config.upload_timeout:
            timeout = self.config.upload_timeout

        size = os.fstat(handle.fileno()).st_size
        what = f"Uploading {file_name}"
        try:
            response = self.client.post(
                release.upload_endpoint,
                params={"name": file_name},
                headers={
                    "Content-Type": content_type,
                    "Content-Length": str(size),
                },
                content=_iter_file(handle),
                timeout=timeout,
            )
        except httpx.TimeoutException as e:
            raise TransportError(f"{what}: timed out ({e})")
        except httpx.HTTPError as e:
            raise TransportError(f"{what}: {e}")

        check_response(response, what)
        return _parse(response, Asset, what)
