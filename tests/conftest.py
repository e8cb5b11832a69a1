from __future__ import annotations

import json
import threading
import time
from pathlib import Path

import httpx
import pytest

from hoist.core.config import Credentials, PublishConfig
from hoist.core.github import GitHubClient


UPLOAD_BASE = "https://uploads.github.com/repos/acme/widgets/releases/1/assets"


class FakeGitHub:
    """Stand-in for the GitHub releases API, served through httpx.MockTransport."""

    def __init__(self) -> None:
        self.requests: list[httpx.Request] = []
        self.bodies: dict[str, bytes] = {}
        self.release_response: httpx.Response | None = None
        self.upload_responses: dict[str, httpx.Response] = {}
        self.upload_failures: dict[str, Exception] = {}
        self.delays: dict[str, float] = {}
        self.labels: dict[str, str | None] = {}
        self.on_upload: dict[str, object] = {}
        self._lock = threading.Lock()
        self._next_asset_id = 100

    @property
    def release_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.path.endswith("/releases")]

    @property
    def upload_calls(self) -> list[httpx.Request]:
        return [r for r in self.requests if r.url.host == "uploads.github.com"]

    def handler(self, request: httpx.Request) -> httpx.Response:
        with self._lock:
            self.requests.append(request)
        if request.url.host == "uploads.github.com":
            return self._upload(request)
        return self._create_release(request)

    def _create_release(self, request: httpx.Request) -> httpx.Response:
        if self.release_response is not None:
            return self.release_response
        payload = json.loads(request.content)
        owner, repo = request.url.path.split("/")[2:4]
        return httpx.Response(
            201,
            json={
                "id": 1,
                "tag_name": payload["tag_name"],
                "body": payload.get("body"),
                "html_url": f"https://github.com/{owner}/{repo}/releases/tag/{payload['tag_name']}",
                "upload_url": f"{UPLOAD_BASE}{{?name,label}}",
            },
        )

    def _wait(self, request: httpx.Request, delay: float) -> None:
        # behave like a stalled server: give up once the read timeout passes
        limit = request.extensions.get("timeout", {}).get("read")
        if limit is not None and limit < delay:
            time.sleep(limit)
            raise httpx.ReadTimeout("read timed out", request=request)
        time.sleep(delay)

    def _upload(self, request: httpx.Request) -> httpx.Response:
        name = request.url.params["name"]
        body = request.read()
        if name in self.on_upload:
            self.on_upload[name]()
        if name in self.delays:
            self._wait(request, self.delays[name])
        if name in self.upload_failures:
            raise self.upload_failures[name]
        if name in self.upload_responses:
            return self.upload_responses[name]
        with self._lock:
            self.bodies[name] = body
            self._next_asset_id += 1
            asset_id = self._next_asset_id
        return httpx.Response(
            201,
            json={
                "id": asset_id,
                "name": name,
                "label": self.labels.get(name, ""),
                "content_type": request.headers["Content-Type"],
                "state": "uploaded",
                "size": len(body),
                "url": f"https://api.github.com/repos/acme/widgets/releases/assets/{asset_id}",
                "browser_download_url": f"https://github.com/acme/widgets/releases/download/v1.0.0/{name}",
            },
        )


@pytest.fixture
def fake_github() -> FakeGitHub:
    return FakeGitHub()


@pytest.fixture
def config() -> PublishConfig:
    return PublishConfig()


@pytest.fixture
def client(fake_github: FakeGitHub, config: PublishConfig):
    with GitHubClient(
        Credentials("test-token"), config, transport=httpx.MockTransport(fake_github.handler)
    ) as client:
        yield client


@pytest.fixture
def make_file(tmp_path: Path):
    def _make(name: str, content: bytes = b"data") -> Path:
        path = tmp_path / name
        path.write_bytes(content)
        return path

    return _make
