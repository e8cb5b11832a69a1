from __future__ import annotations

import time
from pathlib import Path

import httpx
import pytest

from hoist.core.errors import AssetReadError, ConflictError, TransportError
from hoist.core.uploader import upload_assets
from hoist.models.upload import UploadRequest, resolve_content_type


@pytest.mark.parametrize("declared", [None, ""])
def test_missing_content_type_defaults_to_octet_stream(declared) -> None:
    assert resolve_content_type(declared) == "application/octet-stream"
    assert UploadRequest(Path("a.bin"), declared).resolved_content_type == "application/octet-stream"


@pytest.mark.parametrize("declared", ["text/plain", "application/zip", "text/markdown; charset=utf-8"])
def test_declared_content_type_is_kept(declared: str) -> None:
    assert resolve_content_type(declared) == declared


def test_file_name_is_base_name() -> None:
    assert UploadRequest("dist/out/widgets-1.0.zip").file_name == "widgets-1.0.zip"


def test_empty_request_list_makes_no_calls(fake_github, client) -> None:
    release = client.create_release("acme", "widgets", "v1.0.0")
    assert upload_assets(client, release, []) == []
    assert fake_github.upload_calls == []


def test_results_follow_input_order(fake_github, client, make_file) -> None:
    names = [f"asset-{i}.bin" for i in range(6)]
    requests = [UploadRequest(make_file(name, name.encode())) for name in names]
    # earlier requests finish last
    for i, name in enumerate(names):
        fake_github.delays[name] = 0.05 * (len(names) - i)
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests)

    assert len(outcomes) == len(requests)
    for request, outcome in zip(requests, outcomes):
        assert outcome.ok
        assert outcome.request is request
        assert outcome.asset.name == request.file_name
    assert fake_github.bodies == {name: name.encode() for name in names}


def test_each_request_gets_its_own_content_type(fake_github, client, make_file) -> None:
    requests = [
        UploadRequest(make_file("widgets.zip")),
        UploadRequest(make_file("notes.md"), "text/plain"),
    ]
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests)

    assert [o.asset.content_type for o in outcomes] == ["application/octet-stream", "text/plain"]


def test_missing_file_fails_only_its_upload(fake_github, client, make_file) -> None:
    gone = make_file("gone.zip")
    requests = [
        UploadRequest(make_file("first.zip")),
        UploadRequest(gone),
        UploadRequest(make_file("last.zip")),
    ]
    gone.unlink()
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests)

    assert [o.ok for o in outcomes] == [True, False, True]
    error = outcomes[1].error
    assert isinstance(error, AssetReadError)
    assert error.path == str(gone)
    assert error.stage == "upload"
    assert sorted(fake_github.bodies) == ["first.zip", "last.zip"]


def test_remote_failures_do_not_cancel_siblings(fake_github, client, make_file) -> None:
    fake_github.upload_failures["b.zip"] = httpx.ConnectError("reset by peer")
    fake_github.upload_responses["c.zip"] = httpx.Response(
        422, json={"message": "Validation Failed", "errors": [{"code": "already_exists"}]}
    )
    requests = [UploadRequest(make_file(name)) for name in ("a.zip", "b.zip", "c.zip", "d.zip")]
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests)

    assert [o.ok for o in outcomes] == [True, False, False, True]
    assert isinstance(outcomes[1].error, TransportError)
    assert isinstance(outcomes[2].error, ConflictError)
    assert outcomes[2].error.path == str(requests[2].path)


def test_uploads_past_deadline_are_transport_errors(fake_github, client, make_file) -> None:
    fake_github.delays["slow.zip"] = 2.0
    requests = [UploadRequest(make_file("fast.zip")), UploadRequest(make_file("slow.zip"))]
    release = client.create_release("acme", "widgets", "v1.0.0")

    started = time.monotonic()
    outcomes = upload_assets(client, release, requests, timeout=0.3)

    assert time.monotonic() - started < 1.5
    assert outcomes[0].ok
    assert isinstance(outcomes[1].error, TransportError)
    assert "timed out" in str(outcomes[1].error)


def test_queued_upload_after_deadline_is_not_sent(fake_github, client, make_file) -> None:
    fake_github.delays["slow.zip"] = 2.0
    requests = [UploadRequest(make_file("slow.zip")), UploadRequest(make_file("queued.zip"))]
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests, max_workers=1, timeout=0.3)

    assert all(isinstance(o.error, TransportError) for o in outcomes)
    assert "deadline exceeded" in str(outcomes[1].error)
    assert [r.url.params["name"] for r in fake_github.upload_calls] == ["slow.zip"]


def test_max_workers_still_uploads_everything(fake_github, client, make_file) -> None:
    requests = [UploadRequest(make_file(f"{i}.bin")) for i in range(5)]
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests, max_workers=2)

    assert all(o.ok for o in outcomes)
    assert len(fake_github.upload_calls) == 5


def test_file_is_opened_when_its_upload_starts(fake_github, client, make_file) -> None:
    later = make_file("later.zip")
    requests = [UploadRequest(make_file("first.zip")), UploadRequest(later)]
    # removed while the first upload is in flight, after both requests exist
    fake_github.on_upload["first.zip"] = later.unlink
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests, max_workers=1)

    assert outcomes[0].ok
    assert isinstance(outcomes[1].error, AssetReadError)
    assert outcomes[1].error.path == str(later)
    assert [r.url.params["name"] for r in fake_github.upload_calls] == ["first.zip"]


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(201, text="<html>oops</html>"),
        httpx.Response(201, json={"unexpected": True}),
        httpx.Response(201, json=["not", "an", "asset"]),
    ],
)
def test_malformed_upload_response_fails_only_its_upload(fake_github, client, make_file, response) -> None:
    fake_github.upload_responses["bad.zip"] = response
    requests = [UploadRequest(make_file("good.zip")), UploadRequest(make_file("bad.zip"))]
    release = client.create_release("acme", "widgets", "v1.0.0")

    outcomes = upload_assets(client, release, requests)

    assert outcomes[0].ok
    assert isinstance(outcomes[1].error, TransportError)
    assert "unexpected response" in str(outcomes[1].error)
