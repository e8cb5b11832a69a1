"""Publish manifest: the machine-readable record of a publish run."""

from pathlib import Path
import json

import yaml

from hoist.models.upload import PublishResult


MANIFEST_VERSION = 1


def result_to_dict(result: PublishResult) -> dict:
    """Convert a publish result to plain data for serialization."""
    failures = [
        {
            "path": str(outcome.request.path),
            "stage": outcome.error.stage or "upload",
            "error": type(outcome.error).__name__,
            "message": str(outcome.error),
        }
        for outcome in result.failures
    ]
    data = {
        "version": MANIFEST_VERSION,
        "release": {
            "id": result.release.id,
            "tag": result.release.tag_name,
            "url": result.release.html_url,
        },
        "assets": [asset.to_dict() for asset in result.assets],
    }
    if failures:
        data["failures"] = failures
    return data


def write_manifest(result: PublishResult, path: Path, fmt: str = "yaml") -> None:
    """Write the publish result to ``path`` as YAML or JSON."""
    path.parent.mkdir(parents=True, exist_ok=True)
    data = result_to_dict(result)

    with open(path, "w") as f:
        if fmt == "json":
            json.dump(data, f, indent=2)
            f.write("\n")
        else:
            yaml.dump(data, f, default_flow_style=False, sort_keys=False)
