"""Data models for hoist."""

from hoist.models.release import Release, Asset
from hoist.models.upload import (
    PublishedAsset,
    PublishResult,
    UploadOutcome,
    UploadRequest,
)

__all__ = [
    "Release",
    "Asset",
    "UploadRequest",
    "UploadOutcome",
    "PublishedAsset",
    "PublishResult",
]
