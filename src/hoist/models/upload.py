"""Upload request and publish result models."""

from dataclasses import dataclass, field
from pathlib import Path

from hoist.core.errors import HoistError
from hoist.models.release import Asset, Release


DEFAULT_CONTENT_TYPE = "application/octet-stream"


def resolve_content_type(declared: str | None) -> str:
    """Return the declared content type, or the binary default when missing."""
    if declared is None or declared.strip() == "":
        return DEFAULT_CONTENT_TYPE
    return declared


@dataclass(frozen=True)
class UploadRequest:
    """A local file to attach to a release."""

    path: Path
    content_type: str | None = None

    def __post_init__(self):
        object.__setattr__(self, "path", Path(self.path))

    @property
    def file_name(self) -> str:
        return self.path.name

    @property
    def resolved_content_type(self) -> str:
        return resolve_content_type(self.content_type)


@dataclass
class UploadOutcome:
    """Result of one upload: either the remote asset or the error."""

    request: UploadRequest
    asset: Asset | None = None
    error: HoistError | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


@dataclass
class PublishedAsset:
    """Caller-facing descriptor of an uploaded asset.

    ``metadata`` only holds keys whose values were present on the asset.
    """

    url: str
    metadata: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict:
        return {"url": self.url, **self.metadata}


@dataclass
class PublishResult:
    """Everything a publish run produced."""

    release: Release
    outcomes: list[UploadOutcome] = field(default_factory=list)
    assets: list[PublishedAsset] = field(default_factory=list)

    @property
    def failures(self) -> list[UploadOutcome]:
        return [o for o in self.outcomes if not o.ok]

    @property
    def ok(self) -> bool:
        return not self.failures
