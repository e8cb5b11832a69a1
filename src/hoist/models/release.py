"""GitHub release data models."""

from dataclasses import dataclass


@dataclass(frozen=True)
class Asset:
    """Represents an uploaded GitHub release asset."""

    id: int
    name: str
    content_type: str
    state: str
    url: str
    browser_download_url: str = ""
    label: str | None = None
    size: int = 0

    @classmethod
    def from_api_response(cls, data: dict) -> "Asset":
        """Create Asset from GitHub API response."""
        return cls(
            id=data["id"],
            name=data["name"],
            content_type=data.get("content_type", "application/octet-stream"),
            state=data.get("state", ""),
            url=data["url"],
            browser_download_url=data.get("browser_download_url", ""),
            label=data.get("label"),
            size=data.get("size", 0),
        )


@dataclass(frozen=True)
class Release:
    """Represents a GitHub release created by hoist."""

    id: int
    tag_name: str
    html_url: str
    upload_url: str = ""

    @classmethod
    def from_api_response(cls, data: dict) -> "Release":
        """Create Release from GitHub API response."""
        return cls(
            id=data["id"],
            tag_name=data["tag_name"],
            html_url=data.get("html_url", ""),
            upload_url=data.get("upload_url", ""),
        )

    @property
    def upload_endpoint(self) -> str:
        """Upload URL with its ``{?name,label}`` template suffix removed."""
        return self.upload_url.split("{", 1)[0]
