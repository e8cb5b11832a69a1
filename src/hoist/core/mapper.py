"""Map uploaded assets to the descriptors returned to callers."""

from hoist.core.config import GITHUB_DOWNLOAD_HOST, UrlStrategy
from hoist.models.release import Asset, Release
from hoist.models.upload import PublishedAsset


def download_url(host: str, owner: str, repo: str, tag: str, name: str) -> str:
    """Public download URL of a release asset."""
    return f"{host.rstrip('/')}/{owner}/{repo}/releases/download/{tag}/{name}"


def _maybe_set(metadata: dict[str, str], key: str, value: str | None) -> None:
    if value is not None and value != "":
        metadata[key] = value


def map_asset(
    owner: str,
    repo: str,
    release: Release,
    asset: Asset,
    strategy: UrlStrategy = UrlStrategy.ECHO,
    download_host: str = GITHUB_DOWNLOAD_HOST,
) -> PublishedAsset:
    """Build the descriptor for an uploaded asset.

    With ``UrlStrategy.ECHO`` the URL reported by the API is used as is.
    ``UrlStrategy.SYNTHESIZED`` builds the public download link instead, since
    the API URL of an asset is not a browser download link.
    """
    if strategy is UrlStrategy.SYNTHESIZED:
        url = download_url(download_host, owner, repo, release.tag_name, asset.name)
    else:
        url = asset.url

    metadata: dict[str, str] = {}
    _maybe_set(metadata, "ContentType", asset.content_type)
    metadata["Id"] = str(asset.id)
    _maybe_set(metadata, "Label", asset.label)
    _maybe_set(metadata, "Name", asset.name)
    _maybe_set(metadata, "State", asset.state)
    return PublishedAsset(url=url, metadata=metadata)
