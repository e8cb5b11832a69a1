"""Configuration and credential resolution for hoist."""

from dataclasses import dataclass
from enum import Enum
import os

from hoist.core.errors import ConfigError


GITHUB_API_BASE = "https://api.github.com"
GITHUB_DOWNLOAD_HOST = "https://github.com"
TOKEN_ENV_VARS = ("GITHUB_TOKEN", "GH_TOKEN")


class UrlStrategy(str, Enum):
    """How the public URL of an uploaded asset is obtained."""

    ECHO = "echo"  # URL reported by the API
    SYNTHESIZED = "synthesized"  # built from owner/repo/tag/name

    @classmethod
    def parse(cls, value: str) -> "UrlStrategy":
        try:
            return cls(value.strip().lower())
        except ValueError:
            choices = ", ".join(s.value for s in cls)
            raise ConfigError(f"Unknown URL strategy: {value}. Use one of: {choices}")


@dataclass(frozen=True)
class Credentials:
    """A bearer token, resolved once per invocation."""

    token: str

    def __repr__(self) -> str:
        return "Credentials(token=***)"


@dataclass
class PublishConfig:
    """Configuration for a publish run."""

    use_explicit_credentials: bool = True
    url_strategy: UrlStrategy = UrlStrategy.ECHO
    api_base: str = GITHUB_API_BASE
    download_host: str = GITHUB_DOWNLOAD_HOST
    timeout: float = 30.0
    deadline: float | None = None
    max_workers: int | None = None

    def __post_init__(self):
        if self.timeout <= 0:
            raise ConfigError(f"timeout must be positive, got {self.timeout}")
        if self.deadline is not None and self.deadline <= 0:
            raise ConfigError(f"deadline must be positive, got {self.deadline}")
        if self.max_workers is not None and self.max_workers < 1:
            raise ConfigError(f"max_workers must be at least 1, got {self.max_workers}")

    @classmethod
    def default(cls) -> "PublishConfig":
        """Create config from HOIST_* environment variables."""
        env = os.environ
        return cls(
            use_explicit_credentials=not _env_flag(env.get("HOIST_ANONYMOUS")),
            url_strategy=UrlStrategy.parse(env.get("HOIST_URL_STRATEGY", "echo")),
            api_base=env.get("HOIST_API_BASE", GITHUB_API_BASE),
            download_host=env.get("HOIST_DOWNLOAD_HOST", GITHUB_DOWNLOAD_HOST),
            timeout=_env_number("HOIST_TIMEOUT", float, 30.0),
            deadline=_env_number("HOIST_DEADLINE", float, None),
            max_workers=_env_number("HOIST_MAX_WORKERS", int, None),
        )

    @property
    def upload_timeout(self) -> float:
        """Per-request timeout for asset uploads, which can be large."""
        return max(self.timeout, 300.0)


def _env_flag(value: str | None) -> bool:
    if value is None:
        return False
    return value.strip().lower() in ("1", "true", "yes", "on")


def _env_number(name: str, kind, default):
    raw = os.environ.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        value = kind(raw)
    except ValueError:
        raise ConfigError(f"Invalid value for {name}: {raw!r}")
    if value <= 0:
        raise ConfigError(f"{name} must be positive, got {raw!r}")
    return value


def resolve_credentials(
    config: PublishConfig, token: str | None = None
) -> Credentials | None:
    """Resolve the token to publish with.

    An explicit token wins, then GITHUB_TOKEN, then GH_TOKEN. Returns None
    when the config asks for anonymous access.
    """
    if not config.use_explicit_credentials:
        return None

    if not token:
        for name in TOKEN_ENV_VARS:
            token = os.environ.get(name, "").strip()
            if token:
                break

    if not token:
        raise ConfigError(
            "No GitHub token found. Pass --token or set GITHUB_TOKEN.",
            stage="config",
        )
    return Credentials(token)
