"""Error types raised while publishing a release."""


class HoistError(Exception):
    """Base error for hoist.

    ``stage`` names the workflow step that failed and ``path`` the asset file
    involved, when there is one.
    """

    def __init__(self, message: str, stage: str | None = None, path: str | None = None):
        super().__init__(message)
        self.message = message
        self.stage = stage
        self.path = path

    def __str__(self) -> str:
        return self.message


class ConfigError(HoistError):
    """Invalid repository identifier, tag or configuration value."""

    pass


class HoistIOError(HoistError):
    """A local file could not be read."""

    pass


class NotesReadError(HoistIOError):
    """The release notes file could not be read."""

    pass


class AssetReadError(HoistIOError):
    """An asset file could not be opened for upload."""

    pass


class GitHubError(HoistError):
    """Error from GitHub API."""

    pass


class AuthError(GitHubError):
    """Credentials were rejected."""

    pass


class ConflictError(GitHubError):
    """The release or asset already exists."""

    pass


class TransportError(GitHubError):
    """Network failure, timeout or unexpected response."""

    pass


class PartialUploadFailure(HoistError):
    """One or more asset uploads failed after the release was created.

    The release is left in place. ``result`` holds every outcome so callers
    can still use the assets that did upload.
    """

    def __init__(self, result):
        self.result = result
        self.failures = [o for o in result.outcomes if not o.ok]
        paths = ", ".join(str(o.request.path) for o in self.failures)
        super().__init__(
            f"{len(self.failures)} of {len(result.outcomes)} asset upload(s) failed: {paths}",
            stage="upload",
            path=str(self.failures[0].request.path) if self.failures else None,
        )

    @property
    def first_error(self) -> HoistError | None:
        """The error of the first failed request, in input order."""
        if not self.failures:
            return None
        return self.failures[0].error
