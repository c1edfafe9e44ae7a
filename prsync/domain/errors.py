from typing import Sequence


class PrSyncError(RuntimeError):
    """Base class for failures that abort the sync/publish workflow."""


class ConfigurationError(PrSyncError):
    """Raised when a required credential or environment value is missing."""


class RepositoryEnvironmentError(PrSyncError):
    """Raised when a git command exits non-zero (not a repository, detached HEAD, ...)."""

    def __init__(
        self,
        message: str,
        *,
        command: Sequence[str] = (),
        returncode: int | None = None,
        stderr: str = "",
    ) -> None:
        super().__init__(message)
        self.command = tuple(command)
        self.returncode = returncode
        self.stderr = stderr


class SyncError(PrSyncError):
    """Raised when the current branch cannot be pushed during sync."""


class ConflictError(PrSyncError):
    """Raised after a conflicting rebase has been aborted."""


class HostingApiError(PrSyncError):
    """Raised on a non-2xx response from the hosting API; keeps the raw body."""

    def __init__(self, message: str, *, status_code: int, body: str) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.body = body
