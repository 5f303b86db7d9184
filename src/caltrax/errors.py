"""Application error types."""


class CaltraxError(Exception):
    """Base class for application errors."""


class MissingFieldError(CaltraxError):
    """Raised when a profile lacks an input required for goal computation."""

    def __init__(self, field: str) -> None:
        super().__init__(f"Missing required profile field: {field}")
        self.field = field


class StorageUnavailableError(CaltraxError):
    """Raised when the local store can not be read or written."""


class RemoteSyncFailedError(CaltraxError):
    """Raised when a remote sync operation fails or times out."""
