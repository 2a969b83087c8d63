"""
Exceptions for the Pocket sync tool.
"""

from typing import Optional


class PocketSyncError(Exception):
    """Base exception for all sync tool errors."""


class TransportError(PocketSyncError):
    """Network or connection failure talking to the Pocket API."""

    def __init__(self, url: str, cause: Exception):
        self.url = url
        self.cause = cause
        super().__init__(f"Network error requesting {url}: {cause}")


class ProtocolError(PocketSyncError):
    """Non-success HTTP status or unusable response body."""

    def __init__(
        self,
        url: str,
        status_code: Optional[int] = None,
        error_code: Optional[str] = None,
        error_message: Optional[str] = None,
        detail: Optional[str] = None,
    ):
        self.url = url
        self.status_code = status_code
        self.error_code = error_code
        self.error_message = error_message
        self.detail = detail

        lines = [f"URL: {url}"]
        if status_code is not None:
            lines.append(f"HTTP Status: {status_code}")
        if error_code is not None:
            lines.append(f"X-Error-Code: {error_code}")
        if error_message is not None:
            lines.append(f"X-Error: {error_message}")
        if detail:
            lines.append(detail)
        super().__init__("\n".join(lines))


class PageFetchError(PocketSyncError):
    """A single page retrieval failed; the sync pass is aborted."""

    def __init__(self, window, cause: PocketSyncError):
        self.window = window
        self.cause = cause
        super().__init__(
            f"Page fetch failed (offset={window.offset}, count={window.count}): {cause}"
        )


class RejectedMutation(PocketSyncError):
    """The server accepted the request but declined the action."""

    def __init__(self, item_id: str, action: str = "archive"):
        self.item_id = item_id
        self.action = action
        super().__init__(f"Failed to {action} item {item_id}: update rejected by server")


class StorageError(PocketSyncError):
    """Snapshot file could not be written or read."""

    def __init__(self, path: str, message: str):
        self.path = path
        super().__init__(f"{path}: {message}")


class SnapshotNotFoundError(StorageError):
    """Snapshot path is missing or not a readable regular file."""


class SnapshotCorruptError(StorageError):
    """Snapshot file exists but does not hold a valid article list."""


class ConfigurationError(PocketSyncError):
    """Missing credentials or unusable configuration."""


class TimestampParseError(PocketSyncError, ValueError):
    """A time_added value is not an integer Unix timestamp."""

    def __init__(self, value):
        self.value = value
        super().__init__(f"Invalid time_added value: {value!r}")
