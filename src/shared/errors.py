"""Domain exceptions raised by the services and rendered by the API layer."""

from typing import Any


class ContentError(Exception):
    """Base class. ``status_code`` is what the API layer responds with."""

    status_code = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        self.message = message
        self.details = details or {}
        super().__init__(message)


class ValidationError(ContentError):
    """Missing or malformed input. Raised before any state is touched."""

    status_code = 400


class NotFoundError(ContentError):
    status_code = 404


class ConflictError(ContentError):
    """Duplicate year or duplicate admin email on creation."""

    status_code = 400


class DuplicateKeyError(Exception):
    """Raised by the repositories when a conditional put hits an existing key."""

    def __init__(self, key: str) -> None:
        self.key = key
        super().__init__(f"Item already exists: {key}")


class MediaStoreError(Exception):
    """Any failure talking to the media store. Callers log and swallow it."""

    def __init__(self, key: str, reason: str) -> None:
        self.key = key
        self.reason = reason
        super().__init__(f"Media store operation failed for {key!r}: {reason}")
