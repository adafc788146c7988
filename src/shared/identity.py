"""Derive the media-store deletion key from whatever a record stored for an image.

Entries may carry the key itself (``events/photos/1700000000-poster``), a full
delivery URL, or a bare path. URLs from the old CDN look like::

    https://cdn.example.com/<cloud>/image/upload/v1712345678/events/photos/poster.jpg

and the key is the part after ``upload/`` with the version marker and file
extension removed: ``events/photos/poster``.
"""

import re
from typing import Optional
from urllib.parse import urlsplit

_SCHEME_RE = re.compile(r"^[a-zA-Z][a-zA-Z0-9+.-]*://")
_VERSION_RE = re.compile(r"^v\d+$")
_EXTENSION_RE = re.compile(r"\.[a-zA-Z0-9]+$")
_UPLOAD_SEGMENTS = {"upload", "uploads"}


def strip_extension(value: str) -> str:
    return _EXTENSION_RE.sub("", value)


def resolve_canonical_key(value: Optional[str]) -> Optional[str]:
    """Best-guess media-store key for ``value``. Never raises."""
    if not value:
        return None

    if not _SCHEME_RE.match(value) and "/" not in value:
        return value

    path = _url_path(value)
    if path is None:
        return _last_segment_fallback(value)

    parts = [p for p in path.split("/") if p]
    candidate = parts
    for i, part in enumerate(parts):
        if part in _UPLOAD_SEGMENTS:
            candidate = parts[i + 1:]
            break
    if candidate and _VERSION_RE.match(candidate[0]):
        candidate = candidate[1:]

    joined = strip_extension("/".join(candidate))
    if joined:
        return joined
    last = strip_extension(parts[-1]) if parts else ""
    return last or None


def _url_path(value: str) -> Optional[str]:
    """Path component of ``value`` if it has a URL scheme, else None."""
    try:
        parts = urlsplit(value)
    except ValueError:
        return None
    if not parts.scheme:
        return None
    return parts.path


def _last_segment_fallback(value: str) -> str:
    segments = [s for s in value.split("/") if s]
    last = strip_extension(segments[-1]) if segments else ""
    return last or value
