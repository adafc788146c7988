"""Turn the many shapes of a YouTube link into an embeddable URL."""

import re
from typing import Optional
from urllib.parse import parse_qs, urlsplit

EMBED_BASE = "https://www.youtube.com/embed/"

_BARE_ID_RE = re.compile(r"^[a-zA-Z0-9_-]{10,}$")


def normalize_video_link(link: Optional[str]) -> Optional[str]:
    """
    Return the embed URL for ``link``, or ``link`` unchanged if it is not
    recognisable. Never raises.

      https://youtu.be/<id>                  → embed/<id>
      https://www.youtube.com/embed/<id>     → unchanged
      https://www.youtube.com/watch?v=<id>   → embed/<id>
      https://www.youtube.com/shorts/<id>    → embed/<id>   (last path segment)
      <bare id, 10+ chars>                   → embed/<id>
    """
    if not link:
        return link

    try:
        parts = urlsplit(link)
    except ValueError:
        parts = None

    if parts is None or not parts.scheme or not parts.netloc:
        bare = link.strip()
        if _BARE_ID_RE.match(bare):
            return EMBED_BASE + bare
        return link

    host = (parts.hostname or "").lower()

    if "youtu.be" in host:
        segments = [s for s in parts.path.split("/") if s]
        if not segments:
            return link
        return EMBED_BASE + segments[0]

    if "youtube.com" in host:
        if parts.path.startswith("/embed/"):
            return link
        video_id = parse_qs(parts.query).get("v", [""])[0]
        if video_id:
            return EMBED_BASE + video_id
        segments = [s for s in parts.path.split("/") if s]
        if segments:
            return EMBED_BASE + segments[-1]

    return link
