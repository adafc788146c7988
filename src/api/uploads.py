"""Multipart upload handling shared by the photo, award, partner and video routes."""

import logging
from typing import Optional

from fastapi import UploadFile

from shared.errors import ValidationError
from shared.models import DirectUrlRef, MediaRef, UploadedRef
from shared.s3 import S3MediaStore

logger = logging.getLogger(__name__)

MAX_FILES = 50

IMAGE_CONTENT_TYPES = {
    "image/jpeg",
    "image/png",
    "image/gif",
    "image/webp",
    "image/svg+xml",
}
VIDEO_CONTENT_TYPES = {
    "video/mp4",
    "video/webm",
    "video/quicktime",
}


def store_file(
    upload: UploadFile,
    store: S3MediaStore,
    folder: str,
    allowed: set[str] = IMAGE_CONTENT_TYPES,
) -> UploadedRef:
    if upload.content_type not in allowed:
        raise ValidationError(
            f"content_type must be one of {sorted(allowed)}",
            {"filename": upload.filename, "content_type": upload.content_type},
        )
    data = upload.file.read()
    return store.store_upload(data, upload.filename or "file", upload.content_type, folder)


def store_files(files: Optional[list[UploadFile]], store: S3MediaStore, folder: str) -> list[MediaRef]:
    """Validate every file first, then upload them in order."""
    files = [f for f in (files or []) if f.filename]
    if not files:
        raise ValidationError("No files uploaded (check field name & Content-Type)")
    if len(files) > MAX_FILES:
        raise ValidationError(f"At most {MAX_FILES} files per request")
    for f in files:
        if f.content_type not in IMAGE_CONTENT_TYPES:
            raise ValidationError(
                f"content_type must be one of {sorted(IMAGE_CONTENT_TYPES)}",
                {"filename": f.filename, "content_type": f.content_type},
            )
    refs = [store_file(f, store, folder).to_media_ref() for f in files]
    logger.info("Uploaded %d file(s) to %s", len(refs), folder)
    return refs


def resolve_photo(
    upload: Optional[UploadFile],
    photo_url: Optional[str],
    photo_key: Optional[str],
    store: S3MediaStore,
    folder: str,
) -> Optional[MediaRef]:
    """
    Turn the three ways a form can name a photo into one MediaRef:
    an uploaded file, a URL plus its media-store key, or a bare URL.
    """
    if upload is not None and upload.filename:
        return store_file(upload, store, folder).to_media_ref()
    if photo_url and photo_key:
        return UploadedRef(url=photo_url, key=photo_key).to_media_ref()
    if photo_url:
        return DirectUrlRef(url=photo_url).to_media_ref()
    return None
