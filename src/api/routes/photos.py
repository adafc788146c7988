"""Gallery routes: POST / DELETE /api/content/{year}/photos."""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status

from api.uploads import store_files
from shared.auth import require_admin
from shared.content import ContentService
from shared.dependencies import get_content_service, get_media_store, get_reconciler
from shared.models import Principal, YearRecord
from shared.reconcile import Collection, DeletionOutcome, MediaReconciler
from shared.s3 import PHOTOS_FOLDER, S3MediaStore

router = APIRouter()


@router.post("/api/content/{year}/photos", response_model=YearRecord)
def upload_photos(
    year: int,
    photos: Optional[list[UploadFile]] = File(default=None),
    caption: str = Form(default=""),
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    store: S3MediaStore = Depends(get_media_store),
):
    refs = store_files(photos, store, PHOTOS_FOLDER)
    return service.add_photos(year, refs, caption)


@router.delete("/api/content/{year}/photos/{identifier:path}", response_model=YearRecord)
def delete_photo(
    year: int,
    identifier: str,
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    """
    ``identifier`` is a media-store key (may contain slashes) or any part of the
    photo's URL. A 404 here can still follow a cleanup that removed entries.
    """
    result = reconciler.delete_media_item(service.get(year), Collection.PHOTOS, identifier)
    if result.outcome is DeletionOutcome.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Photo not found in DB; attempted to remove any partial matches",
        )
    return result.record
