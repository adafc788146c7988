"""Partner logo routes: POST / DELETE /api/content/{year}/partners."""

from typing import Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile, status

from api.uploads import store_files
from shared.auth import require_admin
from shared.content import ContentService
from shared.dependencies import get_content_service, get_media_store, get_reconciler
from shared.models import Principal, YearRecord
from shared.reconcile import Collection, DeletionOutcome, MediaReconciler
from shared.s3 import PARTNERS_FOLDER, S3MediaStore

router = APIRouter()


@router.post("/api/content/{year}/partners", response_model=YearRecord)
def upload_logos(
    year: int,
    logos: Optional[list[UploadFile]] = File(default=None),
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    store: S3MediaStore = Depends(get_media_store),
):
    refs = store_files(logos, store, PARTNERS_FOLDER)
    return service.add_partners(year, refs)


@router.delete("/api/content/{year}/partners/{identifier:path}", response_model=YearRecord)
def delete_logo(
    year: int,
    identifier: str,
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    result = reconciler.delete_media_item(service.get(year), Collection.PARTNERS, identifier)
    if result.outcome is DeletionOutcome.NOT_FOUND:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Partner not found in DB; attempted to remove any partial matches",
        )
    return result.record
