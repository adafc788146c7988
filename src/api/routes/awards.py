"""Award routes: upsert slots, bulk replace, read a category, delete photos and categories.

A category is addressed by name inside a year record. Each category has three
fixed slots: winner, firstRunnerUp, secondRunnerUp.
"""

from typing import Optional

from fastapi import APIRouter, Depends, File, Form, HTTPException, UploadFile, status
from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from api.uploads import resolve_photo
from shared.auth import require_admin
from shared.content import ContentService, validate_slot_address
from shared.dependencies import get_content_service, get_media_store, get_reconciler
from shared.errors import ValidationError
from shared.models import AwardCategory, Principal, YearRecord
from shared.reconcile import AwardSlotSelector, DeletionOutcome, MediaReconciler
from shared.s3 import AWARDS_FOLDER, S3MediaStore

router = APIRouter()

_award_list = TypeAdapter(list[AwardCategory])


def _parse_awards(raw: str) -> list[AwardCategory]:
    try:
        return _award_list.validate_json(raw)
    except PydanticValidationError as exc:
        raise ValidationError(f"awards must be a JSON list of categories ({exc.error_count()} error(s))") from exc


@router.post("/api/content/{year}/awards", response_model=YearRecord)
def upsert_award(
    year: int,
    awards: Optional[str] = Form(default=None),
    category: Optional[str] = Form(default=None),
    role: Optional[str] = Form(default=None),
    name: str = Form(default=""),
    photoUrl: Optional[str] = Form(default=None),
    photoKey: Optional[str] = Form(default=None),
    photo: Optional[UploadFile] = File(default=None),
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    store: S3MediaStore = Depends(get_media_store),
):
    """
    Either replace every category at once (``awards`` = JSON list), or set one
    slot from ``category`` + ``role`` + ``name`` and an optional photo given as
    an uploaded file, ``photoUrl`` + ``photoKey``, or a bare ``photoUrl``.
    """
    if awards:
        return service.replace_awards(year, _parse_awards(awards))

    validate_slot_address(category, role)
    slot_photo = resolve_photo(photo, photoUrl, photoKey, store, AWARDS_FOLDER)
    return service.upsert_award_slot(year, category, role, name, slot_photo)


@router.put("/api/content/{year}/awards", response_model=YearRecord)
def replace_awards(
    year: int,
    body: list[AwardCategory],
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
):
    return service.replace_awards(year, body)


@router.get("/api/content/{year}/awards/{category}", response_model=AwardCategory)
def get_award(year: int, category: str, service: ContentService = Depends(get_content_service)):
    return service.get_award_category(year, category)


# Must be declared before the {category:path} route below, which would swallow it.
@router.delete("/api/content/{year}/awards/{category}/{role}/photo", response_model=YearRecord)
def delete_award_photo(
    year: int,
    category: str,
    role: str,
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    validate_slot_address(category, role)
    record = service.get(year)
    award = record.find_category(category)
    if award is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Award category not found")
    if getattr(award, role) is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Role not set")
    result = reconciler.delete_media_item(record, AwardSlotSelector(category, role))
    if result.outcome is DeletionOutcome.NOT_FOUND:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Award photo not found")
    return result.record


@router.delete("/api/content/{year}/awards/{category:path}", response_model=YearRecord)
def delete_award_category(
    year: int,
    category: str,
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    reconciler: MediaReconciler = Depends(get_reconciler),
):
    return reconciler.delete_award_category(service.get(year), category)
