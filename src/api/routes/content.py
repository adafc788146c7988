"""Year record routes: list / read / create / video / reset under /api/content."""

import logging
from typing import Optional

from fastapi import APIRouter, Depends, File, UploadFile, status

from api.uploads import VIDEO_CONTENT_TYPES, store_file
from shared.auth import require_admin
from shared.content import ContentService
from shared.dependencies import get_content_service, get_media_store
from shared.errors import ValidationError
from shared.models import Principal, VideoLinkUpdate, YearRecord, YearSummary
from shared.s3 import VIDEOS_FOLDER, S3MediaStore

logger = logging.getLogger(__name__)

router = APIRouter()


# ── Public ─────────────────────────────────────────────────────────────────────

@router.get("/api/content", response_model=list[YearSummary])
def list_years(service: ContentService = Depends(get_content_service)):
    return service.list_years()


# Declared before /api/content/{year} so "reset" never reaches the int converter.
@router.post("/api/content/reset")
def reset_all(
    principal: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
):
    deleted = service.reset()
    logger.warning("Content reset by %s", principal.email)
    return {"message": "All content deleted", "deleted": deleted}


@router.get("/api/content/{year}", response_model=YearRecord)
def get_year(year: int, service: ContentService = Depends(get_content_service)):
    return service.get(year)


# ── Admin ──────────────────────────────────────────────────────────────────────

@router.post("/api/content/{year}", response_model=YearRecord, status_code=status.HTTP_201_CREATED)
def create_year(
    year: int,
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
):
    return service.create(year)


@router.put("/api/content/{year}/video", response_model=YearRecord)
def set_video(
    year: int,
    body: VideoLinkUpdate,
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
):
    return service.set_video(year, body.videoLink)


@router.post("/api/content/{year}/video-file", response_model=YearRecord)
def upload_video(
    year: int,
    video: Optional[UploadFile] = File(default=None),
    _: Principal = Depends(require_admin),
    service: ContentService = Depends(get_content_service),
    store: S3MediaStore = Depends(get_media_store),
):
    if video is None or not video.filename:
        raise ValidationError("video file required")
    ref = store_file(video, store, VIDEOS_FOLDER, allowed=VIDEO_CONTENT_TYPES)
    return service.set_video_file(year, ref.url)
