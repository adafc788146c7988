"""
Dependency wiring for the FastAPI app.

Everything is built from the cached Settings object; route handlers and the
auth gate receive collaborators through ``Depends`` and never read the
environment themselves.
"""

from fastapi import Depends

from shared.config import Settings, get_settings
from shared.content import ContentService
from shared.db import AdminRepository, ContentRepository, get_admin_table, get_content_table
from shared.reconcile import MediaReconciler
from shared.s3 import S3MediaStore


def get_content_repository(settings: Settings = Depends(get_settings)) -> ContentRepository:
    return ContentRepository(get_content_table(settings))


def get_admin_repository(settings: Settings = Depends(get_settings)) -> AdminRepository:
    return AdminRepository(get_admin_table(settings))


def get_media_store(settings: Settings = Depends(get_settings)) -> S3MediaStore:
    return S3MediaStore.from_settings(settings)


def get_content_service(
    repository: ContentRepository = Depends(get_content_repository),
) -> ContentService:
    return ContentService(repository)


def get_reconciler(
    repository: ContentRepository = Depends(get_content_repository),
    media_store: S3MediaStore = Depends(get_media_store),
) -> MediaReconciler:
    return MediaReconciler(repository, media_store)
