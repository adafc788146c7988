"""S3 media store: server-side uploads and best-effort deletion by key."""

import enum
import logging
import time

import boto3
from botocore.exceptions import BotoCoreError, ClientError

from shared.config import Settings
from shared.errors import MediaStoreError
from shared.models import UploadedRef

logger = logging.getLogger(__name__)

PHOTOS_FOLDER = "events/photos"
AWARDS_FOLDER = "events/awards"
PARTNERS_FOLDER = "events/partners"
VIDEOS_FOLDER = "events/videos"

_NOT_FOUND_CODES = {"404", "NoSuchKey", "NotFound"}


class RemoteDeleteOutcome(str, enum.Enum):
    DELETED = "deleted"
    NOT_FOUND = "not_found"


def build_object_key(folder: str, filename: str, now_ms: int | None = None) -> str:
    """
    Construct the object key for an uploaded file.

    Pattern: <folder>/<epoch-ms>-<stem>, e.g. events/photos/1712345678901-opening_night

    The key carries no extension so that the key derived back from the public
    URL is the key itself.
    """
    if now_ms is None:
        now_ms = int(time.time() * 1000)
    stem = "_".join(filename.split()).split(".")[0] or "file"
    return f"{folder}/{now_ms}-{stem}"


class S3MediaStore:
    def __init__(self, bucket: str, region: str, public_base_url: str) -> None:
        self.bucket = bucket
        self.region = region
        self.public_base_url = public_base_url.rstrip("/")

    @classmethod
    def from_settings(cls, settings: Settings) -> "S3MediaStore":
        return cls(settings.s3_bucket, settings.aws_region, settings.public_media_base)

    def _s3(self):
        return boto3.client("s3", region_name=self.region)

    def public_url(self, key: str) -> str:
        return f"{self.public_base_url}/{key}"

    def store_upload(self, data: bytes, filename: str, content_type: str, folder: str) -> UploadedRef:
        """Upload bytes under ``folder`` and return where they can be fetched and deleted."""
        key = build_object_key(folder, filename)
        try:
            self._s3().put_object(Bucket=self.bucket, Key=key, Body=data, ContentType=content_type)
        except (ClientError, BotoCoreError) as exc:
            raise MediaStoreError(key, str(exc)) from exc
        logger.info("Stored upload %s (%d bytes, %s)", key, len(data), content_type)
        return UploadedRef(url=self.public_url(key), key=key)

    def delete_by_key(self, key: str, resource_type: str = "image") -> RemoteDeleteOutcome:
        """
        Delete one object. Returns NOT_FOUND when nothing is stored under ``key``;
        any other failure raises MediaStoreError.
        """
        s3 = self._s3()
        try:
            s3.head_object(Bucket=self.bucket, Key=key)
        except ClientError as exc:
            code = str(exc.response.get("Error", {}).get("Code", ""))
            if code in _NOT_FOUND_CODES:
                logger.info("No %s stored under %s", resource_type, key)
                return RemoteDeleteOutcome.NOT_FOUND
            raise MediaStoreError(key, str(exc)) from exc
        except BotoCoreError as exc:
            raise MediaStoreError(key, str(exc)) from exc

        try:
            s3.delete_object(Bucket=self.bucket, Key=key)
        except (ClientError, BotoCoreError) as exc:
            raise MediaStoreError(key, str(exc)) from exc
        logger.info("Deleted %s %s", resource_type, key)
        return RemoteDeleteOutcome.DELETED
