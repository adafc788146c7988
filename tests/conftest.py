"""
Shared pytest fixtures.

Environment variables are set at module level, before any src/ imports,
so the cached Settings object reads the test values when first built.
"""

import os

# Must be set before any shared.* imports.
# Use setdefault so externally-passed env vars (integration tests) take precedence.
os.environ.setdefault("ENV", "test")
os.environ.setdefault("AWS_ACCESS_KEY_ID", "testing")
os.environ.setdefault("AWS_SECRET_ACCESS_KEY", "testing")
os.environ.setdefault("AWS_SESSION_TOKEN", "testing")
os.environ.setdefault("AWS_REGION", "us-west-2")
os.environ.setdefault("DYNAMODB_CONTENT_TABLE", "festival-content")
os.environ.setdefault("DYNAMODB_ADMIN_TABLE", "festival-admins")
os.environ.setdefault("S3_BUCKET", "festival-media")
os.environ.setdefault("ADMIN_KEY", "test-admin-key")
os.environ.setdefault("JWT_SECRET", "test-secret-32-chars-exactly-ok!")

from datetime import datetime, timedelta, timezone

import boto3
import pytest
from fastapi.testclient import TestClient
from jose import jwt
from moto import mock_aws

from shared.errors import MediaStoreError
from shared.s3 import RemoteDeleteOutcome

ADMIN_KEY = "test-admin-key"
JWT_SECRET = "test-secret-32-chars-exactly-ok!"
ADMIN_EMAIL = "admin@example.com"
ADMIN_PASSWORD = "correct horse battery staple"
ADMIN_ID = "acct-0001"
BUCKET = "festival-media"
MEDIA_BASE = f"https://{BUCKET}.s3.us-west-2.amazonaws.com"


# ── Token helpers ───────────────────────────────────────────────────────────────

def make_token(
    account_id: str = ADMIN_ID,
    email: str = ADMIN_EMAIL,
    secret: str = JWT_SECRET,
    expired: bool = False,
) -> str:
    exp = datetime.now(timezone.utc) + (
        timedelta(seconds=-1) if expired else timedelta(hours=1)
    )
    return jwt.encode(
        {"id": account_id, "email": email, "role": "admin", "exp": exp}, secret, algorithm="HS256"
    )


def bearer_headers(token: str | None = None) -> dict[str, str]:
    return {"Authorization": f"Bearer {token or make_token()}"}


def legacy_headers(key: str = ADMIN_KEY) -> dict[str, str]:
    return {"x-admin-key": key}


# ── Fake media store ────────────────────────────────────────────────────────────

class RecordingMediaStore:
    """Records delete requests. Keys in ``missing`` report NOT_FOUND, keys in ``failing`` raise."""

    def __init__(self, missing: set[str] | None = None, failing: set[str] | None = None) -> None:
        self.deleted: list[tuple[str, str]] = []
        self.missing = missing or set()
        self.failing = failing or set()

    @property
    def deleted_keys(self) -> list[str]:
        return [key for key, _ in self.deleted]

    def delete_by_key(self, key: str, resource_type: str = "image") -> RemoteDeleteOutcome:
        self.deleted.append((key, resource_type))
        if key in self.failing:
            raise MediaStoreError(key, "simulated outage")
        if key in self.missing:
            return RemoteDeleteOutcome.NOT_FOUND
        return RemoteDeleteOutcome.DELETED


# ── AWS fixtures ────────────────────────────────────────────────────────────────

@pytest.fixture()
def aws_env():
    """Start moto mock, create DynamoDB tables + S3 bucket, yield, teardown."""
    with mock_aws():
        ddb = boto3.client("dynamodb", region_name="us-west-2")

        # ── content table ──────────────────────────────────────────────────────
        ddb.create_table(
            TableName="festival-content",
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
                {"AttributeName": "collection", "AttributeType": "S"},
                {"AttributeName": "year", "AttributeType": "N"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "content-collection-gsi",
                    "KeySchema": [
                        {"AttributeName": "collection", "KeyType": "HASH"},
                        {"AttributeName": "year", "KeyType": "RANGE"},
                    ],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        # ── admin table ────────────────────────────────────────────────────────
        ddb.create_table(
            TableName="festival-admins",
            KeySchema=[
                {"AttributeName": "PK", "KeyType": "HASH"},
                {"AttributeName": "SK", "KeyType": "RANGE"},
            ],
            AttributeDefinitions=[
                {"AttributeName": "PK", "AttributeType": "S"},
                {"AttributeName": "SK", "AttributeType": "S"},
                {"AttributeName": "id", "AttributeType": "S"},
            ],
            GlobalSecondaryIndexes=[
                {
                    "IndexName": "admin-id-index",
                    "KeySchema": [{"AttributeName": "id", "KeyType": "HASH"}],
                    "Projection": {"ProjectionType": "ALL"},
                }
            ],
            BillingMode="PAY_PER_REQUEST",
        )

        # ── S3 bucket ──────────────────────────────────────────────────────────
        s3 = boto3.client("s3", region_name="us-west-2")
        s3.create_bucket(
            Bucket=BUCKET,
            CreateBucketConfiguration={"LocationConstraint": "us-west-2"},
        )

        yield


@pytest.fixture()
def settings():
    from shared.config import get_settings  # noqa: PLC0415

    return get_settings()


@pytest.fixture()
def content_repo(aws_env, settings):
    from shared.db import ContentRepository, get_content_table  # noqa: PLC0415

    return ContentRepository(get_content_table(settings))


@pytest.fixture()
def admin_repo(aws_env, settings):
    from shared.db import AdminRepository, get_admin_table  # noqa: PLC0415

    return AdminRepository(get_admin_table(settings))


@pytest.fixture()
def admin_account(admin_repo):
    """A persisted admin whose id matches the default make_token() subject."""
    from shared.auth import hash_password  # noqa: PLC0415
    from shared.models import AdminAccount  # noqa: PLC0415

    return admin_repo.insert(
        AdminAccount(id=ADMIN_ID, email=ADMIN_EMAIL, passwordHash=hash_password(ADMIN_PASSWORD))
    )


@pytest.fixture()
def auth_headers(admin_account) -> dict[str, str]:
    return bearer_headers(make_token(admin_account.id))


@pytest.fixture()
def s3_client(aws_env):
    return boto3.client("s3", region_name="us-west-2")


@pytest.fixture()
def client(aws_env):
    """FastAPI TestClient with mocked AWS. Import app inside fixture so boto3
    clients are always created inside the mock_aws context."""
    from api.handler import app  # noqa: PLC0415

    return TestClient(app, raise_server_exceptions=False)
