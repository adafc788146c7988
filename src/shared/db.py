"""DynamoDB repositories for year records and admin accounts.

Key design:
  Content:  PK=YEAR#<year>     SK=CONTENT   (collection="CONTENT" for content-collection-gsi)
  Admin:    PK=ADMIN#<email>   SK=PROFILE   (id projected by admin-id-index)

Uniqueness of year and email comes from conditional puts on PK.
"""

import logging
from datetime import datetime, timezone
from typing import Optional

import boto3
from boto3.dynamodb.conditions import Key as DynamoKey
from botocore.exceptions import ClientError

from shared.config import Settings
from shared.errors import DuplicateKeyError
from shared.models import AdminAccount, YearRecord, YearSummary

logger = logging.getLogger(__name__)

CONTENT_SK = "CONTENT"
CONTENT_COLLECTION = "CONTENT"
CONTENT_COLLECTION_INDEX = "content-collection-gsi"
ADMIN_SK = "PROFILE"
ADMIN_ID_INDEX = "admin-id-index"

_KEY_FIELDS = ("PK", "SK", "collection")


def _dynamodb(settings: Settings):
    return boto3.resource("dynamodb", region_name=settings.aws_region, **settings.dynamodb_kwargs)


def get_content_table(settings: Settings):
    return _dynamodb(settings).Table(settings.dynamodb_content_table)


def get_admin_table(settings: Settings):
    return _dynamodb(settings).Table(settings.dynamodb_admin_table)


def now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _strip_keys(item: dict) -> dict:
    return {k: v for k, v in item.items() if k not in _KEY_FIELDS}


def _is_conditional_failure(exc: ClientError) -> bool:
    return exc.response.get("Error", {}).get("Code") == "ConditionalCheckFailedException"


# ── Content ────────────────────────────────────────────────────────────────────

def _year_pk(year: int) -> str:
    return f"YEAR#{year}"


class ContentRepository:
    def __init__(self, table) -> None:
        self.table = table

    def _item(self, record: YearRecord) -> dict:
        item = record.model_dump(exclude_none=True)
        item.update({"PK": _year_pk(record.year), "SK": CONTENT_SK, "collection": CONTENT_COLLECTION})
        return item

    def find_by_year(self, year: int) -> Optional[YearRecord]:
        item = self.table.get_item(Key={"PK": _year_pk(year), "SK": CONTENT_SK}).get("Item")
        if not item:
            return None
        return YearRecord.model_validate(_strip_keys(item))

    def insert(self, record: YearRecord) -> YearRecord:
        """Create the record. Raises DuplicateKeyError if the year already exists."""
        ts = now_iso()
        record = record.model_copy(update={"createdAt": ts, "updatedAt": ts})
        try:
            self.table.put_item(
                Item=self._item(record),
                ConditionExpression="attribute_not_exists(PK)",
            )
        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise DuplicateKeyError(_year_pk(record.year)) from exc
            raise
        return record

    def save(self, record: YearRecord) -> YearRecord:
        """Overwrite the whole document. Concurrent writers: last write wins."""
        ts = now_iso()
        record = record.model_copy(update={"createdAt": record.createdAt or ts, "updatedAt": ts})
        self.table.put_item(Item=self._item(record))
        return record

    def _query_all(self, **kwargs) -> list[dict]:
        items: list[dict] = []
        query = dict(
            IndexName=CONTENT_COLLECTION_INDEX,
            KeyConditionExpression=DynamoKey("collection").eq(CONTENT_COLLECTION),
            **kwargs,
        )
        while True:
            response = self.table.query(**query)
            items.extend(response.get("Items", []))
            last = response.get("LastEvaluatedKey")
            if not last:
                return items
            query["ExclusiveStartKey"] = last

    def list_summaries(self) -> list[YearSummary]:
        """All years, newest first."""
        items = self._query_all(ScanIndexForward=False)
        return [YearSummary.model_validate(_strip_keys(item)) for item in items]

    def delete_all(self) -> int:
        items = self._query_all()
        with self.table.batch_writer() as batch:
            for item in items:
                batch.delete_item(Key={"PK": item["PK"], "SK": item["SK"]})
        return len(items)


# ── Admin accounts ─────────────────────────────────────────────────────────────

def normalize_email(email: str) -> str:
    return email.strip().lower()


def _admin_pk(email: str) -> str:
    return f"ADMIN#{normalize_email(email)}"


class AdminRepository:
    def __init__(self, table) -> None:
        self.table = table

    def find_by_email(self, email: str) -> Optional[AdminAccount]:
        item = self.table.get_item(Key={"PK": _admin_pk(email), "SK": ADMIN_SK}).get("Item")
        if not item:
            return None
        return AdminAccount.model_validate(_strip_keys(item))

    def find_by_id(self, account_id: str) -> Optional[AdminAccount]:
        response = self.table.query(
            IndexName=ADMIN_ID_INDEX,
            KeyConditionExpression=DynamoKey("id").eq(account_id),
        )
        items = response.get("Items", [])
        if not items:
            return None
        return AdminAccount.model_validate(_strip_keys(items[0]))

    def insert(self, account: AdminAccount) -> AdminAccount:
        """Create the account. Raises DuplicateKeyError if the email is taken."""
        ts = now_iso()
        account = account.model_copy(
            update={"email": normalize_email(account.email), "createdAt": ts, "updatedAt": ts}
        )
        item = account.model_dump(exclude_none=True)
        item.update({"PK": _admin_pk(account.email), "SK": ADMIN_SK})
        try:
            self.table.put_item(Item=item, ConditionExpression="attribute_not_exists(PK)")
        except ClientError as exc:
            if _is_conditional_failure(exc):
                raise DuplicateKeyError(_admin_pk(account.email)) from exc
            raise
        logger.info("Admin account created: %s", account.email)
        return account
