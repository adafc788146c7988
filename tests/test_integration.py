"""
Integration tests that exercise real HTTP + DynamoDB Local.

Unlike unit tests (moto), these tests hit a live FastAPI server and persist
data to a real DynamoDB Local instance. Media uploads need a real bucket and
are left to the moto suite.

Prerequisites (in order):
  1. DynamoDB Local listening on DYNAMODB_ENDPOINT
  2. Content and admin tables created with their GSIs
  3. .env.local present with ADMIN_KEY and JWT_SECRET set
  4. Server running:
       PYTHONPATH=src ENV=local $(cat .env.local | xargs) \\
         uvicorn api.handler:app --port 5001

Run:
  PYTHONPATH=src pytest -m integration tests/test_integration.py -v

Override defaults via env vars:
  INTEGRATION_BASE_URL   default http://localhost:5001
  DYNAMODB_ENDPOINT      default http://localhost:8002
  ADMIN_KEY              must match .env.local
"""

import os
import uuid

import boto3
import httpx
import pytest

pytestmark = pytest.mark.integration

# ---------------------------------------------------------------------------
# Configuration: all overridable via env
# ---------------------------------------------------------------------------

BASE_URL = os.getenv("INTEGRATION_BASE_URL", "http://localhost:5001")
DYNAMODB_ENDPOINT = os.getenv("DYNAMODB_ENDPOINT", "http://localhost:8002")
CONTENT_TABLE = os.getenv("DYNAMODB_CONTENT_TABLE", "festival-content")
ADMIN_TABLE = os.getenv("DYNAMODB_ADMIN_TABLE", "festival-admins")
ADMIN_KEY = os.getenv("ADMIN_KEY", "test-admin-key")

# A year no real festival will use, so runs never touch live content
YEAR = 1901
EDITOR_EMAIL = f"editor-{uuid.uuid4().hex[:8]}@integration.test"
EDITOR_PASSWORD = "integration-pw"


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _legacy() -> dict:
    return {"x-admin-key": ADMIN_KEY}


def _dynamo_table(name: str):
    return boto3.resource(
        "dynamodb",
        region_name="us-west-2",
        endpoint_url=DYNAMODB_ENDPOINT,
        aws_access_key_id="dummy",
        aws_secret_access_key="dummy",
    ).Table(name)


def _stored_year(table) -> dict | None:
    return table.get_item(Key={"PK": f"YEAR#{YEAR}", "SK": "CONTENT"}).get("Item")


# ---------------------------------------------------------------------------
# Module-scoped fixtures
# ---------------------------------------------------------------------------


@pytest.fixture(scope="module")
def http():
    """Reusable httpx client for the full module."""
    with httpx.Client(base_url=BASE_URL, timeout=10.0) as client:
        yield client


@pytest.fixture(scope="module")
def content_table():
    return _dynamo_table(CONTENT_TABLE)


@pytest.fixture(scope="module")
def admin_table():
    return _dynamo_table(ADMIN_TABLE)


@pytest.fixture(scope="module")
def token(http):
    """Register a throwaway editor and log in once for the module."""
    http.post(
        "/api/auth/register",
        json={"email": EDITOR_EMAIL, "password": EDITOR_PASSWORD},
        headers=_legacy(),
    )
    r = http.post("/api/auth/login", json={"email": EDITOR_EMAIL, "password": EDITOR_PASSWORD})
    assert r.status_code == 200, r.text
    return r.json()["token"]


@pytest.fixture(scope="module")
def auth(token):
    return {"Authorization": f"Bearer {token}"}


# ---------------------------------------------------------------------------
# Sanity: server must be reachable
# ---------------------------------------------------------------------------


def test_health(http):
    r = http.get("/health")
    assert r.status_code == 200, (
        f"Server not reachable at {BASE_URL}. "
        "Start it with: PYTHONPATH=src ENV=local $(cat .env.local | xargs) "
        "uvicorn api.handler:app --port 5001"
    )


# ---------------------------------------------------------------------------
# Auth
# ---------------------------------------------------------------------------


class TestAuth:
    def test_missing_credentials_401(self, http):
        r = http.post(f"/api/content/{YEAR}")
        assert r.status_code == 401

    def test_bad_token_401(self, http):
        r = http.post(f"/api/content/{YEAR}", headers={"Authorization": "Bearer not-a-jwt"})
        assert r.status_code == 401

    def test_me_returns_registered_account(self, http, auth):
        r = http.get("/api/auth/me", headers=auth)
        assert r.status_code == 200
        assert r.json()["user"]["email"] == EDITOR_EMAIL

    def test_account_persisted_with_hash(self, admin_table, token):
        item = admin_table.get_item(Key={"PK": f"ADMIN#{EDITOR_EMAIL}", "SK": "PROFILE"}).get("Item")
        assert item is not None
        assert item["passwordHash"] != EDITOR_PASSWORD

    def test_duplicate_register_400(self, http, token):
        r = http.post(
            "/api/auth/register",
            json={"email": EDITOR_EMAIL.upper(), "password": "x"},
            headers=_legacy(),
        )
        assert r.status_code == 400

    def test_wrong_password_401(self, http, token):
        r = http.post("/api/auth/login", json={"email": EDITOR_EMAIL, "password": "nope"})
        assert r.status_code == 401


# ---------------------------------------------------------------------------
# Year record: full lifecycle
# ---------------------------------------------------------------------------


class TestYearLifecycle:
    """Create → video → awards → read back → category delete."""

    def test_setup_cleanup(self, content_table):
        """Remove leftover item from a previous failed run."""
        content_table.delete_item(Key={"PK": f"YEAR#{YEAR}", "SK": "CONTENT"})

    def test_create_201(self, http, auth):
        r = http.post(f"/api/content/{YEAR}", headers=auth)
        assert r.status_code == 201
        assert r.json()["year"] == YEAR

    def test_create_persists_in_dynamodb(self, content_table):
        item = _stored_year(content_table)
        assert item is not None
        assert item["collection"] == "CONTENT"
        assert "createdAt" in item and "updatedAt" in item

    def test_create_duplicate_400(self, http, auth):
        r = http.post(f"/api/content/{YEAR}", headers=auth)
        assert r.status_code == 400

    def test_listed_publicly(self, http):
        r = http.get("/api/content")
        assert r.status_code == 200
        assert YEAR in [s["year"] for s in r.json()]

    def test_video_normalized(self, http, auth, content_table):
        r = http.put(
            f"/api/content/{YEAR}/video",
            json={"videoLink": "https://youtu.be/integration1"},
            headers=auth,
        )
        assert r.status_code == 200
        assert _stored_year(content_table)["videoLink"] == "https://www.youtube.com/embed/integration1"

    def test_award_slot_upsert(self, http, auth):
        r = http.post(
            f"/api/content/{YEAR}/awards",
            data={
                "category": "Best Short", "role": "winner", "name": "Jane",
                "photoUrl": "https://cdn.example.com/events/awards/jane",
                "photoKey": "events/awards/jane",
            },
            headers=auth,
        )
        assert r.status_code == 200
        assert r.json()["awards"][0]["winner"]["photo"]["canonicalKey"] == "events/awards/jane"

    def test_award_category_read(self, http):
        r = http.get(f"/api/content/{YEAR}/awards/Best Short")
        assert r.status_code == 200
        assert r.json()["winner"]["name"] == "Jane"

    def test_award_category_delete(self, http, auth, content_table):
        r = http.delete(f"/api/content/{YEAR}/awards/Best Short", headers=auth)
        assert r.status_code == 200
        assert _stored_year(content_table)["awards"] == []

    def test_award_category_delete_again_404(self, http, auth):
        r = http.delete(f"/api/content/{YEAR}/awards/Best Short", headers=auth)
        assert r.status_code == 404

    def test_teardown(self, content_table, admin_table):
        content_table.delete_item(Key={"PK": f"YEAR#{YEAR}", "SK": "CONTENT"})
        admin_table.delete_item(Key={"PK": f"ADMIN#{EDITOR_EMAIL}", "SK": "PROFILE"})
