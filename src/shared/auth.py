"""
Admin authentication.

Protected routes accept either of two credentials, checked in this order:

    Authorization: Bearer <token>     HS256 JWT issued by POST /api/auth/login
    x-admin-key: <ADMIN_KEY>          legacy shared secret

A bearer token that fails verification (bad signature, expired, account gone)
does not reject the request by itself; the shared secret still gets its turn.

Tokens carry {id, email, role, exp} and are valid for TOKEN_TTL_HOURS (12h).
The shared secret is also the only way to create admin accounts.
"""

import logging
import uuid
from datetime import datetime, timedelta, timezone
from typing import Optional

import bcrypt
from fastapi import Depends, Header, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt

from shared.config import Settings, get_settings
from shared.db import AdminRepository, normalize_email
from shared.dependencies import get_admin_repository
from shared.errors import ConflictError, DuplicateKeyError, ValidationError
from shared.models import AdminAccount, Principal

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
LEGACY_PRINCIPAL_EMAIL = "x-admin-key"
_BCRYPT_ROUNDS = 10
MAX_PASSWORD_BYTES = 72  # bcrypt input limit

_security = HTTPBearer(auto_error=False)


def legacy_principal() -> Principal:
    return Principal(id=None, email=LEGACY_PRINCIPAL_EMAIL, role="admin")


# ── Passwords ──────────────────────────────────────────────────────────────────

def hash_password(password: str) -> str:
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds=_BCRYPT_ROUNDS)).decode("utf-8")


def verify_password(password: str, password_hash: str) -> bool:
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        # Stored hash is not a bcrypt hash.
        return False


# ── Tokens ─────────────────────────────────────────────────────────────────────

def issue_token(account: AdminAccount, settings: Settings) -> str:
    if not settings.jwt_secret:
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="JWT_SECRET not configured",
        )
    exp = datetime.now(timezone.utc) + timedelta(hours=settings.token_ttl_hours)
    payload = {"id": account.id, "email": account.email, "role": account.role, "exp": exp}
    return jwt.encode(payload, settings.jwt_secret, algorithm=ALGORITHM)


def decode_token(token: str, secret: str) -> Optional[dict]:
    """Claims of a valid, unexpired token carrying an ``id``; None otherwise."""
    if not secret:
        return None
    try:
        payload = jwt.decode(token, secret, algorithms=[ALGORITHM])
    except ExpiredSignatureError:
        logger.info("Rejected expired bearer token")
        return None
    except JWTError:
        logger.info("Rejected invalid bearer token")
        return None
    if not payload.get("id"):
        return None
    return payload


# ── Gate ───────────────────────────────────────────────────────────────────────

def authenticate(
    token: Optional[str],
    admin_key: Optional[str],
    settings: Settings,
    accounts: AdminRepository,
) -> Optional[Principal]:
    """Resolve the caller, or None if neither credential is acceptable."""
    if token:
        payload = decode_token(token, settings.jwt_secret)
        if payload is not None:
            account = accounts.find_by_id(str(payload["id"]))
            if account is not None:
                return account.to_principal()
            logger.info("Bearer token refers to missing account %s", payload["id"])

    if admin_key and settings.admin_key and admin_key == settings.admin_key:
        return legacy_principal()

    return None


def require_admin(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(_security),
    x_admin_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
    accounts: AdminRepository = Depends(get_admin_repository),
) -> Principal:
    """Dependency injected into every admin route. Returns the authenticated principal."""
    token = credentials.credentials if credentials else None
    principal = authenticate(token, x_admin_key, settings, accounts)
    if principal is None:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized",
            headers={"WWW-Authenticate": "Bearer"},
        )
    return principal


def require_admin_key(
    x_admin_key: Optional[str] = Header(default=None),
    settings: Settings = Depends(get_settings),
) -> None:
    """Shared-secret only. Bearer tokens are never enough to create accounts."""
    if not x_admin_key or not settings.admin_key or x_admin_key != settings.admin_key:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Unauthorized: ADMIN_KEY required to register",
        )


# ── Accounts ───────────────────────────────────────────────────────────────────

def _require_fields(email: str, password: str) -> str:
    normalized = normalize_email(email or "")
    if not normalized or not password:
        raise ValidationError("email and password required")
    return normalized


def register_admin(email: str, password: str, accounts: AdminRepository) -> AdminAccount:
    normalized = _require_fields(email, password)
    if len(password.encode("utf-8")) > MAX_PASSWORD_BYTES:
        raise ValidationError(f"password must be at most {MAX_PASSWORD_BYTES} bytes")
    if accounts.find_by_email(normalized) is not None:
        raise ConflictError("User already exists", {"email": normalized})
    account = AdminAccount(id=uuid.uuid4().hex, email=normalized, passwordHash=hash_password(password))
    try:
        return accounts.insert(account)
    except DuplicateKeyError as exc:
        raise ConflictError("User already exists", {"email": normalized}) from exc


def login(email: str, password: str, accounts: AdminRepository, settings: Settings) -> tuple[str, Principal]:
    normalized = _require_fields(email, password)
    account = accounts.find_by_email(normalized)
    if account is None or not verify_password(password, account.passwordHash):
        logger.info("Failed login for %s", normalized)
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid credentials")
    return issue_token(account, settings), account.to_principal()
