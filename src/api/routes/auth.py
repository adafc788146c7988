"""Admin account routes: POST /api/auth/register, POST /api/auth/login, GET /api/auth/me."""

from fastapi import APIRouter, Depends, status

from shared import auth
from shared.auth import require_admin, require_admin_key
from shared.config import Settings, get_settings
from shared.db import AdminRepository
from shared.dependencies import get_admin_repository
from shared.models import Credentials, LoginResponse, Principal

router = APIRouter()


@router.post(
    "/api/auth/register",
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_key)],
)
def register(body: Credentials, accounts: AdminRepository = Depends(get_admin_repository)):
    account = auth.register_admin(body.email, body.password, accounts)
    return {"user": account.to_principal(), "message": "Admin user created"}


@router.post("/api/auth/login", response_model=LoginResponse)
def login(
    body: Credentials,
    accounts: AdminRepository = Depends(get_admin_repository),
    settings: Settings = Depends(get_settings),
):
    token, principal = auth.login(body.email, body.password, accounts, settings)
    return LoginResponse(token=token, user=principal)


@router.get("/api/auth/me")
def me(principal: Principal = Depends(require_admin)):
    return {"user": principal}
