"""
Festival content API entry point.

Local dev:
    PYTHONPATH=src uv run uvicorn api.handler:app --reload --port 5001

Lambda handler:
    api.handler.handler
"""

import logging
import time

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from mangum import Mangum
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.routes import auth, awards, content, partners, photos
from shared.app_logging import configure_logging
from shared.config import get_settings
from shared.errors import ContentError, MediaStoreError

settings = get_settings()
configure_logging(settings.log_level)
logger = logging.getLogger(__name__)

for _name in settings.missing_secrets():
    logger.warning("Env var %s is not set", _name)

app = FastAPI(
    title="Film Festival Content API",
    description=(
        "Per-year festival content: promo video, photo gallery, awards and partner logos. "
        "Reads are public; writes require an admin JWT or the x-admin-key secret."
    ),
    version="0.1.0",
    docs_url="/docs",
    redoc_url="/redoc",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origin_list,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["*"],
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    logger.info(
        "%s %s -> %d (%.0f ms)",
        request.method, request.url.path, response.status_code,
        (time.perf_counter() - started) * 1000,
    )
    return response


# ── Error rendering: every error body is {"message": ...} ─────────────────────

@app.exception_handler(ContentError)
def content_error_handler(request: Request, exc: ContentError):
    return JSONResponse(status_code=exc.status_code, content={"message": exc.message, **exc.details})


@app.exception_handler(MediaStoreError)
def media_store_error_handler(request: Request, exc: MediaStoreError):
    logger.error("Media upload failed for %s: %s", exc.key, exc.reason)
    return JSONResponse(
        status_code=status.HTTP_502_BAD_GATEWAY,
        content={"message": "Media upload failed"},
    )


@app.exception_handler(StarletteHTTPException)
def http_error_handler(request: Request, exc: StarletteHTTPException):
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(RequestValidationError)
def validation_error_handler(request: Request, exc: RequestValidationError):
    errors = exc.errors()
    first = errors[0] if errors else {}
    field = ".".join(str(part) for part in first.get("loc", ())[1:]) or "request"
    return JSONResponse(
        status_code=status.HTTP_400_BAD_REQUEST,
        content={
            "message": f"Invalid {field}: {first.get('msg', 'invalid value')}",
            "errors": [
                {"loc": list(e.get("loc", ())), "msg": e.get("msg", "")} for e in errors
            ],
        },
    )


@app.exception_handler(Exception)
def unexpected_error_handler(request: Request, exc: Exception):
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"message": "Internal server error"},
    )


app.include_router(auth.router)
app.include_router(content.router)
app.include_router(photos.router)
app.include_router(awards.router)
app.include_router(partners.router)


@app.get("/", include_in_schema=False)
def root():
    return {"status": "ok", "service": "Film Festival Content API"}


@app.get("/health", include_in_schema=False)
@app.get("/api/health", include_in_schema=False)
def health():
    return {"status": "ok", "time": int(time.time() * 1000)}


# Mangum adapts the FastAPI ASGI app for AWS Lambda + API Gateway (HTTP API).
handler = Mangum(app, lifespan="off")
