"""Environment-backed settings, built once and injected via FastAPI ``Depends``."""

from functools import lru_cache
from typing import Optional

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    env: str = "production"
    aws_region: str = "us-west-2"

    dynamodb_content_table: str = "festival-content"
    dynamodb_admin_table: str = "festival-admins"
    dynamodb_endpoint: Optional[str] = None  # local only (http://localhost:8002)

    s3_bucket: str = "festival-media"
    media_base_url: Optional[str] = None  # CDN in front of the bucket, if any

    admin_key: str = ""   # legacy x-admin-key shared secret, also guards /api/auth/register
    jwt_secret: str = ""
    token_ttl_hours: int = 12

    cors_origins: str = "http://localhost:3000"
    log_level: str = "INFO"

    @property
    def dynamodb_kwargs(self) -> dict:
        """Injected into boto3 calls when running locally."""
        if self.env == "local" and self.dynamodb_endpoint:
            return {"endpoint_url": self.dynamodb_endpoint}
        return {}

    @property
    def public_media_base(self) -> str:
        if self.media_base_url:
            return self.media_base_url.rstrip("/")
        return f"https://{self.s3_bucket}.s3.{self.aws_region}.amazonaws.com"

    @property
    def cors_origin_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]

    def missing_secrets(self) -> list[str]:
        """Names of the env vars that are unset but needed for a working deploy."""
        missing = []
        if not self.admin_key:
            missing.append("ADMIN_KEY")
        if not self.jwt_secret:
            missing.append("JWT_SECRET")
        if not self.s3_bucket:
            missing.append("S3_BUCKET")
        return missing


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return Settings()
