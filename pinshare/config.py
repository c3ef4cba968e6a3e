"""Configuration from environment (no hardcoded secrets)."""

from typing import List

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Backend settings from env."""

    model_config = SettingsConfigDict(env_prefix="PINSHARE_", extra="ignore")

    # Database (SQLAlchemy async URL)
    database_url: str = "sqlite+aiosqlite:///./pinshare.db"

    # Object storage (S3-compatible, e.g. MinIO)
    storage_endpoint: str = "localhost:9000"
    storage_access_key: str = ""
    storage_secret_key: str = ""
    storage_bucket: str = "pinshare"
    storage_secure: bool = False
    # Base URL for download links; empty = derived from endpoint and secure flag
    storage_public_url: str = ""
    storage_folder: str = "file-share-app"

    # JWT
    jwt_secret: str = ""
    jwt_algorithm: str = "HS256"
    token_expire_days: int = 7

    # Deployment variant: true = uploads/downloads gated per account,
    # false = anonymous with globally unique file names
    require_auth: bool = True

    # Uploads
    max_upload_bytes: int = 1 * 1024 * 1024

    # CORS: comma-separated string so pydantic-settings does not JSON-decode it
    frontend_url: str = "*"

    @property
    def cors_origins_list(self) -> List[str]:
        """CORS origins as a list (split on comma)."""
        return [o.strip() for o in self.frontend_url.split(",") if o.strip()] or ["*"]

    @property
    def storage_base_url(self) -> str:
        """Public base URL that download links are built on."""
        if self.storage_public_url.strip():
            return self.storage_public_url.strip().rstrip("/")
        scheme = "https" if self.storage_secure else "http"
        return f"{scheme}://{self.storage_endpoint}"

    # Rate limiting for signup/login
    rate_limit_enabled: bool = True
    auth_rate_limit: str = "10/minute"

    # Server
    host: str = "0.0.0.0"
    port: int = 5000

    # Logging (empty log_file = stderr only; level DEBUG|INFO|WARNING|ERROR)
    log_level: str = "INFO"
    log_file: str = ""
    log_format: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"


def get_settings() -> Settings:
    """Return application settings."""
    return Settings()
