from typing import Optional
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator


# =======================
# S3 Storage Settings
# =======================
class S3Settings(BaseModel):
    """S3-compatible storage connection settings."""
    access_key_id: Optional[str] = None
    secret_access_key: Optional[str] = None
    region: str = "us-east-1"
    # MinIO / other S3-compatible endpoints; None means AWS
    endpoint_url: Optional[str] = None
    addressing_style: str = "path"

    @field_validator("addressing_style", mode="after")
    @classmethod
    def check_addressing_style(cls, v: str) -> str:
        if v not in ("path", "virtual", "auto"):
            raise ValueError(f"Unsupported addressing style: {v}")
        return v


# =======================
# Helper Settings
# =======================
class HelperSettings(BaseModel):
    """Defaults for StorageHelper operations."""
    list_timeout_seconds: float = Field(default=10.0, gt=0)
    signed_url_expiration_minutes: float = 15.0


# =======================
# Logging Settings
# =======================
class LoggingSettings(BaseModel):
    """Logging configuration."""
    level: str = "INFO"
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


# =======================
# Main Settings
# =======================
class Settings(BaseSettings):
    """Application settings, read from the environment only."""
    # Application metadata
    title: str = "Storage Helper"
    version: str = "1.0.0"
    description: str = "Convenience operations over S3-compatible object storage"
    debug: bool = False

    model_config = SettingsConfigDict(
        env_prefix="",
        env_nested_delimiter="_",
        env_nested_max_split=1,
        case_sensitive=False,
        extra="ignore",
    )

    s3: S3Settings = S3Settings()
    helper: HelperSettings = HelperSettings()
    logging: LoggingSettings = LoggingSettings()


settings = Settings()
