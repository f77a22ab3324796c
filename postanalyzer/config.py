"""Application configuration using pydantic-settings."""

import base64
import hashlib
import json
from ast import literal_eval
from functools import lru_cache
from typing import Annotated, Literal

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    app_name: str = "PostAnalyzer"
    app_version: str = "1.0.0"
    debug: bool = False
    environment: Literal["development", "staging", "production"] = "development"

    # API
    api_prefix: str = "/postanalyzer/v1"
    cors_origins: Annotated[list[str], NoDecode] = [
        "http://localhost:3000",
        "http://localhost:5173",
    ]

    # WordPress site being analyzed
    wordpress_url: str = "http://localhost:8080"
    wordpress_username: str | None = None
    wordpress_app_password: str | None = None
    wordpress_timeout: float = 30.0
    wordpress_max_per_page: int = 100

    # Plugin settings storage
    settings_option_name: str = "postanalyzer_settings"
    option_store_path: str | None = None
    settings_encryption_key: str | None = None
    secret_key: str = "change-me-in-production-use-a-real-secret-key"

    # AI platform key validation
    api_key_validation_timeout: float = 10.0

    @field_validator("wordpress_url", mode="before")
    @classmethod
    def _normalize_wordpress_url(cls, value: object) -> object:
        """Ensure the site URL carries a scheme and no trailing slash."""
        if not isinstance(value, str):
            return value

        raw = value.strip().rstrip("/")
        if raw and not raw.startswith(("http://", "https://")):
            raw = f"https://{raw}"
        return raw

    @field_validator("cors_origins", mode="before")
    @classmethod
    def _parse_cors_origins(cls, value: object) -> object:
        """Accept JSON list/string or comma-separated values for CORS_ORIGINS."""
        def normalize(origin: object) -> str:
            cleaned = str(origin).strip().strip("'\"")
            if cleaned.startswith("[") and cleaned.endswith("]"):
                cleaned = cleaned[1:-1].strip().strip("'\"")
            return cleaned

        if isinstance(value, list):
            return [normalize(origin) for origin in value if normalize(origin)]
        if not isinstance(value, str):
            return value

        raw = value.strip()
        if not raw:
            return []

        try:
            parsed = json.loads(raw)
        except json.JSONDecodeError:
            try:
                parsed = literal_eval(raw)
            except (ValueError, SyntaxError):
                parsed = [normalize(origin) for origin in raw.split(",")]
                return [origin for origin in parsed if origin]

        if isinstance(parsed, str):
            parsed = [parsed]
        if isinstance(parsed, tuple | set):
            parsed = list(parsed)
        if not isinstance(parsed, list):
            raise ValueError(
                "CORS_ORIGINS must be a JSON array, JSON string, or comma-separated string.",
            )
        return [normalize(origin) for origin in parsed if normalize(origin)]

    def get_settings_encryption_key(self) -> bytes:
        """Return a Fernet-compatible key for API-key encryption."""
        key_material = self.settings_encryption_key or self.secret_key
        scoped = f"postanalyzer-settings:{key_material}"
        digest = hashlib.sha256(scoped.encode("utf-8")).digest()
        return base64.urlsafe_b64encode(digest)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    settings = Settings()

    return settings


settings = get_settings()
