"""Application configuration loaded from environment variables."""

from functools import lru_cache
from typing import Literal, Optional

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Validated settings from MARKET_AUTH_* env vars and an optional .env file."""

    model_config = SettingsConfigDict(
        env_prefix="MARKET_AUTH_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    env: Literal["dev", "test", "prod"] = "dev"
    service_name: str = "market-auth"
    log_level: str = "INFO"
    api_host: str = "127.0.0.1"
    api_port: int = 8000

    # Session tokens
    jwt_secret: SecretStr = SecretStr("change-me-in-production")
    jwt_algorithm: str = "HS256"
    jwt_issuer: str = "market-auth"
    token_expire_days: int = 30

    # Password hashing cost
    bcrypt_rounds: int = 12

    # Every store call is bounded by this timeout
    store_timeout_seconds: float = 5.0

    # Optional admin created at startup (admins cannot self-register)
    bootstrap_admin_email: Optional[str] = None
    bootstrap_admin_password: Optional[SecretStr] = None
    bootstrap_admin_name: str = "Administrator"

    @field_validator("jwt_secret")
    @classmethod
    def validate_jwt_secret(cls, v: SecretStr) -> SecretStr:
        if not v.get_secret_value() or not v.get_secret_value().strip():
            raise ValueError("jwt_secret must be set and non-empty")
        return v

    @field_validator("jwt_algorithm")
    @classmethod
    def validate_jwt_algorithm(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("jwt_algorithm must be set and non-empty")
        return v.strip()

    @field_validator("token_expire_days")
    @classmethod
    def validate_token_expire_days(cls, v: int) -> int:
        if v < 1 or v > 365:
            raise ValueError("token_expire_days must be between 1 and 365")
        return v

    @field_validator("bcrypt_rounds")
    @classmethod
    def validate_bcrypt_rounds(cls, v: int) -> int:
        if v < 4 or v > 16:
            raise ValueError("bcrypt_rounds must be between 4 and 16")
        return v

    @field_validator("store_timeout_seconds")
    @classmethod
    def validate_store_timeout(cls, v: float) -> float:
        if v <= 0 or v > 60:
            raise ValueError("store_timeout_seconds must be greater than 0 and at most 60")
        return v

    @property
    def token_ttl_seconds(self) -> int:
        return self.token_expire_days * 24 * 3600


@lru_cache
def get_settings() -> Settings:
    """Return cached settings instance (safe to call from dependencies)."""
    return Settings()
