"""
Application configuration using Pydantic Settings.

Signing secrets and the database URL have no defaults: a process started
without them fails while importing this module.
"""
import json
from typing import List, Optional

from pydantic import field_validator, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "Judiciary Case Tracker"
    VERSION: str = "1.0.0"
    DESCRIPTION: str = "Courts, cases and hearings with role-gated access"
    API_V1_STR: str = "/api/v1"
    ENVIRONMENT: str = "development"  # development, staging, production

    # CORS (comma separated or JSON list)
    BACKEND_CORS_ORIGINS: str = "http://localhost:3000,http://localhost:5173"

    # Database
    DATABASE_URL: str

    # Database connection pool settings (ignored for SQLite)
    DB_POOL_SIZE: int = 10
    DB_MAX_OVERFLOW: int = 20
    DB_POOL_TIMEOUT: int = 30
    DB_POOL_RECYCLE: int = 1800  # 30 minutes
    DB_COMMAND_TIMEOUT: int = 60  # 60 seconds
    SQL_ECHO: bool = False
    DB_CREATE_TABLES: bool = False  # create missing tables at startup (development only)

    # Security
    ACCESS_TOKEN_SECRET: str
    REFRESH_TOKEN_SECRET: str
    JWT_ALGORITHM: str = "HS256"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 15
    REFRESH_TOKEN_EXPIRE_DAYS: int = 7
    ROTATE_REFRESH_TOKEN_ON_USE: bool = False
    PASSWORD_HASH_ROUNDS: int = 10
    ACCESS_TOKEN_COOKIE_NAME: str = "accessToken"
    REFRESH_TOKEN_COOKIE_NAME: str = "refreshToken"

    # Logging
    LOG_LEVEL: str = "INFO"
    LOG_DIR: Optional[str] = None

    # Performance
    ENABLE_RESPONSE_COMPRESSION: bool = True

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    @field_validator("ACCESS_TOKEN_SECRET", "REFRESH_TOKEN_SECRET")
    @classmethod
    def secret_not_blank(cls, v: str) -> str:
        if not v or not v.strip():
            raise ValueError("token signing secrets must not be empty")
        return v

    @field_validator("LOG_LEVEL")
    @classmethod
    def normalize_log_level(cls, v: str) -> str:
        return v.upper()

    @model_validator(mode="after")
    def secrets_must_differ(self) -> "Settings":
        if self.ACCESS_TOKEN_SECRET == self.REFRESH_TOKEN_SECRET:
            raise ValueError("ACCESS_TOKEN_SECRET and REFRESH_TOKEN_SECRET must differ")
        return self

    @property
    def cors_origins_list(self) -> List[str]:
        """Parse CORS origins from a JSON list or a comma separated string"""
        raw = self.BACKEND_CORS_ORIGINS.strip()
        if raw.startswith("["):
            return json.loads(raw)
        return [origin.strip() for origin in raw.split(",") if origin.strip()]

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT.lower() == "production"

    @property
    def cookie_secure(self) -> bool:
        return self.is_production


settings = Settings()
