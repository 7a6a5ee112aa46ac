"""Configuration Settings for Monarch Auth Service

Manages environment variables and application configuration.
"""

import json
from functools import lru_cache
from typing import Annotated, Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, NoDecode


class Settings(BaseSettings):
    """Application settings"""

    # Service info
    service_name: str = "monarch-auth-service"
    service_version: str = "1.0.0"
    environment: str = "development"

    # Server configuration
    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False

    # User directory (M_USER table)
    database_url: str = "sqlite+aiosqlite:///./monarch.sqlite"
    sql_echo: bool = False

    # Redis configuration (token revocation)
    redis_host: str = "localhost"
    redis_port: int = 6379
    redis_db: int = 0
    redis_password: Optional[str] = None

    @property
    def redis_url(self) -> str:
        """Construct Redis URL from components"""
        if self.redis_password:
            return f"redis://:{self.redis_password}@{self.redis_host}:{self.redis_port}/{self.redis_db}"
        return f"redis://{self.redis_host}:{self.redis_port}/{self.redis_db}"

    # Session tokens
    jwt_secret_key: str = "dev-secret-change-in-production"
    jwt_algorithm: str = "HS256"
    access_token_expire_minutes: int = 60

    # Login policy
    # Operator accounts admitted without a password check and exempt from lockout.
    exempt_identifiers: Annotated[list[str], NoDecode] = []
    lockout_threshold: int = 5

    # CORS configuration
    cors_origins: list[str] = ["*"]
    cors_allow_credentials: bool = True
    cors_allow_methods: list[str] = ["*"]
    cors_allow_headers: list[str] = ["*"]

    # Logging
    log_level: str = "INFO"

    @field_validator("exempt_identifiers", mode="before")
    @classmethod
    def parse_exempt_identifiers(cls, v):
        """Accept a JSON list or a comma-separated string"""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.strip()
            if v.startswith("["):
                v = json.loads(v)
            else:
                v = v.split(",")
        return [item.strip() for item in v if item and item.strip()]

    @field_validator("lockout_threshold")
    @classmethod
    def validate_lockout_threshold(cls, v):
        if v < 1:
            raise ValueError("lockout_threshold must be at least 1")
        return v

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance

    Returns:
        Settings instance
    """
    return Settings()
