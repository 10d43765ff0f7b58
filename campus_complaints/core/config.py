"""
Configuration Management

Centralized configuration management using Pydantic Settings for type safety
and environment variable integration.
"""

import secrets
from typing import Optional, List
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import Field, field_validator


_ENV_CONFIG = SettingsConfigDict(
    env_file=".env",
    env_file_encoding="utf-8",
    case_sensitive=True,
    extra="ignore",
)


class DatabaseSettings(BaseSettings):
    """Database configuration settings"""

    DATABASE_URL: str = Field(default="sqlite+aiosqlite:///./campus_complaints.db")
    DB_ECHO: bool = Field(default=False)

    model_config = _ENV_CONFIG


class LoggingSettings(BaseSettings):
    """Logging configuration settings"""

    LOG_LEVEL: str = Field(default="INFO")
    LOG_FORMAT: str = Field(default="json")  # json or text
    LOG_FILE: Optional[str] = Field(default=None)
    LOG_ROTATION: str = Field(default="daily")
    LOG_RETENTION: int = Field(default=30)  # days

    # Structured logging
    ENABLE_STRUCTURED_LOGGING: bool = Field(default=True)

    model_config = _ENV_CONFIG

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        valid_levels = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        if v.upper() not in valid_levels:
            raise ValueError(f'Log level must be one of {valid_levels}')
        return v.upper()

    @field_validator('LOG_FORMAT')
    @classmethod
    def validate_log_format(cls, v):
        if v.lower() not in ('json', 'text'):
            raise ValueError('Log format must be json or text')
        return v.lower()


class LifecycleSettings(BaseSettings):
    """Complaint workflow configuration"""

    # Audit append retries for gateways without atomic writes
    AUDIT_APPEND_MAX_RETRIES: int = Field(default=3, ge=1)
    AUDIT_APPEND_RETRY_DELAY: float = Field(default=0.1, ge=0)  # seconds

    model_config = _ENV_CONFIG


class SecuritySettings(BaseSettings):
    """Security configuration settings"""

    BCRYPT_ROUNDS: int = Field(default=12, ge=4, le=31)
    DEMO_USER_PASSWORD: str = Field(default="campus123", min_length=6)

    # Unset means a per-process key: tokens stop working after a restart
    SECRET_KEY: str = Field(default_factory=lambda: secrets.token_urlsafe(32), min_length=16)
    ALGORITHM: str = Field(default="HS256")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=60, ge=1)

    model_config = _ENV_CONFIG


class APISettings(BaseSettings):
    """API configuration settings"""

    API_V1_PREFIX: str = Field(default="/api/v1")
    API_VERSION: str = Field(default="1.0.0")
    API_TITLE: str = Field(default="Campus Complaints API")
    API_DESCRIPTION: str = Field(default="Campus complaint tracking and triage")
    CORS_ORIGINS: str = Field(default="*")  # comma separated

    model_config = _ENV_CONFIG

    @property
    def cors_origins(self) -> List[str]:
        return [origin.strip() for origin in self.CORS_ORIGINS.split(",") if origin.strip()]


class Settings(BaseSettings):
    """Main application settings"""

    # Environment
    ENVIRONMENT: str = Field(default="development")
    DEBUG: bool = Field(default=False)

    # Storage
    STORAGE_BACKEND: str = Field(default="memory")  # memory or sql
    SEED_DEMO_USERS: bool = Field(default=True)

    # Include all sub-settings
    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)
    lifecycle: LifecycleSettings = Field(default_factory=LifecycleSettings)
    security: SecuritySettings = Field(default_factory=SecuritySettings)
    api: APISettings = Field(default_factory=APISettings)

    model_config = _ENV_CONFIG

    @field_validator('ENVIRONMENT')
    @classmethod
    def validate_environment(cls, v):
        valid_envs = ['development', 'staging', 'production', 'testing']
        if v not in valid_envs:
            raise ValueError(f'Environment must be one of {valid_envs}')
        return v

    @field_validator('STORAGE_BACKEND')
    @classmethod
    def validate_storage_backend(cls, v):
        if v not in ('memory', 'sql'):
            raise ValueError('Storage backend must be memory or sql')
        return v

    @property
    def is_production(self) -> bool:
        return self.ENVIRONMENT == "production"


@lru_cache()
def get_settings() -> Settings:
    """Get cached application settings"""
    return Settings()


# Global settings instance
settings = get_settings()
