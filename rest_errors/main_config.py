"""Application configuration from environment variables and .env files."""
import os
from enum import Enum
from functools import lru_cache

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Environment(str, Enum):
    LOCAL = "local"
    DEV = "dev"
    UAT = "uat"
    PROD = "prod"


# =============================================================================
# LOCAL DEBUG OVERRIDE - Change this to test other environments locally
# =============================================================================
LOCAL_ENV_OVERRIDE: Environment | None = None  # e.g., Environment.UAT


def get_env_file(override: Environment | None = None) -> str:
    """Get .env file path. Override only works when ENV=local."""
    env = os.getenv("ENV", Environment.LOCAL.value)
    if env == Environment.LOCAL.value and override:
        env = override.value
    return f".env_{env}"


ENV_FILE = get_env_file(LOCAL_ENV_OVERRIDE)


# =============================================================================
# Config Classes
# =============================================================================

class LoggingConfig(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_prefix="LOG_", extra="ignore")

    log_level: str = "INFO"
    log_format: str = "console"  # console | json
    log_level_uvicorn_access: str = "INFO"

    @field_validator("log_format")
    @classmethod
    def _known_format(cls, v: str) -> str:
        if v not in ("console", "json"):
            raise ValueError(f"log_format must be 'console' or 'json', got '{v}'")
        return v


class FastAPIConfig(BaseSettings):
    """FastAPI application configuration."""
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_prefix="FASTAPI_", extra="ignore")

    title: str = "REST Errors Example API"
    description: str = "Example service rendering REST error responses"
    version: str = "0.1.0"
    debug: bool = False


class RestErrorConfig(BaseSettings):
    """REST error rendering: resolver defaults, body key names and writer options."""
    model_config = SettingsConfigDict(env_file=ENV_FILE, env_prefix="REST_ERROR_", extra="ignore")

    default_status: int = Field(default=500, ge=100, le=599)
    default_message: str | None = None
    default_handling: bool = True

    status_key: str = "status"
    code_key: str = "code"
    message_key: str = "message"
    developer_message_key: str = "developerMessage"
    more_info_url_key: str = "moreInfoUrl"

    json_pretty_print: bool = False
    json_prefix: bool = False
    xml_root_element: str = "error"
    register_default_writers: bool = True
    prevent_response_caching: bool = False


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=ENV_FILE, extra="ignore")

    env: Environment = Field(default=Environment.LOCAL)
    app_name: str = Field(default="REST Errors Example API")
    debug: bool = Field(default=False)
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8000)
    reload: bool = Field(default=False)

    @field_validator("debug", "reload")
    @classmethod
    def _no_debug_in_prod(cls, v: bool, info) -> bool:
        if info.data.get("env") == Environment.PROD and v:
            raise ValueError(f"{info.field_name} cannot be True in production")
        return v

    @property
    def is_production(self) -> bool:
        return self.env == Environment.PROD


# =============================================================================
# Lazy Loaders (cached)
# =============================================================================

@lru_cache
def get_settings() -> Settings:
    return Settings()

@lru_cache
def get_logging_config() -> LoggingConfig:
    return LoggingConfig()

@lru_cache
def get_fastapi_config() -> FastAPIConfig:
    return FastAPIConfig()

@lru_cache
def get_rest_error_config() -> RestErrorConfig:
    return RestErrorConfig()


# =============================================================================
# Global Instances
# =============================================================================

settings = get_settings()
logging_config = get_logging_config()
fastapi_config = get_fastapi_config()
rest_error_config = get_rest_error_config()
