"""
Centralised configuration.

All settings are read from 'MESSENGER_'-prefixed environment variables or a
local '.env' file via 'pydantic-settings'. Every field has a default so the
service starts against a local MongoDB without any configuration.

'MONGO_URI' is a 'SecretStr' because connection strings may embed
credentials; access the raw value with 'get_secret_value()' and never log it.
"""

from typing import Literal

from pydantic import SecretStr, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Application-wide settings.

    Attributes:
        MONGO_URI: MongoDB connection string.
        DATABASE_NAME: Database holding the 'users', 'chats' and 'messages' collections.
        STORE_BACKEND: 'mongo' for MongoDB, 'memory' for a process-local store (development only).
        OPERATION_TIMEOUT: Deadline in seconds for every request's store round trips.
        CONNECT_TIMEOUT: Deadline in seconds for the connectivity check at startup.
        HOST: Interface the HTTP server binds to.
        PORT: Port the HTTP server listens on.
        LOG_LEVEL: Minimum loguru level.
    """

    MONGO_URI: SecretStr = SecretStr("mongodb://localhost:27017")
    DATABASE_NAME: str = "messenger"
    STORE_BACKEND: Literal["mongo", "memory"] = "mongo"

    OPERATION_TIMEOUT: float = 5.0
    CONNECT_TIMEOUT: float = 10.0

    HOST: str = "0.0.0.0"
    PORT: int = 9000

    LOG_LEVEL: str = "INFO"

    @field_validator("OPERATION_TIMEOUT", "CONNECT_TIMEOUT")
    @classmethod
    def _timeout_positive(cls, v: float) -> float:
        if v <= 0:
            raise ValueError(f"timeouts must be positive, got {v}")
        return v

    @field_validator("PORT")
    @classmethod
    def _port_range(cls, v: int) -> int:
        if not 1 <= v <= 65535:
            raise ValueError(f"PORT must be 1-65535, got {v}")
        return v

    model_config = SettingsConfigDict(env_prefix="MESSENGER_", env_file=".env", env_file_encoding="utf-8", extra="ignore")


settings = Settings()
