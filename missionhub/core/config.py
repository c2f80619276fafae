from pydantic import Field, field_validator, model_validator, computed_field
from pydantic_settings import BaseSettings, SettingsConfigDict
from typing import Literal, Optional
import logging

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore"
    )

    ENVIRONMENT: Literal["dev", "test", "prod"] = Field(default="dev", description="Application environment")
    LOG_LEVEL: str = Field(default="INFO", description="Root log level")

    FRONTEND_ORIGINS: list[str] = Field(
        default_factory=lambda: ["http://localhost:5173"],
        description="Allowed CORS origins"
    )

    SECRET_KEY: str = Field(default="secret-key", description="Secret key for JWT verification")
    ALGORITHM: str = Field(default="HS256", description="JWT algorithm")
    ACCESS_TOKEN_EXPIRE_MINUTES: int = Field(default=15, description="Access token expiration in minutes")

    # Database Configuration
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, description="Database port")
    DB_NAME: str = Field(default="missionhub", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")
    DATABASE_URL: Optional[str] = Field(default=None, description="Full database URL (overrides individual DB_* settings)")
    DB_POOL_SIZE: int = Field(default=5, description="Database connection pool size")
    DB_ECHO: bool = Field(default=False, description="Enable SQL query logging")
    DB_CREATE_TABLES: bool = Field(default=True, description="Create missing tables on startup")

    # Real-time notifier
    REALTIME_HEARTBEAT_SECONDS: float = Field(default=30.0, description="Interval between heartbeat messages on live streams")
    REALTIME_MAX_PENDING_MESSAGES: int = Field(default=256, description="Undelivered messages kept per connection before dropping")

    @computed_field
    @property
    def database_url_computed(self) -> str:
        """
        Compute the database URL from individual settings or use DATABASE_URL if provided.

        Returns:
            str: SQLAlchemy async connection URL
        """
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Ensure an async driver is used
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            elif url.startswith("sqlite://") and not url.startswith("sqlite+aiosqlite://"):
                url = url.replace("sqlite://", "sqlite+aiosqlite://", 1)
            return url

        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @field_validator("REALTIME_HEARTBEAT_SECONDS")
    @classmethod
    def validate_heartbeat(cls, v: float) -> float:
        if v <= 0:
            raise ValueError("Heartbeat interval must be positive")
        return v

    @field_validator("REALTIME_MAX_PENDING_MESSAGES")
    @classmethod
    def validate_max_pending(cls, v: int) -> int:
        if v < 1:
            raise ValueError("At least one pending message must be allowed per connection")
        return v

    @model_validator(mode="after")
    def set_environment_defaults(self):
        """Set environment-specific defaults and validations."""
        if self.ENVIRONMENT == "prod":
            if self.SECRET_KEY == "secret-key" or len(self.SECRET_KEY) < 32:
                raise ValueError(
                    "SECRET_KEY must be at least 32 characters long in production. "
                    "Set a strong secret key in your .env file."
                )

        if self.ENVIRONMENT == "dev":
            # Longer token expiration in dev for easier testing
            if self.ACCESS_TOKEN_EXPIRE_MINUTES == 15:
                self.ACCESS_TOKEN_EXPIRE_MINUTES = 60

        return self


settings = Settings()
