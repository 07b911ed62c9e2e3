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

    CORS_ORIGINS: list[str] = Field(
        default=["http://localhost:5173"],
        description="Origins allowed by the CORS middleware"
    )

    # Database Configuration
    DB_HOST: str = Field(default="localhost", description="Database host")
    DB_PORT: int = Field(default=5432, description="Database port")
    DB_NAME: str = Field(default="workspace_db", description="Database name")
    DB_USER: str = Field(default="postgres", description="Database user")
    DB_PASSWORD: str = Field(default="", description="Database password")
    DATABASE_URL: Optional[str] = Field(default=None, description="Full database URL (overrides individual DB_* settings)")
    DB_POOL_SIZE: int = Field(default=5, description="Database connection pool size")
    DB_ECHO: bool = Field(default=False, description="Enable SQL query logging")

    # OpenAI Configuration
    OPENAI_API_KEY: str | None = Field(default=None, description="OpenAI API key for the assistant and analyzers")
    CHAT_MODEL: str = Field(default="gpt-4o-mini", description="Model used for assistant replies and function calling")
    CHAT_MAX_TOKENS: int = Field(default=1000, description="Token budget for assistant replies")
    TOPIC_MODEL: str = Field(default="gpt-4o-mini", description="Model used for topic extraction")
    CORRELATION_MODEL: str = Field(default="gpt-4o", description="Model used for financial correlation analysis")
    INSIGHTS_MODEL: str = Field(default="gpt-4o", description="Model used for the business insights summary")

    # Assistant behaviour
    CONTEXT_FALLBACK_LIMIT: int = Field(default=5, description="Maximum fallback items per collection in the prompt")
    CONTEXT_EVENT_WINDOW_DAYS: int = Field(default=7, description="Forward window for upcoming calendar events")
    ASSISTANT_CREATE_ACTIONS_ENABLED: bool = Field(
        default=False,
        description="Expose create_goal/create_task/create_calendar_event/create_financial_record to the model"
    )
    CORRELATION_ENABLED: bool = Field(default=True, description="Run correlation after financial record writes")
    MESSAGE_RATE_LIMIT_PER_MINUTE: int = Field(default=20, description="Maximum chat messages per minute per client")

    @computed_field
    @property
    def database_url_computed(self) -> str:
        """
        Compute the database URL from individual settings or use DATABASE_URL if provided.

        Returns:
            str: Database connection URL for an async driver
        """
        if self.DATABASE_URL:
            url = self.DATABASE_URL
            # Ensure asyncpg driver is used for plain postgres URLs
            if url.startswith("postgresql://"):
                url = url.replace("postgresql://", "postgresql+asyncpg://", 1)
            return url

        return f"postgresql+asyncpg://{self.DB_USER}:{self.DB_PASSWORD}@{self.DB_HOST}:{self.DB_PORT}/{self.DB_NAME}"

    @field_validator("CONTEXT_FALLBACK_LIMIT", "CONTEXT_EVENT_WINDOW_DAYS", "MESSAGE_RATE_LIMIT_PER_MINUTE")
    @classmethod
    def validate_positive(cls, v: int, info) -> int:
        if v < 1:
            raise ValueError(f"{info.field_name} must be at least 1")
        return v

    @model_validator(mode="after")
    def set_environment_defaults(self):
        """Set environment-specific defaults and validations."""
        if self.ENVIRONMENT == "prod" and not self.OPENAI_API_KEY:
            raise ValueError(
                "OPENAI_API_KEY must be set in production. "
                "Set it in your .env file or environment."
            )
        return self


settings = Settings()
