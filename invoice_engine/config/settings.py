# invoice_engine/config/settings.py
from pydantic import Field, AliasChoices
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Read env from container + optionally from files
    model_config = SettingsConfigDict(
        env_file=(".env", ".env.docker"),
        extra="ignore",
        case_sensitive=False,
    )

    # App
    ENVIRONMENT: str = Field(default="dev", validation_alias=AliasChoices("ENVIRONMENT", "environment"))
    APP_NAME: str = Field(default="invoice_engine", validation_alias=AliasChoices("APP_NAME", "app_name"))
    LOG_LEVEL: str = Field(default="INFO", validation_alias=AliasChoices("LOG_LEVEL", "log_level"))

    # Infrastructure
    DATABASE_URL: str = Field(
        default="postgresql+asyncpg://postgres:postgres@db:5432/invoice_db",
        validation_alias=AliasChoices("DATABASE_URL", "database_url"),
    )
    REDIS_URL: str = Field(
        default="redis://redis:6379/0",
        validation_alias=AliasChoices("REDIS_URL", "redis_url"),
    )

    # Invoice numbering: "sql" | "redis" | "memory"
    COUNTER_BACKEND: str = Field(default="sql", validation_alias=AliasChoices("COUNTER_BACKEND", "counter_backend"))
    INVOICE_NUMBER_PREFIX: str = Field(default="INV", validation_alias=AliasChoices("INVOICE_NUMBER_PREFIX", "invoice_number_prefix"))
    ALLOCATION_MAX_ATTEMPTS: int = Field(
        default=3,
        ge=1,
        validation_alias=AliasChoices("ALLOCATION_MAX_ATTEMPTS", "allocation_max_attempts"),
    )
    ALLOCATION_RETRY_DELAY_SECONDS: float = Field(
        default=0.05,
        ge=0,
        validation_alias=AliasChoices("ALLOCATION_RETRY_DELAY_SECONDS", "allocation_retry_delay_seconds"),
    )

    # Tax rates
    DEFAULT_GST_RATE: float = Field(default=18, validation_alias=AliasChoices("DEFAULT_GST_RATE", "default_gst_rate"))
    # JSON object, e.g. {"8471": 18, "3004": 5}
    GST_RATE_OVERRIDES: dict[str, float] = Field(
        default_factory=dict,
        validation_alias=AliasChoices("GST_RATE_OVERRIDES", "gst_rate_overrides"),
    )


settings = Settings()
