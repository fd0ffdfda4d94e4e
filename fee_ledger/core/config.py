from decimal import Decimal

from pydantic import Field
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    database_url: str = Field(..., alias="DATABASE_URL")

    academic_year_start_month: int = Field(4, alias="ACADEMIC_YEAR_START_MONTH", ge=1, le=12)
    amount_epsilon: Decimal = Field(Decimal("0.005"), alias="AMOUNT_EPSILON")

    ledger_fallback_prefix: str = Field("STU", alias="LEDGER_FALLBACK_PREFIX")
    ledger_fallback_width: int = Field(6, alias="LEDGER_FALLBACK_WIDTH")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


settings = Settings()
