from typing import List

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    PROJECT_NAME: str = "BarberSync Booking API"
    API_V1_STR: str = "/api/v1"
    SECRET_KEY: str = "changeme"
    ACCESS_TOKEN_EXPIRE_MINUTES: int = 60 * 12
    CORS_ORIGINS: List[str] = ["*"]
    LOG_LEVEL: str = "INFO"

    # Database
    POSTGRES_SERVER: str = "localhost"
    POSTGRES_USER: str = "postgres"
    POSTGRES_PASSWORD: str = "12345"
    POSTGRES_DB: str = "barbersync_db"
    POSTGRES_PORT: int = 5432
    DATABASE_URL: str = ""

    # Booking engine
    SLOT_GRANULARITY_MINUTES: int = 30
    # Only used when a tenant row is created without an explicit offset (UTC-3).
    DEFAULT_UTC_OFFSET_MINUTES: int = -180
    LOYALTY_VISITS_PER_REWARD: int = 10
    BOOKING_LOCK_TIMEOUT_SECONDS: float = 10.0

    model_config = SettingsConfigDict(
        env_file=".env",
        case_sensitive=True,
        extra="ignore"
    )

    @field_validator("SLOT_GRANULARITY_MINUTES")
    @classmethod
    def granularity_divides_hour(cls, v: int) -> int:
        if v <= 0 or 60 % v != 0:
            raise ValueError(f"SLOT_GRANULARITY_MINUTES must divide 60 evenly, got {v}")
        return v

    @field_validator("DEFAULT_UTC_OFFSET_MINUTES")
    @classmethod
    def offset_in_range(cls, v: int) -> int:
        if not -720 <= v <= 840 or v % 15 != 0:
            raise ValueError(
                f"DEFAULT_UTC_OFFSET_MINUTES must be a multiple of 15 in [-720, 840], got {v}"
            )
        return v

    @field_validator("LOYALTY_VISITS_PER_REWARD")
    @classmethod
    def visits_positive(cls, v: int) -> int:
        if v < 1:
            raise ValueError(f"LOYALTY_VISITS_PER_REWARD must be >= 1, got {v}")
        return v

    def assemble_db_url(self) -> str:
        if self.DATABASE_URL:
            return self.DATABASE_URL
        return f"postgresql://{self.POSTGRES_USER}:{self.POSTGRES_PASSWORD}@{self.POSTGRES_SERVER}:{self.POSTGRES_PORT}/{self.POSTGRES_DB}"

settings = Settings()
settings.DATABASE_URL = settings.assemble_db_url()
