from datetime import time

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from clinic_scheduler.application.utils.transitions import TransitionPolicy


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", extra="ignore")

    ENV: str = "dev"
    LOG_LEVEL: str = "INFO"

    CLINIC_NAME: str = "Your Clinic"
    CLINIC_TIMEZONE: str = "UTC"
    CLINIC_OPENING_TIME: time = time(9, 0)
    CLINIC_CLOSING_TIME: time = time(17, 0)
    CLINIC_CLOSED_WEEKDAYS: list[int] = [6]  # Monday=0 ... Sunday=6
    SLOT_STEP_MINUTES: int = 30

    STORE_PROVIDER: str = "memory"  # "memory" or "sql"
    DATABASE_URL: str = "sqlite:///./data/clinic.db"
    STORAGE_TIMEOUT_SECONDS: float = 5.0
    BOOKING_MAX_RETRIES: int = 3

    STATUS_TRANSITION_POLICY: TransitionPolicy = TransitionPolicy.PERMISSIVE

    @field_validator("STATUS_TRANSITION_POLICY", mode="before")
    @classmethod
    def _normalize_policy(cls, value):
        if isinstance(value, str):
            return value.strip().lower()
        return value


settings = Settings()
