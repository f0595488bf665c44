from pathlib import Path

from pydantic_settings import BaseSettings, SettingsConfigDict

# Resolve .env from project root so it loads regardless of cwd
_PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
_ENV_FILE = _PROJECT_ROOT / ".env"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_file=(str(_ENV_FILE), ".env", "../.env"),
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Database
    database_url: str
    database_ssl: bool = True  # only used with asyncpg

    # CORS
    cors_origins: str = "http://localhost:3000"

    # Working day and slot grid
    clinic_timezone: str = "UTC"
    work_start_hour: int = 8
    work_end_hour: int = 18  # exclusive, so last slot ends at 18:00
    slot_duration_minutes: int = 30
    default_appointment_duration: int = 30

    # Env
    env: str = "development"

    @property
    def cors_origins_list(self) -> list[str]:
        return [o.strip() for o in self.cors_origins.split(",") if o.strip()]


settings = Settings()
