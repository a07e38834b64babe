"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "AdaptWell Backend"
    debug: bool = False
    log_level: str = "INFO"
    database_url: str = "postgresql+psycopg2://adaptwell@localhost:5432/adaptwell"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    reasoning_timeout_seconds: float = 60.0
    monitoring_window_days: int = 14
    default_plan_weeks: int = 4
    monitor_on_deviation: bool = True
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "adaptwell"
    scheduler_enabled: bool = False
    scheduler_timezone: str = "UTC"
    cycle_job_hour: int = 6
    cycle_job_minute: int = 0
    reflection_job_day: int = 6
    reflection_job_hour: int = 20
    jobs_run_on_startup: bool = False


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
