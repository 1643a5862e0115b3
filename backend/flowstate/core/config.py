"""Application configuration managed via environment variables."""
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    app_name: str = "FlowState Backend"
    debug: bool = False
    log_level: str = "INFO"
    # Empty disables the database path; the local JSON store is used instead.
    database_url: str | None = "postgresql+psycopg2://flowstate@localhost:5432/flowstate"
    database_create_tables: bool = True
    local_storage_dir: str = ".flowstate"
    openai_api_key: str | None = None
    openai_model: str = "gpt-4o"
    openai_vision_model: str = "gpt-4o"
    opik_enabled: bool = False
    opik_api_key: str | None = None
    opik_project: str = "flowstate"
    max_task_minutes: int = 45
    min_onboarding_strengths: int = 5
    top_strengths_count: int = 5


@lru_cache
def get_settings() -> Settings:
    """Return a cached Settings instance."""
    return Settings()


settings = get_settings()
