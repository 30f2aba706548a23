from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="CAMPUSOPS_", env_file=".env", env_file_encoding="utf-8", extra="ignore"
    )

    project_name: str = "Campus Event Console"
    log_level: str = "INFO"

    default_page_size: int = 12
    max_page_size: int = 100

    # Dashboard previews of upcoming/recent events, and how far back "recent" looks.
    dashboard_preview_size: int = 5
    recent_events_limit: int = 50

    seed_demo_data: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
