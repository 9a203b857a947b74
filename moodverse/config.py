"""
Runtime configuration, read from ``MOODVERSE_*`` environment variables.
"""

from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="MOODVERSE_", extra="ignore")

    # Corpus JSON; None means the copy shipped with the package
    corpus_path: Path | None = None
    # Directory holding one JSON file per preference key
    data_dir: Path = Field(default_factory=lambda: Path.home() / ".moodverse")
    # Seconds between drawing the next quote and showing it
    transition_delay: float = Field(0.3, ge=0)

    host: str = "0.0.0.0"
    port: int = 8000
    log_level: str = "info"
    reload: bool = False


@lru_cache
def get_settings() -> Settings:
    return Settings()
