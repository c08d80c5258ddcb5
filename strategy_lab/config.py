import logging
import sys
from functools import lru_cache

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="STRATEGY_LAB_", env_file=".env", extra="ignore")

    # Data
    bars_csv_path: str = "data/bars.csv"

    # Batch limits
    max_instruments: int = 50
    max_concurrency: int = 8

    # Logging
    log_level: str = "INFO"


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get the settings singleton, read from the environment on first use."""
    return Settings()


def configure_logging(settings: Settings | None = None) -> None:
    """Send log records to stderr with the project's format."""
    settings = settings or get_settings()
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )
