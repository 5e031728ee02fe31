from functools import lru_cache
from pydantic_settings import BaseSettings

class Settings(BaseSettings):
    """Application configuration loaded from environment variables."""

    tick_interval_sec: float = 1.0
    # Observed behaviour keeps totals across edits; flip to start them over.
    reset_totals_on_edit: bool = False
    routine_file: str = ""

    chime_frequency_hz: float = 440.0
    chime_duration_sec: float = 0.5
    chime_sample_rate: int = 24_000

    log_level: str = "INFO"

    model_config = {
        "env_file": ".env",
        "env_prefix": "",
        "extra": "ignore",
    }

@lru_cache()
def get_settings() -> Settings:
    """Return cached Settings instance."""
    return Settings()
