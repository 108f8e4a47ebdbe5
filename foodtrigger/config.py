import logging
from typing import List, Literal

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    database_url: str = "sqlite:///./foodtrigger.db"
    redis_url: str = "redis://redis:6379/0"

    log_level: str = "INFO"

    # Candidate response lags (minutes), scanned shortest first
    correlation_lag_windows_minutes: List[int] = [
        15,
        30,
        60,
        120,
        240,
        480,
        720,
        1440,
        2880,
        4320,
    ]
    correlation_response_window_hours: int = 4

    # Evidence thresholds
    correlation_min_sample_size: int = 5
    correlation_significance_level: float = 0.05
    correlation_synergy_threshold: float = 0.15

    # Confidence labels
    correlation_high_confidence_p: float = 0.01
    correlation_high_confidence_n: int = 20
    correlation_medium_confidence_p: float = 0.05
    correlation_medium_confidence_n: int = 10

    # "approximate" keeps parity with previously generated reports
    correlation_pvalue_method: Literal["approximate", "exact"] = "approximate"

    correlation_max_workers: int = 1  # >1 enables the process pool
    correlation_max_combination_size: int = 2
    correlation_progress_interval: int = 50  # tasks between progress updates
    correlation_default_range_days: int = 90

    class Config:
        env_file = ".env"


settings = Settings()


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from settings (no-op if already configured)."""
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )
