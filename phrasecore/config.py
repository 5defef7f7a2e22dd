"""
Centralized configuration management for phrasecore.
"""
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

from .constants import (
    HIGH_RISK_BIAS,
    HIGH_RISK_THRESHOLD,
    TICK_INTERVAL,
    TRANSITION_DELAY_MS,
    WAIT_TIME,
)
from .review_controller import ReviewConfig
from .scheduler import SelectorConfig


def get_default_store_path() -> Path:
    """Returns the default location of the phrase file."""
    return Path.home() / ".phrasecore" / "phrases.json"


class Settings(BaseSettings):
    """
    Application settings, loaded from PHRASECORE_* environment variables or a
    .env file.
    """

    model_config = SettingsConfigDict(
        env_prefix="PHRASECORE_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    # --- Storage ---
    # A .json path selects the JSON store, anything else DuckDB.
    store_path: Path = Field(default_factory=get_default_store_path)

    # --- Review timing ---
    wait_time: int = Field(default=WAIT_TIME, gt=0)
    tick_interval: float = Field(default=TICK_INTERVAL, gt=0)
    transition_delay_ms: int = Field(default=TRANSITION_DELAY_MS, ge=0)

    # --- Selection policy ---
    high_risk_threshold: float = Field(default=HIGH_RISK_THRESHOLD, ge=0.0, le=1.0)
    high_risk_bias: float = Field(default=HIGH_RISK_BIAS, ge=0.0, le=1.0)

    # --- Logging ---
    log_level: str = "WARNING"

    def selector_config(self) -> SelectorConfig:
        return SelectorConfig(
            high_risk_threshold=self.high_risk_threshold,
            high_risk_bias=self.high_risk_bias,
        )

    def review_config(self) -> ReviewConfig:
        return ReviewConfig(
            wait_time=self.wait_time,
            tick_interval=self.tick_interval,
            transition_delay_ms=self.transition_delay_ms,
        )
