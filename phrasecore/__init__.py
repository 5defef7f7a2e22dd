"""Phrasecore - adaptive timed drilling of phrase/translation pairs."""

from .models import Phrase, ReviewPhase, ReviewState
from .constants import (
    HIGH_RISK_BIAS,
    HIGH_RISK_THRESHOLD,
    TRANSITION_DELAY_MS,
    WAIT_TIME,
)
from .risk import risk_score
from .scheduler import RiskWeightedSelector, SelectorConfig
from .timers import TimerHandle, TimerScheduler, VirtualTimerScheduler
from .review_controller import ReviewConfig, ReviewRoundController
from .library import PhraseLibrary
from .db import DuckDBPhraseStore, JsonPhraseStore, PhraseStore, open_store

__all__ = [
    "Phrase",
    "ReviewPhase",
    "ReviewState",
    "HIGH_RISK_BIAS",
    "HIGH_RISK_THRESHOLD",
    "TRANSITION_DELAY_MS",
    "WAIT_TIME",
    "risk_score",
    "RiskWeightedSelector",
    "SelectorConfig",
    "TimerHandle",
    "TimerScheduler",
    "VirtualTimerScheduler",
    "ReviewConfig",
    "ReviewRoundController",
    "PhraseLibrary",
    "PhraseStore",
    "JsonPhraseStore",
    "DuckDBPhraseStore",
    "open_store",
]
