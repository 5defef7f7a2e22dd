# phrasecore/scheduler.py

"""
Defines the BaseSelector abstract class and the RiskWeightedSelector, which
decides which phrase the next review round presents.
"""

import logging
import random
from abc import ABC, abstractmethod
from typing import List, Optional, Sequence

from pydantic import BaseModel, Field

from .constants import HIGH_RISK_BIAS, HIGH_RISK_THRESHOLD
from .models import Phrase
from .risk import risk_score

logger = logging.getLogger(__name__)


class SelectorConfig(BaseModel):
    """Policy constants for the risk-weighted selector."""

    high_risk_threshold: float = Field(default=HIGH_RISK_THRESHOLD, ge=0.0, le=1.0)
    high_risk_bias: float = Field(default=HIGH_RISK_BIAS, ge=0.0, le=1.0)


class BaseSelector(ABC):
    """
    Abstract base class for phrase selectors.
    """

    @abstractmethod
    def select_next(
        self, phrases: Sequence[Phrase], exclude_id: Optional[str] = None
    ) -> Optional[Phrase]:
        """
        Choose the phrase to present in the next round.

        Args:
            phrases: The full phrase collection.
            exclude_id: Id of the phrase shown in the immediately preceding
                round, if any.

        Returns:
            The selected Phrase, or None when the collection is empty.
        """
        pass


class RiskWeightedSelector(BaseSelector):
    """
    Selects phrases uniformly at random from a pool, preferring the pool of
    high-risk phrases.

    With probability `high_risk_bias` the draw comes from the eligible phrases
    whose risk score is at least `high_risk_threshold`; otherwise (or when
    that pool is empty) it comes from every eligible phrase. The phrase of the
    previous round is never eligible unless it is the only phrase.
    """

    def __init__(
        self,
        config: Optional[SelectorConfig] = None,
        rng: Optional[random.Random] = None,
    ):
        if config is None:
            config = SelectorConfig()
        self.config = config
        self.rng = rng if rng is not None else random.Random()

    def _eligible(
        self, phrases: Sequence[Phrase], exclude_id: Optional[str]
    ) -> List[Phrase]:
        eligible = [p for p in phrases if p.id != exclude_id]
        # Stale exclusion key (phrase deleted since last round)
        return eligible or list(phrases)

    def high_risk_pool(self, phrases: Sequence[Phrase]) -> List[Phrase]:
        """Return the phrases whose risk score meets the configured threshold."""
        return [
            p
            for p in phrases
            if risk_score(p) >= self.config.high_risk_threshold
        ]

    def select_next(
        self, phrases: Sequence[Phrase], exclude_id: Optional[str] = None
    ) -> Optional[Phrase]:
        if not phrases:
            logger.debug("No phrases available for selection.")
            return None
        if len(phrases) == 1:
            return phrases[0]

        eligible = self._eligible(phrases, exclude_id)
        high_risk = self.high_risk_pool(eligible)

        if high_risk and self.rng.random() < self.config.high_risk_bias:
            pool = high_risk
            pool_name = "high-risk"
        else:
            pool = eligible
            pool_name = "eligible"

        selected = pool[self.rng.randrange(len(pool))]
        logger.debug(
            f"Selected phrase {selected.id} from {pool_name} pool of {len(pool)} "
            f"(risk {risk_score(selected):.2f})"
        )
        return selected
