"""
Risk scoring for phrases.

The risk score is the empirical failure rate of a phrase. It is the only
signal the selector uses to bias reviews toward weaker material.
"""

from .constants import UNSEEN_RISK_SCORE
from .models import Phrase


def risk_score(phrase: Phrase) -> float:
    """
    Compute the difficulty score of a phrase from its review counters.

    Returns:
        float: `1.0` for a phrase that has never been reviewed, otherwise
        `failure_count / (success_count + failure_count)`. Always in [0, 1].
    """
    total_attempts = phrase.success_count + phrase.failure_count
    if total_attempts == 0:
        return UNSEEN_RISK_SCORE
    return phrase.failure_count / total_attempts
