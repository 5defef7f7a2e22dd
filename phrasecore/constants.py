"""
Review policy constants.

This module contains the static timing and selection parameters used by the
review loop. No runtime configuration or path defaults - pure constants only.
"""

# Seconds a phrase stays on screen before the round times out.
WAIT_TIME: int = 30

# Length of one countdown tick, in seconds.
TICK_INTERVAL: float = 1.0

# Milliseconds the translation stays visible before the next round starts.
TRANSITION_DELAY_MS: int = 1500

# Phrases whose risk score reaches this value form the high-risk pool.
HIGH_RISK_THRESHOLD: float = 0.3

# Probability of drawing from the high-risk pool when it is non-empty.
HIGH_RISK_BIAS: float = 0.8

# Risk score of a phrase that has never been reviewed.
UNSEEN_RISK_SCORE: float = 1.0
