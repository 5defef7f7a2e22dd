"""
This module defines the ReviewRoundController class, the state machine that
drives timed review rounds: it asks the selector for a phrase, runs the
countdown, records the answer (or the timeout) through the phrase store and
schedules the transition to the next round.
"""

import logging
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from pydantic import BaseModel, Field

from .constants import TICK_INTERVAL, TRANSITION_DELAY_MS, WAIT_TIME
from .db.store import PhraseStore
from .models import Phrase, ReviewPhase, ReviewState
from .scheduler import BaseSelector, RiskWeightedSelector
from .timers import TimerHandle, TimerScheduler

# Initialize logger
logger = logging.getLogger(__name__)


class ReviewConfig(BaseModel):
    """Timing configuration for review rounds."""

    wait_time: int = Field(default=WAIT_TIME, gt=0)
    tick_interval: float = Field(default=TICK_INTERVAL, gt=0)
    transition_delay_ms: int = Field(default=TRANSITION_DELAY_MS, ge=0)

    @property
    def transition_delay(self) -> float:
        """Transition delay in seconds."""
        return self.transition_delay_ms / 1000


@dataclass
class RoundOutcome:
    phrase_id: str
    is_correct: bool
    timed_out: bool
    saved: bool


class ReviewRoundController:
    """
    Owns the lifecycle of review rounds.

    Phases:
    - Idle: no round running; `start()` begins one.
    - Presenting: a phrase is shown and the countdown runs.
    - Revealed: the answer was recorded, the translation is shown and the
      transition to the next round is pending.
    - Finished: no phrases are available.

    All timing goes through the injected TimerScheduler; the controller keeps
    the handles of its countdown tick and its pending transition and cancels
    them whenever it leaves the phase they belong to.
    """

    def __init__(
        self,
        store: PhraseStore,
        timers: TimerScheduler,
        selector: Optional[BaseSelector] = None,
        config: Optional[ReviewConfig] = None,
    ):
        """
        Parameters:
            store (PhraseStore): Source of truth for the phrase collection.
                Read on `start()`, written once per completed round.
            timers (TimerScheduler): Scheduler for the countdown tick and the
                deferred transition.
            selector (BaseSelector): Chooses the phrase of each round.
                Defaults to RiskWeightedSelector.
            config (ReviewConfig): Round timings. Defaults to ReviewConfig().
        """
        self.store = store
        self.timers = timers
        self.selector = selector if selector is not None else RiskWeightedSelector()
        self.config = config if config is not None else ReviewConfig()

        self.history: List[RoundOutcome] = []
        self._phrases: List[Phrase] = []
        self._phase = ReviewPhase.Idle
        self._current: Optional[Phrase] = None
        self._last_phrase_id: Optional[str] = None
        self._time_left = self.config.wait_time
        self._show_translation = False
        self._transitioning = False
        self._tick_handle: Optional[TimerHandle] = None
        self._advance_handle: Optional[TimerHandle] = None
        self._unsubscribe: Optional[Callable[[], None]] = None

    # --- Observable state ---

    @property
    def phase(self) -> ReviewPhase:
        return self._phase

    @property
    def current_phrase(self) -> Optional[Phrase]:
        return self._current

    @property
    def time_left(self) -> int:
        return self._time_left

    @property
    def show_translation(self) -> bool:
        return self._show_translation

    @property
    def is_transitioning(self) -> bool:
        return self._transitioning

    @property
    def phrases(self) -> List[Phrase]:
        """The in-memory snapshot of the collection."""
        return list(self._phrases)

    def state(self) -> ReviewState:
        return ReviewState(
            phase=self._phase,
            current_phrase=self._current,
            time_left=self._time_left,
            show_translation=self._show_translation,
            rounds_completed=len(self.history),
        )

    # --- Intents ---

    def start(self) -> ReviewPhase:
        """
        Load the collection and begin the first round.

        Subscribes to store change notifications for the duration of the
        session. Has no effect unless the controller is Idle.

        Returns:
            ReviewPhase: Presenting if a phrase was selected, Finished if the
            collection is empty.
        """
        if self._phase is not ReviewPhase.Idle:
            logger.debug(f"start() ignored in phase {self._phase.name}.")
            return self._phase

        self._phrases = self.store.load_all()
        if self._unsubscribe is None:
            self._unsubscribe = self.store.subscribe(self.on_store_changed)
        logger.info(f"Starting review with {len(self._phrases)} phrases.")
        self._start_round()
        return self._phase

    def answer(self, is_correct: bool) -> bool:
        """
        Record the user's answer for the current round.

        Only the first answer of a round is accepted; later answers, answers
        outside the Presenting phase and answers while the reveal is in
        progress are ignored.

        Returns:
            bool: True if the answer was recorded.
        """
        if (
            self._phase is not ReviewPhase.Presenting
            or self._transitioning
            or self._current is None
        ):
            logger.debug(
                f"Ignoring answer in phase {self._phase.name} "
                f"(transitioning={self._transitioning})."
            )
            return False
        self._complete_round(is_correct, timed_out=False)
        return True

    def return_to_list(self) -> None:
        """
        Abandon the session: cancel every pending timer, discard the round
        and go back to Idle. Counters of an unanswered round are untouched.
        """
        self._cancel_timers()
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None
        if self._phase is ReviewPhase.Presenting and self._current is not None:
            logger.info(f"Round for phrase {self._current.id} abandoned.")
        self._current = None
        self._show_translation = False
        self._time_left = self.config.wait_time
        self._transitioning = False
        self._last_phrase_id = None
        self._phase = ReviewPhase.Idle

    def on_store_changed(self, phrases: Sequence[Phrase]) -> None:
        """
        Replace the working set after another view modified the store.

        If the phrase being presented no longer exists, the round is
        abandoned without touching any counter and the next round starts
        immediately. A Finished session resumes when phrases reappear.
        """
        self._phrases = list(phrases)
        if self._phase is ReviewPhase.Finished:
            if self._phrases:
                logger.info("Phrases became available; resuming review.")
                self._start_round()
            return
        if self._current is None:
            return

        refreshed = self._find(self._current.id)
        if refreshed is not None:
            self._current = refreshed
        elif self._phase is ReviewPhase.Presenting:
            logger.warning(
                f"Phrase {self._current.id} was deleted mid-round; "
                "abandoning the round."
            )
            self._start_round()

    # --- Transitions ---

    def _find(self, phrase_id: str) -> Optional[Phrase]:
        for phrase in self._phrases:
            if phrase.id == phrase_id:
                return phrase
        return None

    def _start_round(self) -> None:
        self._cancel_timers()
        self._show_translation = False
        self._time_left = self.config.wait_time
        self._transitioning = False

        phrase = self.selector.select_next(self._phrases, self._last_phrase_id)
        if phrase is None:
            self._current = None
            self._phase = ReviewPhase.Finished
            logger.info("No phrases available; review finished.")
            return

        self._current = phrase
        self._last_phrase_id = phrase.id
        self._phase = ReviewPhase.Presenting
        self._tick_handle = self.timers.call_every(
            self.config.tick_interval, self._tick
        )
        logger.debug(f"Presenting phrase {phrase.id}.")

    def _tick(self) -> None:
        if self._phase is not ReviewPhase.Presenting or self._transitioning:
            return
        self._time_left = max(self._time_left - 1, 0)
        if self._time_left == 0:
            logger.debug(f"Time is up for phrase {self._current.id}.")
            self._complete_round(is_correct=False, timed_out=True)

    def _complete_round(self, is_correct: bool, timed_out: bool) -> None:
        self._transitioning = True
        self._cancel_tick()

        phrase = self._current
        phrase.record_outcome(is_correct)
        saved = self.store.save_all(self._phrases)
        if not saved:
            logger.warning(
                f"Progress for phrase {phrase.id} could not be saved; "
                "keeping it in memory."
            )
        self.history.append(
            RoundOutcome(
                phrase_id=phrase.id,
                is_correct=is_correct,
                timed_out=timed_out,
                saved=saved,
            )
        )

        self._show_translation = True
        self._phase = ReviewPhase.Revealed
        self._advance_handle = self.timers.call_later(
            self.config.transition_delay, self._advance
        )

    def _advance(self) -> None:
        self._advance_handle = None
        if self._phase is ReviewPhase.Revealed:
            self._start_round()

    def _cancel_tick(self) -> None:
        if self._tick_handle is not None:
            self._tick_handle.cancel()
            self._tick_handle = None

    def _cancel_timers(self) -> None:
        self._cancel_tick()
        if self._advance_handle is not None:
            self._advance_handle.cancel()
            self._advance_handle = None
