"""
Unit and integration tests for ReviewRoundController in
phrasecore.review_controller.
"""

import random
from typing import List, Optional, Sequence
from unittest.mock import MagicMock

import pytest

from phrasecore.db import JsonPhraseStore, PhraseStore
from phrasecore.library import PhraseLibrary
from phrasecore.models import Phrase, ReviewPhase
from phrasecore.review_controller import ReviewConfig, ReviewRoundController
from phrasecore.scheduler import BaseSelector, RiskWeightedSelector
from phrasecore.timers import VirtualTimerScheduler

# --- Fixtures ---


@pytest.fixture
def fresh_phrases() -> List[Phrase]:
    """Two never-reviewed phrases."""
    return [
        Phrase(id="x", text="Bonjour", translation="Hello"),
        Phrase(id="y", text="Merci", translation="Thanks"),
    ]


@pytest.fixture
def json_controller(
    json_store: JsonPhraseStore,
    timers: VirtualTimerScheduler,
    fresh_phrases: List[Phrase],
) -> ReviewRoundController:
    """Controller over a JSON store seeded with `fresh_phrases`."""
    json_store.save_all(fresh_phrases)
    return ReviewRoundController(
        store=json_store,
        timers=timers,
        selector=RiskWeightedSelector(rng=random.Random(42)),
    )


@pytest.fixture
def mock_store(fresh_phrases: List[Phrase]) -> MagicMock:
    """
    Create a MagicMock preconfigured to mimic a PhraseStore whose writes
    succeed.
    """
    store = MagicMock(spec=PhraseStore)
    store.load_all.return_value = [p.model_copy() for p in fresh_phrases]
    store.save_all.return_value = True
    store.subscribe.return_value = MagicMock()
    return store


def _counters(store: PhraseStore) -> dict:
    return {
        p.id: (p.success_count, p.failure_count) for p in store.load_all()
    }


class RecordingSelector(BaseSelector):
    """Delegates to a seeded selector and records what the store held."""

    def __init__(self, store: PhraseStore):
        self.store = store
        self.inner = RiskWeightedSelector(rng=random.Random(3))
        self.snapshots: List[dict] = []

    def select_next(
        self, phrases: Sequence[Phrase], exclude_id: Optional[str] = None
    ) -> Optional[Phrase]:
        self.snapshots.append(_counters(self.store))
        return self.inner.select_next(phrases, exclude_id)


# --- Test Cases ---


class TestStart:
    def test_initial_state_is_idle(self, json_controller):
        state = json_controller.state()
        assert state.phase is ReviewPhase.Idle
        assert state.current_phrase is None
        assert state.time_left == 30
        assert state.show_translation is False

    def test_start_presents_a_phrase(self, json_controller, timers):
        assert json_controller.start() is ReviewPhase.Presenting
        assert json_controller.current_phrase.id in {"x", "y"}
        assert json_controller.time_left == 30
        assert json_controller.show_translation is False
        assert len(timers.pending()) == 1

    def test_start_with_empty_store_finishes(self, json_store, timers):
        controller = ReviewRoundController(store=json_store, timers=timers)
        assert controller.start() is ReviewPhase.Finished
        assert controller.current_phrase is None
        assert timers.pending() == []

    def test_start_twice_is_ignored(self, json_controller):
        json_controller.start()
        first = json_controller.current_phrase
        assert json_controller.start() is ReviewPhase.Presenting
        assert json_controller.current_phrase is first

    def test_start_subscribes_and_return_unsubscribes(self, mock_store, timers):
        controller = ReviewRoundController(store=mock_store, timers=timers)
        controller.start()
        mock_store.subscribe.assert_called_once_with(controller.on_store_changed)

        controller.return_to_list()
        mock_store.subscribe.return_value.assert_called_once_with()


class TestAnswer:
    def test_dont_know_counts_failure(self, json_controller, json_store):
        json_controller.start()
        phrase_id = json_controller.current_phrase.id

        assert json_controller.answer(False) is True

        assert json_controller.phase is ReviewPhase.Revealed
        assert json_controller.show_translation is True
        assert _counters(json_store)[phrase_id] == (0, 1)

    def test_know_counts_success(self, json_controller, json_store):
        json_controller.start()
        phrase_id = json_controller.current_phrase.id

        json_controller.answer(True)

        assert _counters(json_store)[phrase_id] == (1, 0)

    def test_duplicate_answer_counts_once(self, json_controller, json_store):
        json_controller.start()
        phrase_id = json_controller.current_phrase.id

        assert json_controller.answer(True) is True
        assert json_controller.answer(True) is False
        assert json_controller.answer(False) is False

        assert _counters(json_store)[phrase_id] == (1, 0)
        assert len(json_controller.history) == 1

    def test_answer_before_start_is_ignored(self, json_controller, json_store):
        assert json_controller.answer(True) is False
        assert _counters(json_store) == {"x": (0, 0), "y": (0, 0)}

    def test_exactly_one_write_per_round(self, mock_store, timers):
        controller = ReviewRoundController(store=mock_store, timers=timers)
        controller.start()
        controller.answer(False)
        controller.answer(False)
        timers.advance(1.5)
        controller.answer(True)

        assert mock_store.save_all.call_count == 2

    def test_failed_write_keeps_progress_in_memory(self, mock_store, timers):
        mock_store.save_all.return_value = False
        controller = ReviewRoundController(store=mock_store, timers=timers)
        controller.start()
        phrase = controller.current_phrase

        assert controller.answer(True) is True

        assert phrase.success_count == 1
        assert controller.history[-1].saved is False
        timers.advance(1.5)
        assert controller.phase is ReviewPhase.Presenting


class TestCountdown:
    def test_ticks_down_once_per_second(self, json_controller, timers):
        json_controller.start()
        timers.advance(1)
        assert json_controller.time_left == 29
        timers.advance(28)
        assert json_controller.time_left == 1
        assert json_controller.phase is ReviewPhase.Presenting

    def test_timeout_counts_failure_once(self, json_controller, json_store, timers):
        json_controller.start()
        phrase_id = json_controller.current_phrase.id

        timers.advance(30)

        assert json_controller.phase is ReviewPhase.Revealed
        assert json_controller.time_left == 0
        assert json_controller.history[-1].timed_out is True
        assert _counters(json_store)[phrase_id] == (0, 1)

        # Still revealed a moment later; no second failure
        timers.advance(1.0)
        assert _counters(json_store)[phrase_id] == (0, 1)

    def test_answer_after_timeout_is_ignored(self, json_controller, json_store, timers):
        json_controller.start()
        phrase_id = json_controller.current_phrase.id
        timers.advance(30)

        assert json_controller.answer(True) is False
        assert _counters(json_store)[phrase_id] == (0, 1)

    def test_custom_wait_time(self, json_store, timers, fresh_phrases):
        json_store.save_all(fresh_phrases)
        controller = ReviewRoundController(
            store=json_store, timers=timers, config=ReviewConfig(wait_time=3)
        )
        controller.start()
        timers.advance(2)
        assert controller.phase is ReviewPhase.Presenting
        timers.advance(1)
        assert controller.phase is ReviewPhase.Revealed


class TestTransition:
    def test_revealed_advances_after_delay(self, json_controller, timers):
        json_controller.start()
        first = json_controller.current_phrase.id
        json_controller.answer(True)

        timers.advance(1.0)
        assert json_controller.phase is ReviewPhase.Revealed

        timers.advance(0.5)
        assert json_controller.phase is ReviewPhase.Presenting
        assert json_controller.current_phrase.id != first
        assert json_controller.time_left == 30
        assert json_controller.show_translation is False
        assert json_controller.is_transitioning is False

    def test_answer_then_timeout_on_next_phrase(self, json_controller, json_store, timers):
        """Don't-know on one phrase, then a timeout on the other: both failures."""
        json_controller.start()
        first = json_controller.current_phrase.id
        json_controller.answer(False)
        timers.advance(1.5)
        second = json_controller.current_phrase.id
        assert second != first

        timers.advance(30)

        counters = _counters(json_store)
        assert counters[first] == (0, 1)
        assert counters[second] == (0, 1)

    def test_single_phrase_repeats(self, json_store, timers):
        json_store.save_all([Phrase(id="only", text="Ja", translation="Yes")])
        controller = ReviewRoundController(store=json_store, timers=timers)
        controller.start()
        for _ in range(3):
            assert controller.current_phrase.id == "only"
            controller.answer(True)
            timers.advance(1.5)
        assert _counters(json_store)["only"] == (3, 0)

    def test_write_back_happens_before_next_selection(self, json_store, timers, fresh_phrases):
        json_store.save_all(fresh_phrases)
        selector = RecordingSelector(json_store)
        controller = ReviewRoundController(
            store=json_store, timers=timers, selector=selector
        )
        controller.start()
        first = controller.current_phrase.id
        controller.answer(False)
        timers.advance(1.5)

        assert selector.snapshots[0][first] == (0, 0)
        assert selector.snapshots[1][first] == (0, 1)

    def test_collection_emptied_while_revealed_finishes(self, json_controller, timers):
        json_controller.start()
        json_controller.answer(True)
        json_controller.on_store_changed([])

        timers.advance(1.5)

        assert json_controller.phase is ReviewPhase.Finished
        assert json_controller.current_phrase is None
        assert timers.pending() == []


class TestReturnToList:
    def test_mid_countdown_leaves_counters_unchanged(self, json_controller, json_store, timers):
        before = _counters(json_store)
        json_controller.start()
        timers.advance(10)

        json_controller.return_to_list()

        assert json_controller.phase is ReviewPhase.Idle
        assert json_controller.current_phrase is None
        assert json_controller.time_left == 30
        assert timers.pending() == []
        timers.advance(60)
        assert _counters(json_store) == before
        assert json_controller.history == []

    def test_while_revealed_cancels_pending_advance(self, json_controller, timers):
        json_controller.start()
        json_controller.answer(True)

        json_controller.return_to_list()
        timers.advance(5)

        assert json_controller.phase is ReviewPhase.Idle
        assert json_controller.show_translation is False
        assert timers.pending() == []

    def test_from_finished(self, json_store, timers):
        controller = ReviewRoundController(store=json_store, timers=timers)
        controller.start()
        controller.return_to_list()
        assert controller.phase is ReviewPhase.Idle

    def test_can_start_again_after_returning(self, json_controller):
        json_controller.start()
        json_controller.return_to_list()
        assert json_controller.start() is ReviewPhase.Presenting


class TestStoreChanges:
    def test_deleted_phrase_abandons_round(self, json_controller, json_store, timers):
        json_controller.start()
        doomed = json_controller.current_phrase.id
        survivors = [p for p in json_controller.phrases if p.id != doomed]

        json_controller.on_store_changed(survivors)

        assert json_controller.phase is ReviewPhase.Presenting
        assert json_controller.current_phrase.id != doomed
        assert json_controller.time_left == 30
        assert len(timers.pending()) == 1
        assert json_controller.history == []

    def test_deleting_last_phrase_finishes(self, json_store, timers):
        json_store.save_all([Phrase(id="only", text="Ja", translation="Yes")])
        controller = ReviewRoundController(store=json_store, timers=timers)
        controller.start()

        controller.on_store_changed([])

        assert controller.phase is ReviewPhase.Finished
        assert timers.pending() == []

    def test_edited_phrase_is_refreshed(self, json_controller, json_store):
        json_controller.start()
        current = json_controller.current_phrase
        edited = [
            p.model_copy(update={"translation": "Updated"})
            if p.id == current.id
            else p
            for p in json_controller.phrases
        ]

        json_controller.on_store_changed(edited)
        json_controller.answer(False)

        assert json_controller.current_phrase.translation == "Updated"
        assert _counters(json_store)[current.id] == (0, 1)

    def test_finished_session_resumes_when_phrases_appear(self, json_store, timers):
        controller = ReviewRoundController(store=json_store, timers=timers)
        controller.start()
        assert controller.phase is ReviewPhase.Finished

        controller.on_store_changed([Phrase(id="new", text="Si", translation="Yes")])

        assert controller.phase is ReviewPhase.Presenting
        assert controller.current_phrase.id == "new"

    def test_change_made_through_another_store_is_picked_up(
        self, json_controller, json_path, json_store, timers
    ):
        json_controller.start()
        doomed = json_controller.current_phrase.id

        other_view = PhraseLibrary(JsonPhraseStore(json_path), subscribe=False)
        assert other_view.delete_phrase(doomed) is True

        assert json_store.poll_changes() is True
        assert json_controller.current_phrase.id != doomed
        assert doomed not in {p.id for p in json_controller.phrases}

    def test_own_writes_do_not_trigger_notifications(self, json_controller, json_store):
        json_controller.start()
        json_controller.answer(True)
        assert json_store.poll_changes() is False
