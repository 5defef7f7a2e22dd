import pytest
from datetime import datetime, timezone
from pathlib import Path
from typing import Generator, List

from phrasecore.models import Phrase
from phrasecore.db import DuckDBPhraseStore, JsonPhraseStore, PhraseStore
from phrasecore.timers import VirtualTimerScheduler


# each test runs on cwd to its temp dir
@pytest.fixture(autouse=True)
def go_to_tmpdir(tmp_path: Path, monkeypatch):
    """
    Run every test inside its own temporary directory so stray files (and a
    stray .env) never leak between tests.
    """
    monkeypatch.chdir(tmp_path)
    for name in (
        "PHRASECORE_STORE_PATH",
        "PHRASECORE_WAIT_TIME",
        "PHRASECORE_TICK_INTERVAL",
        "PHRASECORE_TRANSITION_DELAY_MS",
        "PHRASECORE_HIGH_RISK_THRESHOLD",
        "PHRASECORE_HIGH_RISK_BIAS",
        "PHRASECORE_LOG_LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)
    yield


# --- Store Fixtures ---
@pytest.fixture
def json_path(tmp_path: Path) -> Path:
    return tmp_path / "phrases.json"


@pytest.fixture
def duckdb_path(tmp_path: Path) -> Path:
    return tmp_path / "phrases.db"


@pytest.fixture(params=["json", "duckdb-memory", "duckdb-file"])
def store(
    request, json_path: Path, duckdb_path: Path
) -> Generator[PhraseStore, None, None]:
    """
    Provide each PhraseStore implementation in turn and close it on teardown.
    """
    if request.param == "json":
        phrase_store: PhraseStore = JsonPhraseStore(json_path)
    elif request.param == "duckdb-memory":
        phrase_store = DuckDBPhraseStore(":memory:")
    else:
        phrase_store = DuckDBPhraseStore(duckdb_path)
    try:
        yield phrase_store
    finally:
        phrase_store.close()


@pytest.fixture
def json_store(json_path: Path) -> JsonPhraseStore:
    return JsonPhraseStore(json_path)


@pytest.fixture
def timers() -> VirtualTimerScheduler:
    return VirtualTimerScheduler()


# --- Phrase Fixtures ---
@pytest.fixture
def phrase_a() -> Phrase:
    """A struggling phrase: 3 failures, 1 success (risk 0.75)."""
    return Phrase(
        id="a",
        text="Guten Morgen",
        translation="Good morning",
        created_at=datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc),
        success_count=1,
        failure_count=3,
    )


@pytest.fixture
def phrase_b() -> Phrase:
    """A mastered phrase: 5 successes, no failures (risk 0.0)."""
    return Phrase(
        id="b",
        text="Danke",
        translation="Thank you",
        created_at=datetime(2024, 1, 2, 9, 0, tzinfo=timezone.utc),
        success_count=5,
        failure_count=0,
    )


@pytest.fixture
def phrase_c() -> Phrase:
    """An unseen phrase (risk 1.0)."""
    return Phrase(
        id="c",
        text="Wie geht's?",
        translation="How are you?",
        created_at=datetime(2024, 1, 3, 9, 0, tzinfo=timezone.utc),
    )


@pytest.fixture
def sample_phrases(phrase_a: Phrase, phrase_b: Phrase, phrase_c: Phrase) -> List[Phrase]:
    return [phrase_a, phrase_b, phrase_c]
