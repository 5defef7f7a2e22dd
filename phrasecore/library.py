"""
Phrase list management: add, edit, delete and search the collection, writing
every mutation through to the phrase store.
"""

import logging
from typing import Callable, List, Optional, Sequence

from pydantic import ValidationError

from .db.store import PhraseStore
from .models import Phrase

logger = logging.getLogger(__name__)


class PhraseLibrary:
    """
    In-memory working set of the phrase collection, backed by a PhraseStore.

    Invalid input (blank text or translation) is rejected without touching
    the working set or the store; the mutating methods then return None or
    False instead of raising.
    """

    def __init__(self, store: PhraseStore, subscribe: bool = True):
        self.store = store
        self._phrases: List[Phrase] = []
        self._unsubscribe: Optional[Callable[[], None]] = None
        self._unsaved = False
        if subscribe:
            self._unsubscribe = store.subscribe(self._on_store_changed)
        self.reload()

    @property
    def phrases(self) -> List[Phrase]:
        """All phrases, newest first."""
        return list(self._phrases)

    @property
    def has_unsaved_changes(self) -> bool:
        """True if the last mutation could not be written to the store."""
        return self._unsaved

    def __len__(self) -> int:
        return len(self._phrases)

    def reload(self) -> None:
        """Replace the working set with the store's contents."""
        self._phrases = self.store.load_all()
        self._unsaved = False

    def close(self) -> None:
        if self._unsubscribe is not None:
            self._unsubscribe()
            self._unsubscribe = None

    def _on_store_changed(self, phrases: Sequence[Phrase]) -> None:
        logger.debug(f"Library refreshed with {len(phrases)} phrases.")
        self._phrases = list(phrases)
        self._unsaved = False

    def _persist(self) -> None:
        self._unsaved = not self.store.save_all(self._phrases)
        if self._unsaved:
            logger.warning("Phrase list change kept in memory only.")

    def get(self, phrase_id: str) -> Optional[Phrase]:
        for phrase in self._phrases:
            if phrase.id == phrase_id:
                return phrase
        return None

    def add_phrase(self, text: str, translation: str) -> Optional[Phrase]:
        """
        Create a phrase and prepend it to the collection.

        Returns:
            Phrase | None: The new phrase, or None if either field is blank.
        """
        try:
            phrase = Phrase(text=text, translation=translation)
        except ValidationError as e:
            logger.info(f"Rejected new phrase: {e.error_count()} invalid field(s).")
            return None
        self._phrases.insert(0, phrase)
        self._persist()
        logger.info(f"Added phrase {phrase.id}.")
        return phrase

    def edit_phrase(
        self, phrase_id: str, text: str, translation: str
    ) -> Optional[Phrase]:
        """
        Change the text and translation of an existing phrase. The id,
        creation time and review counters are kept.

        Returns:
            Phrase | None: The updated phrase, or None if the phrase does not
            exist or either field is blank.
        """
        index = next(
            (i for i, p in enumerate(self._phrases) if p.id == phrase_id), None
        )
        if index is None:
            logger.info(f"Cannot edit unknown phrase {phrase_id}.")
            return None
        current = self._phrases[index]
        try:
            updated = Phrase(
                id=current.id,
                text=text,
                translation=translation,
                created_at=current.created_at,
                success_count=current.success_count,
                failure_count=current.failure_count,
            )
        except ValidationError as e:
            logger.info(
                f"Rejected edit of phrase {phrase_id}: "
                f"{e.error_count()} invalid field(s)."
            )
            return None
        self._phrases[index] = updated
        self._persist()
        return updated

    def delete_phrase(self, phrase_id: str) -> bool:
        """
        Permanently remove a phrase.

        Returns:
            bool: True if a phrase was removed.
        """
        remaining = [p for p in self._phrases if p.id != phrase_id]
        if len(remaining) == len(self._phrases):
            return False
        self._phrases = remaining
        self._persist()
        logger.info(f"Deleted phrase {phrase_id}.")
        return True

    def search(self, term: str) -> List[Phrase]:
        """
        Case-insensitive substring match against text or translation. An
        empty term matches everything.
        """
        needle = term.lower()
        return [
            p
            for p in self._phrases
            if needle in p.text.lower() or needle in p.translation.lower()
        ]
