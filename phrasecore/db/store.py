"""
The PhraseStore repository abstraction.

Concrete stores implement `_read`, `_write` and `_revision`; this base class
turns their StoreError failures into the local recoveries the review loop
relies on (empty collection on read failure, False on write failure) and
handles change notification between views of the same data.
"""

import logging
from abc import ABC, abstractmethod
from typing import Callable, Hashable, List, Optional, Sequence

from ..exceptions import StoreError
from ..models import Phrase

logger = logging.getLogger(__name__)

ChangeListener = Callable[[List[Phrase]], None]


class PhraseStore(ABC):
    """
    Repository holding the phrase collection.

    The store is the single source of truth; callers work on the snapshot
    returned by `load_all()` and write it back with `save_all()`.
    """

    def __init__(self) -> None:
        self._listeners: List[ChangeListener] = []
        self._known_revision: Optional[Hashable] = None

    # --- Backend hooks ---

    @abstractmethod
    def _read(self) -> List[Phrase]:
        """Return the stored collection. Raises StoreError on failure."""
        pass

    @abstractmethod
    def _write(self, phrases: Sequence[Phrase]) -> None:
        """Replace the stored collection. Raises StoreError on failure."""
        pass

    @abstractmethod
    def _revision(self) -> Optional[Hashable]:
        """
        Return a token that changes whenever the stored data changes, or None
        when there is no backing data yet. Raises StoreError on failure.
        """
        pass

    def close(self) -> None:
        """Release backend resources. No-op by default."""

    def __enter__(self) -> "PhraseStore":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    # --- Public API ---

    def load_all(self) -> List[Phrase]:
        """
        Read the whole phrase collection.

        Returns:
            List[Phrase]: The stored phrases, newest first. An absent backing
            store, or one that cannot be read, yields an empty list.
        """
        try:
            phrases = self._read()
            self._known_revision = self._revision()
        except StoreError as e:
            logger.error(f"Failed to load phrases, treating store as empty: {e}")
            return []
        logger.debug(f"Loaded {len(phrases)} phrases.")
        return phrases

    def save_all(self, phrases: Sequence[Phrase]) -> bool:
        """
        Replace the stored collection with `phrases`.

        Returns:
            bool: True on success, False if the write failed. A failed write
            leaves the caller's in-memory phrases untouched.
        """
        try:
            self._write(phrases)
            self._known_revision = self._revision()
        except StoreError as e:
            logger.error(f"Failed to save {len(phrases)} phrases: {e}")
            return False
        logger.debug(f"Saved {len(phrases)} phrases.")
        return True

    def subscribe(self, listener: ChangeListener) -> Callable[[], None]:
        """
        Register a listener for changes made by another view of the data.

        Returns:
            A callable that removes the listener. Calling it twice is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def poll_changes(self) -> bool:
        """
        Check whether the stored data changed since this store last read or
        wrote it, and if so notify every listener with the fresh collection.

        Returns:
            bool: True if a change was detected and listeners were notified.
        """
        try:
            revision = self._revision()
        except StoreError as e:
            logger.warning(f"Could not check the store for changes: {e}")
            return False
        if revision == self._known_revision:
            return False

        logger.info("Phrase store changed externally; refreshing listeners.")
        try:
            phrases = self._read()
            self._known_revision = self._revision()
        except StoreError as e:
            logger.error(
                f"Failed to reload changed phrases, treating store as empty: {e}"
            )
            phrases = []
            # Report an unreadable revision once
            self._known_revision = revision
        for listener in list(self._listeners):
            listener(list(phrases))
        return True
