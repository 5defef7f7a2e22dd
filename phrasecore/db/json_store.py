"""
JSON file implementation of the PhraseStore.
"""

import hashlib
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import List, Optional, Sequence, Union

from ..exceptions import StoreReadError, StoreWriteError
from ..models import Phrase
from . import db_utils
from .store import PhraseStore

logger = logging.getLogger(__name__)


class JsonPhraseStore(PhraseStore):
    """
    Keeps the phrase collection in a single JSON file: an array of phrase
    objects with camelCase keys.

    Writes go to a temporary file in the same directory which then replaces
    the target, so readers never observe a half-written file.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path).expanduser().resolve()
        logger.info(f"JsonPhraseStore initialized for file at: {self.path}")

    def _read_bytes(self) -> Optional[bytes]:
        try:
            return self.path.read_bytes()
        except FileNotFoundError:
            return None
        except OSError as e:
            raise StoreReadError(
                f"Failed to read {self.path}: {e}", original_exception=e
            ) from e

    def _read(self) -> List[Phrase]:
        raw = self._read_bytes()
        if raw is None or not raw.strip():
            logger.info(f"No phrase file at {self.path}; starting empty.")
            return []
        try:
            data = json.loads(raw)
        except ValueError as e:
            raise StoreReadError(
                f"Phrase file {self.path} is not valid JSON: {e}",
                original_exception=e,
            ) from e
        return db_utils.phrases_from_wire(data)

    def _write(self, phrases: Sequence[Phrase]) -> None:
        payload = json.dumps(
            db_utils.phrases_to_wire(phrases), ensure_ascii=False, indent=2
        )
        tmp_name = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            fd, tmp_name = tempfile.mkstemp(
                prefix=f".{self.path.name}.", dir=self.path.parent
            )
            with os.fdopen(fd, "w", encoding="utf-8") as handle:
                handle.write(payload)
            os.replace(tmp_name, self.path)
        except OSError as e:
            if tmp_name and os.path.exists(tmp_name):
                os.unlink(tmp_name)
            raise StoreWriteError(
                f"Failed to write {self.path}: {e}", original_exception=e
            ) from e

    def _revision(self) -> Optional[str]:
        raw = self._read_bytes()
        if raw is None:
            return None
        return hashlib.sha256(raw).hexdigest()
