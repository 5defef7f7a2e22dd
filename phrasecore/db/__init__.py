"""Storage package for phrasecore.

Exports the PhraseStore repository interface, its JSON and DuckDB
implementations, and `open_store()` which picks one from a path.
"""

from pathlib import Path
from typing import Union

from .duckdb_store import DuckDBPhraseStore
from .json_store import JsonPhraseStore
from .store import PhraseStore

JSON_SUFFIXES = {".json"}


def open_store(path: Union[str, Path]) -> PhraseStore:
    """
    Return the store implementation matching `path`.

    A `.json` suffix selects JsonPhraseStore; anything else, including
    ":memory:", selects DuckDBPhraseStore.
    """
    if Path(str(path)).suffix.lower() in JSON_SUFFIXES:
        return JsonPhraseStore(path)
    return DuckDBPhraseStore(path)


__all__ = ["PhraseStore", "JsonPhraseStore", "DuckDBPhraseStore", "open_store"]
