"""
Utility functions for data marshalling between Pydantic models and storage formats.
This module helps decouple the store logic from the specifics of data conversion.
"""

from datetime import datetime, timezone
from typing import Any, Dict, List, Sequence, Tuple

from pydantic import TypeAdapter, ValidationError

from ..exceptions import MarshallingError
from ..models import Phrase

_PHRASE_LIST_ADAPTER = TypeAdapter(List[Phrase])


def to_naive_utc(ts: datetime) -> datetime:
    """Convert to a naive UTC datetime for TIMESTAMP columns. Assumes UTC if naive."""
    if ts.tzinfo is None or ts.tzinfo.utcoffset(ts) is None:
        return ts
    return ts.astimezone(timezone.utc).replace(tzinfo=None)


def from_naive_utc(ts: datetime) -> datetime:
    """Attach UTC to a naive datetime read from a TIMESTAMP column."""
    if ts.tzinfo is None:
        return ts.replace(tzinfo=timezone.utc)
    return ts


def phrases_from_wire(data: Any) -> List[Phrase]:
    """
    Build Phrase models from the decoded JSON array.

    Accepts camelCase (`createdAt`) or snake_case keys, and epoch-millisecond
    timestamps as well as ISO 8601 strings.

    Raises:
        MarshallingError: If the data is not a list of valid phrase objects.
    """
    try:
        return _PHRASE_LIST_ADAPTER.validate_python(data)
    except ValidationError as e:
        raise MarshallingError(
            f"Stored data is not a valid phrase list: {e}",
            original_exception=e,
        ) from e


def phrases_to_wire(phrases: Sequence[Phrase]) -> List[Dict[str, Any]]:
    """Serialize phrases to the JSON-compatible camelCase array."""
    return [phrase.to_wire() for phrase in phrases]


def phrases_to_db_params_list(
    phrases: Sequence[Phrase],
) -> List[Tuple]:
    """
    Convert phrases into tuples for bulk insertion into the `phrases` table.

    The `position` column preserves collection order (0 = newest).

    Returns:
        List[Tuple]: (position, id, text, translation, created_at,
        success_count, failure_count) per phrase.
    """
    return [
        (
            position,
            phrase.id,
            phrase.text,
            phrase.translation,
            to_naive_utc(phrase.created_at),
            phrase.success_count,
            phrase.failure_count,
        )
        for position, phrase in enumerate(phrases)
    ]


def db_row_to_phrase(row_dict: Dict[str, Any]) -> Phrase:
    """
    Create a Phrase model from a database row dictionary.

    Raises:
        MarshallingError: If the row cannot be validated into a Phrase.
    """
    data = row_dict.copy()
    data.pop("position", None)
    if isinstance(data.get("created_at"), datetime):
        data["created_at"] = from_naive_utc(data["created_at"])
    try:
        return Phrase(**data)
    except ValidationError as e:
        raise MarshallingError(
            f"Failed to parse phrase from DB row: {row_dict}. Error: {e}",
            original_exception=e,
        ) from e
