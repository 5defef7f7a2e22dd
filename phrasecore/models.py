"""
Data models for phrasecore: the Phrase study unit and the review state
snapshot exposed to presentation layers.
"""

from __future__ import annotations

import uuid
from datetime import datetime, timezone
from enum import IntEnum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class ReviewPhase(IntEnum):
    """
    Represents the lifecycle phase of the review round controller.
    """

    Idle = 0
    Presenting = 1
    Revealed = 2
    Finished = 3


class Phrase(BaseModel):
    """
    A phrase/translation pair together with its review history.

    Field aliases match the serialized JSON format (camelCase), while Python
    code uses the snake_case names.
    """

    model_config = ConfigDict(
        validate_assignment=True, extra="forbid", populate_by_name=True
    )

    id: str = Field(
        default_factory=lambda: str(uuid.uuid4()),
        min_length=1,
        frozen=True,
        description="Stable unique identifier. Auto-generated.",
    )
    text: str = Field(
        ...,
        min_length=1,
        description="The phrase being studied (trimmed, non-empty).",
    )
    translation: str = Field(
        ...,
        min_length=1,
        description="Translation revealed after the round (trimmed, non-empty).",
    )
    created_at: datetime = Field(
        default_factory=lambda: datetime.now(timezone.utc),
        alias="createdAt",
        frozen=True,
        description="UTC timestamp when the phrase was created.",
    )
    success_count: int = Field(
        default=0,
        ge=0,
        alias="successCount",
        description="Number of rounds answered 'know'.",
    )
    failure_count: int = Field(
        default=0,
        ge=0,
        alias="failureCount",
        description="Number of rounds answered 'don't know' or timed out.",
    )

    @field_validator("text", "translation", mode="before")
    @classmethod
    def strip_and_require_content(cls, value: Any) -> Any:
        """Trim surrounding whitespace and reject blank values."""
        if isinstance(value, str):
            value = value.strip()
            if not value:
                raise ValueError("must not be blank")
        return value

    @property
    def total_attempts(self) -> int:
        return self.success_count + self.failure_count

    def record_outcome(self, is_correct: bool) -> None:
        """Count one completed review round for this phrase."""
        if is_correct:
            self.success_count += 1
        else:
            self.failure_count += 1

    def to_wire(self) -> dict:
        """Serialize to the JSON-compatible camelCase mapping."""
        return self.model_dump(mode="json", by_alias=True)


class ReviewState(BaseModel):
    """
    Read-only snapshot of the controller, rendered by presentation layers.
    """

    model_config = ConfigDict(frozen=True)

    phase: ReviewPhase
    current_phrase: Optional[Phrase] = None
    time_left: int = Field(default=0, ge=0)
    show_translation: bool = False
    rounds_completed: int = Field(default=0, ge=0)
