"""Normalized ingestion events.

Every inbound wire event is converted into one of these before it reaches
the store.  Only the state/store layer is allowed to merge them.
"""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class EventKind(StrEnum):
    PROFILE = "profile"
    PAYMENT = "payment"
    PRESENCE = "presence"
    FLAG = "flag"
    DELETE = "delete"


class MergeOutcome(StrEnum):
    """What applying an event did to the table.

    ``CREATED`` and ``UPDATED`` drive notifications only; they never feed
    back into stored state.
    """

    CREATED = "created"
    UPDATED = "updated"
    REMOVED = "removed"
    IGNORED = "ignored"
    REJECTED = "rejected"


class IngestionEvent(BaseModel):
    """A normalized update to apply to the entity store."""

    model_config = ConfigDict(frozen=True)

    key: str = Field(..., description="Entity key (remote address)")
    kind: EventKind
    category: str = Field(..., description="Label used for logging and notifications")
    data: dict[str, Any] = Field(default_factory=dict, description="Partial record / patch data")

    @field_validator("key", mode="before")
    @classmethod
    def _normalize_key(cls, value: Any) -> str:
        if not isinstance(value, str):
            raise ValueError("key must be a string")
        key = value.strip()
        if not key:
            raise ValueError("key must be non-empty")
        return key

