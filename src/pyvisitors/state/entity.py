"""Aggregated per-visitor record."""

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from pyvisitors._constants import FLAG_FIELD, LOCATION_FIELD, OFFLINE


class Entity(BaseModel):
    """Merged state of one remote visitor, keyed by address.

    Instances are never mutated once stored; every merge produces a new
    instance via ``model_copy``.
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    key: str
    profile: dict[str, Any] = Field(default_factory=dict)
    """Latest value per profile attribute (last writer wins per field)."""

    payments: tuple[dict[str, Any], ...] = ()
    """Payment records in arrival order. Only ever appended to."""

    flagged: bool = False
    current_location: str | None = None
    """Current page identifier, ``"offline"``, or ``None`` when unknown."""

    has_unseen_update: bool = False

    @property
    def is_online(self) -> bool:
        return self.current_location is not None and self.current_location != OFFLINE

    def to_record(self) -> dict[str, Any]:
        """Wire-shaped view, as the original dashboard keeps its rows."""
        record: dict[str, Any] = dict(self.profile)
        record["payments"] = [dict(p) for p in self.payments]
        record[FLAG_FIELD] = self.flagged
        if self.current_location is not None:
            record[LOCATION_FIELD] = self.current_location
        record["hasNewData"] = self.has_unseen_update
        return record
