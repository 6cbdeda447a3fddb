"""Deterministic merge policy.

Pure functions: each takes an :class:`Entity` and returns a new one.
Every profile-like category (index, details, billing, phone, presence, ...)
goes through :func:`merge_profile`; the category name never changes the
merge semantics.
"""

from __future__ import annotations

import copy
from collections.abc import Mapping
from typing import Any

from pyvisitors._constants import LOCATION_FIELD, OFFLINE
from pyvisitors.state.entity import Entity
from pyvisitors.state.events import EventKind

_MISSING = object()


def new_entity(key: str) -> Entity:
    return Entity(key=key)


def extract_key(record: Any, key_field: str) -> str | None:
    """Return the stripped entity key of *record*, or ``None`` if unusable."""
    if not isinstance(record, Mapping):
        return None
    value = record.get(key_field)
    if not isinstance(value, str):
        return None
    key = value.strip()
    return key or None


def is_offline(page: Any) -> bool:
    return page == OFFLINE


def is_online(location: str | None) -> bool:
    return location is not None and location != OFFLINE


def _location(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)


def merge_profile(entity: Entity, patch: Mapping[str, Any]) -> Entity:
    """Shallow-merge *patch* over the entity's profile fields.

    Fields absent from *patch* are kept.  ``payments`` and ``flagged`` are
    carried over untouched.  A ``currentPage`` key updates the location
    instead of landing in ``profile``.
    """
    data = dict(patch)
    location = data.pop(LOCATION_FIELD, _MISSING)
    update: dict[str, Any] = {}
    if data:
        update["profile"] = {**entity.profile, **copy.deepcopy(data)}
    if location is not _MISSING:
        update["current_location"] = _location(location)
    if not update:
        return entity
    return entity.model_copy(update=update)


def push_payment(entity: Entity, record: Mapping[str, Any]) -> Entity:
    """Append *record* to payments without touching any other field."""
    return entity.model_copy(update={"payments": (*entity.payments, copy.deepcopy(dict(record)))})


def append_payment(entity: Entity, record: Mapping[str, Any]) -> Entity:
    """Merge the record's fields, then append the whole record to payments."""
    return push_payment(merge_profile(entity, record), record)


def set_flag(entity: Entity, flagged: bool) -> Entity:
    if entity.flagged == flagged:
        return entity
    return entity.model_copy(update={"flagged": flagged})


def set_location(entity: Entity, page: Any) -> Entity:
    location = _location(page)
    if entity.current_location == location:
        return entity
    return entity.model_copy(update={"current_location": location})


def set_unseen(entity: Entity, unseen: bool) -> Entity:
    if entity.has_unseen_update == unseen:
        return entity
    return entity.model_copy(update={"has_unseen_update": unseen})


def marks_unseen(kind: EventKind, page: Any = None) -> bool:
    """Whether a live event of *kind* counts as new data for the viewer.

    Going offline is not new data; arriving or navigating is.  Flags and
    deletions never are.
    """
    if kind in (EventKind.PROFILE, EventKind.PAYMENT):
        return True
    if kind == EventKind.PRESENCE:
        return not is_offline(page)
    return False
