"""Normalization helpers.

Turns raw wire payloads into :class:`IngestionEvent` objects.  Anything
that cannot be keyed raises :class:`MalformedEventError` here, so the
store only ever sees well-formed events.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Any

from pydantic import ValidationError

from pyvisitors._constants import (
    EVENT_DELETED,
    EVENT_FLAG,
    EVENT_LOCATION,
    EVENT_PAYMENT,
    FLAG_FIELD,
    PAYMENT_CATEGORY,
    PRESENCE_CATEGORY,
    PROFILE_EVENTS,
)
from pyvisitors.exceptions import MalformedEventError
from pyvisitors.state.events import EventKind, IngestionEvent
from pyvisitors.state.policy import extract_key


def safe_bool(value: Any) -> bool:
    """Coerce a wire flag value to ``bool``.

    Strings are parsed (``"false"`` is falsy); everything else uses
    Python truthiness.
    """
    if isinstance(value, str):
        return value.strip().lower() in {"1", "true", "yes", "y", "on"}
    return bool(value)


def classify(event_name: str) -> tuple[EventKind, str] | None:
    """Map a wire event name to its kind and category label."""
    category = PROFILE_EVENTS.get(event_name)
    if category is not None:
        return EventKind.PROFILE, category
    if event_name == EVENT_PAYMENT:
        return EventKind.PAYMENT, PAYMENT_CATEGORY
    if event_name == EVENT_LOCATION:
        return EventKind.PRESENCE, PRESENCE_CATEGORY
    if event_name == EVENT_FLAG:
        return EventKind.FLAG, "flag"
    if event_name == EVENT_DELETED:
        return EventKind.DELETE, "delete"
    return None


def build_event(event_name: str, payload: Any, *, key_field: str = "ip") -> IngestionEvent:
    """Build an ingestion event from a raw live event.

    Raises
    ------
    MalformedEventError
        If *event_name* is unknown, the payload is not an object, or it
        carries no usable key.
    """
    classified = classify(event_name)
    if classified is None:
        raise MalformedEventError(f"Unknown event {event_name!r}", event=event_name)
    kind, category = classified

    if not isinstance(payload, Mapping):
        raise MalformedEventError(
            f"{event_name} payload is {type(payload).__name__}, expected an object",
            event=event_name,
        )
    key = extract_key(payload, key_field)
    if key is None:
        raise MalformedEventError(f"{event_name} payload has no {key_field!r}", event=event_name)

    raw = dict(payload)
    data: dict[str, Any]
    if kind == EventKind.PRESENCE:
        data = {"page": raw.get("page")}
    elif kind == EventKind.FLAG:
        data = {FLAG_FIELD: safe_bool(raw.get(FLAG_FIELD, raw.get("flagged")))}
    elif kind == EventKind.DELETE:
        data = {}
    else:
        # The stored key field always carries the normalized key.
        data = {**raw, key_field: key}

    try:
        return IngestionEvent(key=key, kind=kind, category=category, data=data)
    except ValidationError as exc:
        raise MalformedEventError(f"{event_name} payload rejected: {exc}", event=event_name) from exc
