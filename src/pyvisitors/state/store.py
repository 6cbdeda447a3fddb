"""Deterministic in-memory entity store.

This is the only component allowed to merge inbound visitor events.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from types import MappingProxyType
from typing import Any

from pyvisitors._constants import LOCATION_FIELD, OFFLINE, PAYMENT_CATEGORY, PRESENCE_CATEGORY
from pyvisitors._redact import redact_for_log
from pyvisitors.state.bootstrap import build_table
from pyvisitors.state.entity import Entity
from pyvisitors.state.events import EventKind, IngestionEvent, MergeOutcome
from pyvisitors.state.policy import (
    append_payment,
    extract_key,
    is_offline,
    is_online,
    merge_profile,
    new_entity,
    set_flag,
    set_location,
    set_unseen,
)

_logger = logging.getLogger(__name__)

Snapshot = Mapping[str, Entity]
SnapshotListener = Callable[[Snapshot], None]


class EntityStore:
    """In-memory table of merged visitor state.

    Given the same sequence of events the store produces the same table.
    Mutations are copy-on-write: each one swaps in a new table mapping, so
    a snapshot handed to a reader never changes underneath it.
    """

    def __init__(self, *, key_field: str = "ip") -> None:
        self._key_field = key_field
        self._entities: Snapshot = MappingProxyType({})
        self._version = 0
        self._listeners: list[SnapshotListener] = []

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def version(self) -> int:
        """Incremented once per effective mutation."""
        return self._version

    @property
    def key_field(self) -> str:
        return self._key_field

    def snapshot(self) -> Snapshot:
        """Current table version (read-only, never mutated afterwards)."""
        return self._entities

    def get(self, key: str) -> Entity | None:
        return self._entities.get(key)

    def __contains__(self, key: object) -> bool:
        return key in self._entities

    def __len__(self) -> int:
        return len(self._entities)

    @staticmethod
    def derive_online(entity: Entity) -> bool:
        return is_online(entity.current_location)

    def subscribe(self, listener: SnapshotListener) -> Callable[[], None]:
        """Register *listener* for new snapshots; returns an unsubscribe callable."""
        self._listeners.append(listener)

        def _unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return _unsubscribe

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------

    def _commit(self, table: dict[str, Entity]) -> None:
        self._entities = MappingProxyType(table)
        self._version += 1
        snapshot = self._entities
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                _logger.debug("Snapshot listener failed", exc_info=True)

    def _put(self, entity: Entity) -> None:
        table = dict(self._entities)
        table[entity.key] = entity
        self._commit(table)

    def _reject(self, category: str, record: Any) -> MergeOutcome:
        _logger.warning(
            "Dropping %s record without %r: %s",
            category,
            self._key_field,
            redact_for_log(record),
        )
        return MergeOutcome.REJECTED

    def _merge_live(self, key: str, category: str, patch: Mapping[str, Any], *, payment: bool = False) -> MergeOutcome:
        existing = self._entities.get(key)
        outcome = MergeOutcome.CREATED if existing is None else MergeOutcome.UPDATED
        base = existing if existing is not None else new_entity(key)
        patch = {**patch, self._key_field: key}
        merged = append_payment(base, patch) if payment else merge_profile(base, patch)
        self._put(set_unseen(merged, True))
        _logger.debug("Applied %s update to %s (%s)", category, key, outcome)
        return outcome

    # ------------------------------------------------------------------
    # Write surface
    # ------------------------------------------------------------------

    def bootstrap(self, batches: Mapping[str, Any]) -> None:
        """Replace the whole table with the contents of a bootstrap snapshot."""
        self._commit(build_table(batches, key_field=self._key_field))

    def apply_update(self, category: str, record: Mapping[str, Any]) -> MergeOutcome:
        """Merge a live profile-style record and mark the entity unseen."""
        key = extract_key(record, self._key_field)
        if key is None:
            return self._reject(category, record)
        return self._merge_live(key, category, record)

    def apply_payment(self, record: Mapping[str, Any]) -> MergeOutcome:
        """Append a payment record (and merge its fields) and mark the entity unseen."""
        key = extract_key(record, self._key_field)
        if key is None:
            return self._reject(PAYMENT_CATEGORY, record)
        return self._merge_live(key, PAYMENT_CATEGORY, record, payment=True)

    def apply_presence(self, key: str, page: Any) -> MergeOutcome:
        """Record a presence ping.

        ``"offline"`` only updates an existing entity and leaves the unseen
        flag alone.  Any other page is a live update like :meth:`apply_update`.
        """
        if not is_offline(page):
            return self.apply_update(PRESENCE_CATEGORY, {self._key_field: key, LOCATION_FIELD: page})

        existing = self._entities.get(key)
        if existing is None:
            _logger.debug("Ignoring offline presence for unknown key %s", key)
            return MergeOutcome.IGNORED
        updated = set_location(existing, OFFLINE)
        if updated is not existing:
            self._put(updated)
        return MergeOutcome.UPDATED

    def apply_flag(self, key: str, flagged: bool) -> MergeOutcome:
        """Set the flag, creating the entity with defaults if needed."""
        if not isinstance(key, str) or not key.strip():
            return self._reject("flag", {self._key_field: key})
        key = key.strip()
        existing = self._entities.get(key)
        base = existing if existing is not None else new_entity(key)
        updated = set_flag(base, bool(flagged))
        if existing is None or updated is not existing:
            self._put(updated)
        return MergeOutcome.CREATED if existing is None else MergeOutcome.UPDATED

    def remove_entity(self, key: str) -> MergeOutcome:
        if key not in self._entities:
            _logger.debug("Ignoring delete for unknown key %s", key)
            return MergeOutcome.IGNORED
        table = dict(self._entities)
        del table[key]
        self._commit(table)
        return MergeOutcome.REMOVED

    def acknowledge(self, key: str) -> bool:
        """Mark the entity as seen.  Returns whether the entity exists."""
        existing = self._entities.get(key)
        if existing is None:
            return False
        updated = set_unseen(existing, False)
        if updated is not existing:
            self._put(updated)
        return True

    def clear(self) -> None:
        """Drop every entity (session teardown)."""
        if self._entities:
            self._commit({})

    def apply(self, event: IngestionEvent) -> MergeOutcome:
        """Apply a normalized ingestion event."""
        if event.kind == EventKind.PROFILE:
            return self._merge_live(event.key, event.category, event.data)
        if event.kind == EventKind.PAYMENT:
            return self._merge_live(event.key, event.category, event.data, payment=True)
        if event.kind == EventKind.PRESENCE:
            return self.apply_presence(event.key, event.data.get("page"))
        if event.kind == EventKind.FLAG:
            return self.apply_flag(event.key, bool(event.data.get("flag")))
        if event.kind == EventKind.DELETE:
            return self.remove_entity(event.key)
        return MergeOutcome.IGNORED
