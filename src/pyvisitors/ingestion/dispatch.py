"""Wire event routing.

Maps every inbound event name onto one store operation.  All profile-style
events share a single path; the event name only selects the category label
passed to logs and notifications.

A bad event never propagates out of :meth:`EventDispatcher.dispatch`: it is
logged and dropped, and the store is left as it was.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Mapping
from typing import Any

from pyvisitors._constants import EVENT_INITIAL_DATA
from pyvisitors._redact import redact_for_log
from pyvisitors.exceptions import MalformedEventError
from pyvisitors.ingestion.normalize import build_event, classify
from pyvisitors.state.events import IngestionEvent, MergeOutcome
from pyvisitors.state.policy import marks_unseen
from pyvisitors.state.store import EntityStore

_logger = logging.getLogger(__name__)

#: Called as ``notifier(outcome, key, category)`` after a live update lands.
Notifier = Callable[[MergeOutcome, str, str], None]


class EventDispatcher:
    def __init__(
        self,
        store: EntityStore,
        *,
        notifier: Notifier | None = None,
        log_payloads: bool = False,
    ) -> None:
        self._store = store
        self._notifier = notifier
        self._log_payloads = log_payloads

    @property
    def store(self) -> EntityStore:
        return self._store

    def handles(self, event_name: str) -> bool:
        return event_name == EVENT_INITIAL_DATA or classify(event_name) is not None

    def dispatch(self, event_name: str, payload: Any) -> MergeOutcome:
        """Apply one inbound event to the store."""
        if self._log_payloads:
            _logger.debug("Event %s payload=%s", event_name, redact_for_log(payload))

        if event_name == EVENT_INITIAL_DATA:
            return self._bootstrap(payload)
        if classify(event_name) is None:
            _logger.debug("Ignoring unhandled event %s", event_name)
            return MergeOutcome.IGNORED

        try:
            event = build_event(event_name, payload, key_field=self._store.key_field)
        except MalformedEventError as exc:
            _logger.warning("Dropping malformed %s event: %s", event_name, exc)
            return MergeOutcome.REJECTED

        try:
            outcome = self._store.apply(event)
        except Exception:
            _logger.exception("Failed to apply %s event for %s", event_name, event.key)
            return MergeOutcome.REJECTED

        self._notify(event, outcome)
        return outcome

    def _bootstrap(self, payload: Any) -> MergeOutcome:
        if not isinstance(payload, Mapping):
            _logger.warning("Dropping %s: expected an object, got %s", EVENT_INITIAL_DATA, type(payload).__name__)
            return MergeOutcome.REJECTED
        try:
            self._store.bootstrap(payload)
        except Exception:
            _logger.exception("Failed to apply %s snapshot", EVENT_INITIAL_DATA)
            return MergeOutcome.REJECTED
        _logger.info("Loaded bootstrap snapshot with %d entities", len(self._store))
        return MergeOutcome.UPDATED

    def _notify(self, event: IngestionEvent, outcome: MergeOutcome) -> None:
        if self._notifier is None:
            return
        if outcome not in (MergeOutcome.CREATED, MergeOutcome.UPDATED):
            return
        if not marks_unseen(event.kind, event.data.get("page")):
            return
        try:
            self._notifier(outcome, event.key, event.category)
        except Exception:
            _logger.debug("Notifier failed for %s", event.key, exc_info=True)
