"""High-level async client for the visitor monitoring feed."""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Callable
from typing import Any

import aiohttp

from pyvisitors._api import entities as _entities_api
from pyvisitors._constants import COMMAND_LOAD_DATA, COMMAND_TOGGLE_FLAG, EVENT_RECONNECTED, FLAG_FIELD
from pyvisitors._transport import EventTransport, SocketIOTransport
from pyvisitors.config import ConsoleConfig
from pyvisitors.exceptions import VisitorsError
from pyvisitors.ingestion.dispatch import EventDispatcher
from pyvisitors.read_model import EntityRow, build_rows
from pyvisitors.state.events import MergeOutcome
from pyvisitors.state.store import EntityStore, Snapshot

_logger = logging.getLogger(__name__)

#: ``callback(key, category)``
EntityCallback = Callable[[str, str], None]


class ConsoleClient:
    """Async client owning one monitoring session.

    Usage::

        async with ConsoleClient(config) as client:
            await client.connect()
            await client.listen()

    The entity store lives exactly as long as the session: it is created
    with the client and cleared on :meth:`close`.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        *,
        session: aiohttp.ClientSession | None = None,
        transport: EventTransport | None = None,
        on_new_entity: EntityCallback | None = None,
        on_entity_updated: EntityCallback | None = None,
        on_change: Callable[[Snapshot], None] | None = None,
    ) -> None:
        self._config = config
        self._external_session = session is not None
        self._http_session = session
        self._transport = transport
        self._on_new_entity = on_new_entity
        self._on_entity_updated = on_entity_updated
        self._store = EntityStore(key_field=config.key_field)
        self._dispatcher = EventDispatcher(
            self._store,
            notifier=self._notify,
            log_payloads=config.log_payloads,
        )
        if on_change is not None:
            self._store.subscribe(on_change)

    # ------------------------------------------------------------------
    # Context manager lifecycle
    # ------------------------------------------------------------------

    async def __aenter__(self) -> ConsoleClient:
        if self._http_session is None:
            self._http_session = aiohttp.ClientSession()
        if self._transport is None:
            self._transport = SocketIOTransport(self._config, http_session=self._http_session)
        return self

    async def __aexit__(self, *exc: Any) -> None:
        await self.close()

    async def close(self) -> None:
        """Close the channel and drop all session state."""
        transport = self._transport
        if transport is not None:
            try:
                await transport.close()
            except Exception:
                _logger.debug("Transport close failed", exc_info=True)
        self._store.clear()
        if not self._external_session and self._http_session is not None:
            await self._http_session.close()
            self._http_session = None

    # ------------------------------------------------------------------
    # Read surface
    # ------------------------------------------------------------------

    @property
    def store(self) -> EntityStore:
        return self._store

    def rows(self) -> list[EntityRow]:
        return build_rows(self._store.snapshot())

    # ------------------------------------------------------------------
    # Inbound events
    # ------------------------------------------------------------------

    def _require_transport(self) -> EventTransport:
        if self._transport is None:
            raise VisitorsError("Client not initialized. Use 'async with ConsoleClient(...) as client:'")
        return self._transport

    async def connect(self) -> None:
        """Open the event channel and request the bootstrap snapshot."""
        transport = self._require_transport()
        await transport.connect()
        if self._config.request_bootstrap_on_connect:
            await self.request_bootstrap()

    async def request_bootstrap(self) -> None:
        await self._require_transport().emit(COMMAND_LOAD_DATA, None)

    def handle_event(self, event_name: str, payload: Any) -> MergeOutcome:
        """Apply one inbound event (used by :meth:`listen` and custom transports)."""
        return self._dispatcher.dispatch(event_name, payload)

    async def listen(self) -> None:
        """Apply inbound events until the channel closes.

        On disconnect the table keeps its last-known state; nothing is
        marked offline locally.  After a reconnect the bootstrap snapshot
        is requested again.
        """
        transport = self._require_transport()
        async for event_name, payload in transport.events():
            if event_name == EVENT_RECONNECTED:
                if self._config.request_bootstrap_on_connect:
                    await self.request_bootstrap()
                continue
            self.handle_event(event_name, payload)
            # Let renderers run between bursts of events.
            await asyncio.sleep(0)

    def _notify(self, outcome: MergeOutcome, key: str, category: str) -> None:
        callback = self._on_new_entity if outcome == MergeOutcome.CREATED else self._on_entity_updated
        if callback is None:
            return
        try:
            callback(key, category)
        except Exception:
            _logger.debug("Notification callback failed", exc_info=True)

    # ------------------------------------------------------------------
    # User intents
    # ------------------------------------------------------------------

    async def toggle_flag(self, key: str, flagged: bool) -> None:
        """Ask the server to flag/unflag *key*.

        The local table changes when the ``flagUpdated`` broadcast arrives.
        """
        await self._require_transport().emit(
            COMMAND_TOGGLE_FLAG,
            {self._config.key_field: key, FLAG_FIELD: bool(flagged)},
        )

    async def delete_entity(self, key: str) -> None:
        """Request deletion of *key* over REST.

        The row disappears once the server broadcasts ``userDeleted``.
        """
        if self._http_session is None:
            raise VisitorsError("Client not initialized. Use 'async with ConsoleClient(...) as client:'")
        await _entities_api.delete_entity(self._config, self._http_session, key)

    def mark_seen(self, key: str) -> bool:
        """Acknowledge the visitor's data as read."""
        return self._store.acknowledge(key)
