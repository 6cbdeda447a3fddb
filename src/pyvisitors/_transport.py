"""Event channel transport over Socket.IO.

The feed server speaks Socket.IO named events, so the channel is a thin
adapter around :class:`socketio.AsyncClient`.  Inbound events are pushed
onto a queue by a catch-all handler and drained by :meth:`events`.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import AsyncIterator
from typing import Any, Protocol

import aiohttp
import socketio
from socketio import exceptions as sio_exceptions

from pyvisitors._constants import EVENT_RECONNECTED, USER_AGENT
from pyvisitors.config import ConsoleConfig
from pyvisitors.exceptions import VisitorsTransportError

_logger = logging.getLogger(__name__)

#: Queue marker for the end of the event stream.
_CLOSED = None


class EventTransport(Protocol):
    """Structural transport interface used by the client.

    Having a protocol here makes it easy to pass test doubles while keeping
    the production implementation (`SocketIOTransport`) concrete.
    """

    async def connect(self) -> None: ...

    async def emit(self, event: str, data: Any) -> None: ...

    def events(self) -> AsyncIterator[tuple[str, Any]]: ...

    async def close(self) -> None: ...


class SocketIOTransport:
    """Named-event channel on top of a python-socketio async client.

    Reconnects are handled by the Socket.IO client itself.  Every
    connection after the first is reported to the consumer as an
    ``EVENT_RECONNECTED`` item so it can ask for a fresh snapshot.
    """

    def __init__(
        self,
        config: ConsoleConfig,
        *,
        http_session: aiohttp.ClientSession | None = None,
        sio: socketio.AsyncClient | None = None,
    ) -> None:
        self._config = config
        self._url = f"{config.server_url.rstrip('/')}/{config.socketio_path.strip('/')}"
        if sio is None:
            sio = socketio.AsyncClient(
                reconnection=config.reconnection,
                reconnection_attempts=config.reconnection_attempts,
                http_session=http_session,
            )
        self._sio = sio
        self._queue: asyncio.Queue[tuple[str, Any] | Exception | None] = asyncio.Queue()
        self._connects = 0
        self._watcher: asyncio.Task[None] | None = None

        self._sio.on("connect", self._on_connect)
        self._sio.on("disconnect", self._on_disconnect)
        self._sio.on("connect_error", self._on_connect_error)
        self._sio.on("*", self._on_event)

    @property
    def is_connected(self) -> bool:
        return bool(self._sio.connected)

    # ------------------------------------------------------------------
    # Socket.IO handlers
    # ------------------------------------------------------------------

    async def _on_connect(self) -> None:
        self._connects += 1
        if self._connects == 1:
            _logger.info("Event channel connected")
            return
        _logger.info("Event channel reconnected (connection #%d)", self._connects)
        self._queue.put_nowait((EVENT_RECONNECTED, None))

    async def _on_disconnect(self, *args: Any) -> None:
        reason = args[0] if args else None
        _logger.info("Event channel disconnected (reason=%s)", reason)

    async def _on_connect_error(self, data: Any = None) -> None:
        _logger.warning("Event channel connection refused: %s", data)
        if not self._config.reconnection:
            self._queue.put_nowait(VisitorsTransportError(f"Event channel connection refused: {data}", endpoint=self._url))

    async def _on_event(self, event: str, *args: Any) -> None:
        self._queue.put_nowait((event, args[0] if args else None))

    async def _watch(self) -> None:
        # AsyncClient.wait() returns once the connection is gone for good,
        # i.e. after a clean disconnect or when reconnection gives up.
        try:
            await self._sio.wait()
        finally:
            self._queue.put_nowait(_CLOSED)

    # ------------------------------------------------------------------
    # EventTransport
    # ------------------------------------------------------------------

    async def connect(self) -> None:
        if self.is_connected:
            return
        _logger.debug("Opening event channel %s", self._url)
        try:
            async with asyncio.timeout(self._config.connect_timeout):
                await self._sio.connect(
                    self._config.server_url,
                    headers={"user-agent": USER_AGENT},
                    transports=["websocket"],
                    socketio_path=self._config.socketio_path,
                    wait_timeout=self._config.connect_timeout,
                )
        except TimeoutError as exc:
            await self._abandon()
            raise VisitorsTransportError(f"Event channel connect to {self._url} timed out", endpoint=self._url) from exc
        except sio_exceptions.ConnectionError as exc:
            raise VisitorsTransportError(f"Event channel connect to {self._url} failed: {exc}", endpoint=self._url) from exc
        self._watcher = asyncio.create_task(self._watch())

    async def _abandon(self) -> None:
        try:
            await self._sio.shutdown()
        except Exception:
            _logger.debug("Disconnect after failed connect raised", exc_info=True)

    async def emit(self, event: str, data: Any) -> None:
        if not self.is_connected:
            raise VisitorsTransportError("Event channel is not connected", endpoint=self._url)
        _logger.debug("Emit %s", event)
        try:
            await self._sio.emit(event, data)
        except sio_exceptions.SocketIOError as exc:
            raise VisitorsTransportError(f"Emit {event} failed: {exc}", endpoint=self._url) from exc

    async def events(self) -> AsyncIterator[tuple[str, Any]]:
        """Yield inbound events until the channel closes.

        Raises :class:`VisitorsTransportError` if the server refuses the
        connection and reconnection is disabled; a clean close simply ends
        the iteration.
        """
        while True:
            item = await self._queue.get()
            if item is _CLOSED:
                _logger.info("Event channel closed")
                return
            if isinstance(item, Exception):
                raise item
            yield item

    async def close(self) -> None:
        # shutdown() also stops a pending reconnect loop.
        await self._sio.shutdown()
        watcher, self._watcher = self._watcher, None
        if watcher is not None:
            await watcher
        else:
            self._queue.put_nowait(_CLOSED)
