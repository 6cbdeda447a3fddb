"""Entity REST endpoints."""

from __future__ import annotations

import logging
from urllib.parse import quote

import aiohttp

from pyvisitors._constants import DELETE_ENDPOINT, USER_AGENT
from pyvisitors.config import ConsoleConfig
from pyvisitors.exceptions import VisitorsApiError, VisitorsAuthenticationError, VisitorsTransportError

_logger = logging.getLogger(__name__)


def build_delete_url(config: ConsoleConfig, key: str) -> str:
    return f"{config.rest_base}{DELETE_ENDPOINT.format(key=quote(key, safe=''))}"


async def delete_entity(config: ConsoleConfig, http_session: aiohttp.ClientSession, key: str) -> None:
    """Ask the server to delete all data for *key*.

    Success only means the server accepted the request; the entity leaves
    the local table once the ``userDeleted`` event comes back.
    """
    endpoint = DELETE_ENDPOINT.format(key=key)
    url = build_delete_url(config, key)
    headers = {
        "authorization": f"Bearer {config.require_token()}",
        "user-agent": USER_AGENT,
    }

    _logger.debug("DELETE %s", url)

    try:
        async with http_session.delete(url, headers=headers) as resp:
            if 200 <= resp.status < 300:
                return
            text = await resp.text()
            if resp.status in (401, 403):
                raise VisitorsAuthenticationError(
                    f"Delete rejected: HTTP {resp.status}",
                    status_code=resp.status,
                    endpoint=endpoint,
                )
            raise VisitorsApiError(
                f"Server responded {resp.status}: {text[:200]}",
                status_code=resp.status,
                endpoint=endpoint,
            )
    except VisitorsApiError:
        raise
    except aiohttp.ClientError as exc:
        raise VisitorsTransportError(f"Request to {endpoint} failed: {exc}", endpoint=endpoint) from exc
