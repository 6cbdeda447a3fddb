"""Custom exception hierarchy for pyvisitors."""

from __future__ import annotations


class VisitorsError(Exception):
    """Base exception for all pyvisitors errors."""


class VisitorsConfigError(VisitorsError):
    """Invalid or missing configuration."""


class MalformedEventError(VisitorsError):
    """Inbound event payload cannot be mapped onto an entity.

    Raised at the ingestion boundary (payload is not an object, or carries
    no usable key).  The dispatcher drops the event and logs it; it never
    reaches the state store.
    """

    def __init__(self, message: str, *, event: str = "") -> None:
        self.event = event
        super().__init__(message)


class VisitorsTransportError(VisitorsError):
    """Network-level failure (connect, disconnect, non-2xx, invalid frame)."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class VisitorsApiError(VisitorsError):
    """Server rejected an outbound request."""

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        endpoint: str = "",
    ) -> None:
        self.status_code = status_code
        self.endpoint = endpoint
        super().__init__(message)


class VisitorsAuthenticationError(VisitorsApiError):
    """Bearer token missing, expired or rejected (HTTP 401/403)."""
