"""pyvisitors - Async Python client for a live visitor monitoring feed."""

from importlib.metadata import PackageNotFoundError, version

try:
    __version__ = version("pyvisitors")
except PackageNotFoundError:
    __version__ = "0+local"
from pyvisitors.client import ConsoleClient
from pyvisitors.config import ConsoleConfig
from pyvisitors.exceptions import (
    MalformedEventError,
    VisitorsApiError,
    VisitorsAuthenticationError,
    VisitorsConfigError,
    VisitorsError,
    VisitorsTransportError,
)
from pyvisitors.read_model import EntityRow, build_rows
from pyvisitors.state.entity import Entity
from pyvisitors.state.events import EventKind, IngestionEvent, MergeOutcome
from pyvisitors.state.store import EntityStore

__all__ = [
    "__version__",
    "ConsoleClient",
    "ConsoleConfig",
    "Entity",
    "EntityRow",
    "EntityStore",
    "EventKind",
    "IngestionEvent",
    "MalformedEventError",
    "MergeOutcome",
    "VisitorsApiError",
    "VisitorsAuthenticationError",
    "VisitorsConfigError",
    "VisitorsError",
    "VisitorsTransportError",
    "build_rows",
]
