"""Ingestion layer.

Adapters that turn raw wire events into normalized
:class:`pyvisitors.state.events.IngestionEvent` objects and route them to
the entity store.
"""

__all__: list[str] = []
