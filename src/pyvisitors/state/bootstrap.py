"""Bootstrap snapshot loader.

Folds the bulk ``initialData`` snapshot into a fresh entity table.  The
fold order is fixed: profile batches, then payments, then flags, then
locations, so the later layers are never erased by a profile merge.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import Any

from pyvisitors._constants import BATCH_FLAGS, BATCH_LOCATIONS, BATCH_PAYMENT, FLAG_FIELD, LOCATION_FIELD, SPECIAL_BATCHES
from pyvisitors._redact import redact_for_log
from pyvisitors.ingestion.normalize import safe_bool
from pyvisitors.state.entity import Entity
from pyvisitors.state.policy import extract_key, merge_profile, new_entity, push_payment, set_flag, set_location

_logger = logging.getLogger(__name__)


def _records(batches: Mapping[str, Any], name: str) -> Iterable[Mapping[str, Any]]:
    batch = batches.get(name)
    if batch is None:
        return ()
    if not isinstance(batch, list):
        _logger.warning("Ignoring bootstrap batch %r: expected a list, got %s", name, type(batch).__name__)
        return ()
    return batch


def _keyed(records: Iterable[Any], name: str, key_field: str) -> Iterable[tuple[str, Mapping[str, Any]]]:
    for record in records:
        key = extract_key(record, key_field)
        if key is None:
            _logger.warning("Dropping %s bootstrap record without %r: %s", name, key_field, redact_for_log(record))
            continue
        yield key, {**record, key_field: key}


def build_table(batches: Mapping[str, Any], *, key_field: str = "ip") -> dict[str, Entity]:
    """Produce the initial table from a bootstrap snapshot.

    Every category is optional.  All entities start with
    ``has_unseen_update=False``.
    """
    table: dict[str, Entity] = {}

    def entity(key: str) -> Entity:
        existing = table.get(key)
        return existing if existing is not None else new_entity(key)

    # 1) Profile batches, field-wise last-batch-wins.
    for name in batches:
        if name in SPECIAL_BATCHES:
            continue
        for key, record in _keyed(_records(batches, name), name, key_field):
            table[key] = merge_profile(entity(key), record)

    # 2) Payments, appended in array order.
    for key, record in _keyed(_records(batches, BATCH_PAYMENT), BATCH_PAYMENT, key_field):
        table[key] = push_payment(entity(key), record)

    # 3) Flags.
    for key, record in _keyed(_records(batches, BATCH_FLAGS), BATCH_FLAGS, key_field):
        table[key] = set_flag(entity(key), safe_bool(record.get(FLAG_FIELD)))

    # 4) Locations.
    for key, record in _keyed(_records(batches, BATCH_LOCATIONS), BATCH_LOCATIONS, key_field):
        table[key] = set_location(entity(key), record.get(LOCATION_FIELD))

    _logger.debug("Bootstrap built %d entities from %d batches", len(table), len(batches))
    return table
