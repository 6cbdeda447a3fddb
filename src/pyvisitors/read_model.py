"""Presentation-facing read model.

Turns a store snapshot into ordered table rows: online visitors first,
then offline ones, each group in table order.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict

from pyvisitors._constants import OFFLINE
from pyvisitors.state.entity import Entity
from pyvisitors.state.policy import is_online

#: Profile field preferred over the key as the row identifier.
ID_FIELD = "IDorResidenceNumber"
#: Profile field shown as the visitor's name.
NAME_FIELD = "FullName"

_PAGE_SUFFIX = ".html"


class EntityRow(BaseModel):
    """One rendered row of the dashboard table."""

    model_config = ConfigDict(frozen=True)

    index: int
    """1-based position in the ordered view."""

    key: str
    display_id: str
    display_name: str | None = None
    has_unseen_update: bool = False
    page: str = OFFLINE
    online: bool = False
    flagged: bool = False

    @property
    def status(self) -> str:
        return "Online" if self.online else "Offline"


def display_page(location: str | None) -> str:
    page = location or OFFLINE
    return page[: -len(_PAGE_SUFFIX)] if page.endswith(_PAGE_SUFFIX) else page


def _text(value: object) -> str | None:
    if value is None or value == "":
        return None
    return str(value)


def order_entities(snapshot: Mapping[str, Entity]) -> list[Entity]:
    """Online entities first, offline after; stable within each group."""
    online = [e for e in snapshot.values() if is_online(e.current_location)]
    offline = [e for e in snapshot.values() if not is_online(e.current_location)]
    return online + offline


def build_rows(snapshot: Mapping[str, Entity]) -> list[EntityRow]:
    rows: list[EntityRow] = []
    for position, entity in enumerate(order_entities(snapshot), start=1):
        rows.append(
            EntityRow(
                index=position,
                key=entity.key,
                display_id=_text(entity.profile.get(ID_FIELD)) or entity.key,
                display_name=_text(entity.profile.get(NAME_FIELD)),
                has_unseen_update=entity.has_unseen_update,
                page=display_page(entity.current_location),
                online=entity.is_online,
                flagged=entity.flagged,
            )
        )
    return rows
