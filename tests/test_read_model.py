from __future__ import annotations

from pyvisitors.read_model import build_rows, display_page
from pyvisitors.state.store import EntityStore


def test_online_entities_precede_offline_in_source_order() -> None:
    store = EntityStore()
    store.apply_presence("A", "x")
    store.apply_update("index", {"ip": "B"})
    store.apply_presence("B", "offline")
    store.apply_presence("C", "y")

    rows = build_rows(store.snapshot())

    assert [row.key for row in rows] == ["A", "C", "B"]
    assert [row.index for row in rows] == [1, 2, 3]
    assert [row.status for row in rows] == ["Online", "Online", "Offline"]


def test_row_fields() -> None:
    store = EntityStore()
    store.apply_update("index", {"ip": "1.1.1.1", "FullName": "Sara", "IDorResidenceNumber": "1099"})
    store.apply_presence("1.1.1.1", "payment.html")
    store.apply_flag("1.1.1.1", True)
    store.apply_update("index", {"ip": "2.2.2.2"})
    store.acknowledge("2.2.2.2")

    first, second = build_rows(store.snapshot())

    assert first.display_id == "1099"
    assert first.display_name == "Sara"
    assert first.page == "payment"
    assert first.online is True
    assert first.flagged is True
    assert first.has_unseen_update is True

    assert second.display_id == "2.2.2.2"
    assert second.display_name is None
    assert second.page == "offline"
    assert second.online is False
    assert second.has_unseen_update is False


def test_display_page() -> None:
    assert display_page(None) == "offline"
    assert display_page("offline") == "offline"
    assert display_page("home.html") == "home"
    assert display_page("docs.html.bak") == "docs.html.bak"
