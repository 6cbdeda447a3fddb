from __future__ import annotations

from pyvisitors.state.entity import Entity
from pyvisitors.state.events import EventKind
from pyvisitors.state.policy import (
    append_payment,
    extract_key,
    is_online,
    marks_unseen,
    merge_profile,
    new_entity,
    set_flag,
)


def test_merge_profile_keeps_untouched_fields_and_is_pure() -> None:
    entity = Entity(key="k", profile={"a": 1, "b": 2}, payments=({"amount": 1},), flagged=True)

    merged = merge_profile(entity, {"b": 3, "c": 4})

    assert merged.profile == {"a": 1, "b": 3, "c": 4}
    assert merged.payments == entity.payments
    assert merged.flagged is True
    assert entity.profile == {"a": 1, "b": 2}


def test_merge_profile_routes_current_page_to_location() -> None:
    merged = merge_profile(new_entity("k"), {"currentPage": "home.html", "x": 1})

    assert merged.current_location == "home.html"
    assert merged.profile == {"x": 1}


def test_merge_profile_empty_patch_returns_same_instance() -> None:
    entity = new_entity("k")
    assert merge_profile(entity, {}) is entity


def test_append_payment_copies_record() -> None:
    record = {"ip": "k", "amount": 5}
    entity = append_payment(new_entity("k"), record)
    record["amount"] = 6

    assert entity.payments == ({"ip": "k", "amount": 5},)
    assert entity.profile == {"ip": "k", "amount": 5}


def test_set_flag_unchanged_returns_same_instance() -> None:
    entity = new_entity("k")
    assert set_flag(entity, False) is entity
    assert set_flag(entity, True).flagged is True


def test_extract_key() -> None:
    assert extract_key({"ip": " 1.1.1.1 "}, "ip") == "1.1.1.1"
    assert extract_key({"ip": None}, "ip") is None
    assert extract_key(["1.1.1.1"], "ip") is None


def test_is_online() -> None:
    assert is_online("home.html") is True
    assert is_online("offline") is False
    assert is_online(None) is False


def test_marks_unseen_rules() -> None:
    assert marks_unseen(EventKind.PROFILE) is True
    assert marks_unseen(EventKind.PAYMENT) is True
    assert marks_unseen(EventKind.PRESENCE, "nafad.html") is True
    assert marks_unseen(EventKind.PRESENCE, "offline") is False
    assert marks_unseen(EventKind.FLAG) is False
    assert marks_unseen(EventKind.DELETE) is False
