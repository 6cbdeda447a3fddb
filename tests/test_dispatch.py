from __future__ import annotations

import logging

import pytest

from pyvisitors._constants import PROFILE_EVENTS
from pyvisitors.ingestion.dispatch import EventDispatcher
from pyvisitors.state.events import MergeOutcome
from pyvisitors.state.store import EntityStore

IP = "7.7.7.7"


class _Recorder:
    def __init__(self) -> None:
        self.calls: list[tuple[MergeOutcome, str, str]] = []

    def __call__(self, outcome: MergeOutcome, key: str, category: str) -> None:
        self.calls.append((outcome, key, category))


def _dispatcher() -> tuple[EventDispatcher, EntityStore, _Recorder]:
    store = EntityStore()
    recorder = _Recorder()
    return EventDispatcher(store, notifier=recorder), store, recorder


@pytest.mark.parametrize("event_name", sorted(PROFILE_EVENTS))
def test_every_profile_event_shares_one_merge_path(event_name: str) -> None:
    dispatcher, store, recorder = _dispatcher()

    dispatcher.dispatch(event_name, {"ip": IP, "Field": event_name})
    outcome = dispatcher.dispatch(event_name, {"ip": IP, "Other": 1})

    assert outcome == MergeOutcome.UPDATED
    entity = store.get(IP)
    assert entity.profile == {"ip": IP, "Field": event_name, "Other": 1}
    assert entity.has_unseen_update is True
    category = PROFILE_EVENTS[event_name]
    assert recorder.calls == [
        (MergeOutcome.CREATED, IP, category),
        (MergeOutcome.UPDATED, IP, category),
    ]


def test_initial_data_bootstraps_without_notifications() -> None:
    dispatcher, store, recorder = _dispatcher()

    outcome = dispatcher.dispatch("initialData", {"index": [{"ip": IP, "FullName": "X"}]})

    assert outcome == MergeOutcome.UPDATED
    assert store.get(IP).has_unseen_update is False
    assert recorder.calls == []


def test_payment_event_appends_and_notifies() -> None:
    dispatcher, store, recorder = _dispatcher()

    dispatcher.dispatch("newPayment", {"ip": IP, "amount": 10})

    assert store.get(IP).payments == ({"ip": IP, "amount": 10},)
    assert recorder.calls == [(MergeOutcome.CREATED, IP, "payment")]


def test_location_events() -> None:
    dispatcher, store, recorder = _dispatcher()
    dispatcher.dispatch("locationUpdated", {"ip": IP, "page": "home.html"})
    store.acknowledge(IP)

    dispatcher.dispatch("locationUpdated", {"ip": IP, "page": "offline"})

    entity = store.get(IP)
    assert entity.current_location == "offline"
    assert entity.has_unseen_update is False
    # Only the online transition is announced.
    assert recorder.calls == [(MergeOutcome.CREATED, IP, "presence")]


def test_flag_and_delete_events_do_not_notify() -> None:
    dispatcher, store, recorder = _dispatcher()
    dispatcher.dispatch("newIndex", {"ip": IP})
    recorder.calls.clear()

    dispatcher.dispatch("flagUpdated", {"ip": IP, "flag": True})
    assert store.get(IP).flagged is True

    assert dispatcher.dispatch("userDeleted", {"ip": IP}) == MergeOutcome.REMOVED
    assert IP not in store
    assert recorder.calls == []


def test_malformed_events_are_dropped_and_logged(caplog: pytest.LogCaptureFixture) -> None:
    dispatcher, store, _recorder = _dispatcher()
    dispatcher.dispatch("newIndex", {"ip": IP, "FullName": "Keep"})
    snapshot = store.snapshot()

    with caplog.at_level(logging.WARNING):
        assert dispatcher.dispatch("newDetails", {"FullName": "No key"}) == MergeOutcome.REJECTED
        assert dispatcher.dispatch("newPayment", ["not", "an", "object"]) == MergeOutcome.REJECTED
        assert dispatcher.dispatch("locationUpdated", None) == MergeOutcome.REJECTED
        assert dispatcher.dispatch("initialData", "nope") == MergeOutcome.REJECTED

    assert store.snapshot() is snapshot
    assert "Dropping malformed newDetails event" in caplog.text


def test_unknown_event_is_ignored() -> None:
    dispatcher, store, _recorder = _dispatcher()

    assert dispatcher.dispatch("somethingElse", {"ip": IP}) == MergeOutcome.IGNORED
    assert dispatcher.handles("somethingElse") is False
    assert dispatcher.handles("newNafad") is True
    assert len(store) == 0


def test_failing_notifier_is_contained() -> None:
    store = EntityStore()

    def _boom(*_args: object) -> None:
        raise RuntimeError("no audio device")

    dispatcher = EventDispatcher(store, notifier=_boom)

    assert dispatcher.dispatch("newIndex", {"ip": IP}) == MergeOutcome.CREATED
    assert IP in store
