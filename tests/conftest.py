import json
from datetime import datetime, timedelta, timezone

import pytest

from hostapd_api.engine import PresenceStore
from hostapd_api.parser import Action, Event


def ts(minutes: float = 0) -> datetime:
    return datetime(2024, 1, 1, 9, 0, tzinfo=timezone.utc) + timedelta(minutes=minutes)


def make_event(
    action: Action,
    mac: str = "32:42:fd:88:86:0c",
    host: str = "den-ap",
    interface: str = "wl1.1",
    minutes: float = 0,
) -> Event:
    return Event(
        timestamp=ts(minutes),
        host=host,
        interface=interface,
        mac=mac,
        action=action,
    )


def make_line(
    message: str,
    *,
    host: str = "den-ap",
    program: str = "hostapd",
    timestamp: str = "2024-01-01T09:42:46Z",
) -> str:
    return json.dumps({
        "host": host,
        "program": program,
        "timestamp": timestamp,
        "message": message,
    })


@pytest.fixture
def store() -> PresenceStore:
    return PresenceStore()


@pytest.fixture
def populated_store() -> PresenceStore:
    """Three devices: two online across two APs, one gone offline."""
    store = PresenceStore()
    store.witness(make_event(Action.ASSOCIATED, "aa:aa:aa:aa:aa:01", "den-ap", "wl0", 0))
    store.witness(make_event(Action.ASSOCIATED, "aa:aa:aa:aa:aa:01", "den-ap", "wl1.1", 1))
    store.witness(make_event(Action.OBSERVED, "aa:aa:aa:aa:aa:02", "attic-ap", "wl0", 2))
    store.witness(make_event(Action.ASSOCIATED, "aa:aa:aa:aa:aa:03", "den-ap", "wl0", 3))
    store.witness(make_event(Action.DISASSOCIATED, "aa:aa:aa:aa:aa:03", "den-ap", "wl0", 4))
    return store
