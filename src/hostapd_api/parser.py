from __future__ import annotations

import json
import re
from dataclasses import dataclass
from datetime import datetime, timezone
from enum import Enum

HOSTAPD = "hostapd"

_MAC_RE = re.compile(r"([0-9A-Fa-f]{2}(?::[0-9A-Fa-f]{2}){5})")
_MAC_TERMINATOR_RE = re.compile(r"[ \t]+")
# RFC3339 date-time; an offset is mandatory.
_RFC3339_RE = re.compile(
    r"\d{4}-\d{2}-\d{2}[Tt]\d{2}:\d{2}:\d{2}(?:\.\d+)?(?:[Zz]|[+-]\d{2}:\d{2})"
)


class ParseError(Exception):
    """Raised when a log line cannot be turned into an event."""


class DecodeError(ParseError):
    """Raised when the JSON envelope is malformed."""


class GrammarError(ParseError):
    """Raised when a hostapd message matches no known pattern."""


class Action(Enum):
    ASSOCIATED = "associated"
    DISASSOCIATED = "disassociated"
    OBSERVED = "observed"


# Tested in order, first prefix wins. ``None`` marks a known message that
# carries no presence information.
_ACTIONS: list[tuple[str, Action | None]] = [
    ("IEEE 802.11: associated", Action.ASSOCIATED),
    ("IEEE 802.11: disassociated", Action.DISASSOCIATED),
    ("WPA: pairwise key handshake completed (RSN)", Action.OBSERVED),
    ("WPA: group key handshake completed (RSN)", Action.OBSERVED),
    ("RADIUS: starting accounting session", None),
]


@dataclass(frozen=True, order=True)
class Station:
    hostname: str
    interface: str


@dataclass(frozen=True)
class Envelope:
    host: str
    program: str
    timestamp: datetime
    message: str


@dataclass(frozen=True)
class Event:
    timestamp: datetime
    host: str
    interface: str
    mac: str  # lowercase, colon-separated
    action: Action

    @property
    def station(self) -> Station:
        return Station(hostname=self.host, interface=self.interface)


def _parse_timestamp(value: str) -> datetime:
    if _RFC3339_RE.fullmatch(value) is None:
        raise DecodeError(f"timestamp {value!r} is not RFC3339")
    try:
        return datetime.fromisoformat(value).astimezone(timezone.utc)
    except (ValueError, OverflowError) as exc:
        raise DecodeError(f"invalid timestamp {value!r}: {exc}") from exc


def parse_envelope(line: str) -> Envelope:
    """Decode one syslog-ng ``format-json`` line.

    Raises :class:`DecodeError` if *line* is not a JSON object carrying
    string ``host``, ``program``, ``timestamp`` and ``message`` fields.
    Any other keys are ignored.
    """
    try:
        data = json.loads(line)
    except (ValueError, TypeError, RecursionError) as exc:
        # JSONDecodeError is a ValueError; so are over-long integer literals.
        raise DecodeError(f"invalid JSON: {exc}") from exc

    if not isinstance(data, dict):
        raise DecodeError("envelope is not a JSON object")

    fields: dict[str, str] = {}
    for key in ("host", "program", "timestamp", "message"):
        value = data.get(key)
        if not isinstance(value, str):
            raise DecodeError(f"missing or non-string field {key!r}")
        fields[key] = value

    return Envelope(
        host=fields["host"],
        program=fields["program"],
        timestamp=_parse_timestamp(fields["timestamp"]),
        message=fields["message"],
    )


def parse_mac(text: str) -> str:
    """Return *text* as a canonical lowercase hardware address.

    Exactly six two-digit hex groups separated by ``:`` are accepted.
    """
    if _MAC_RE.fullmatch(text) is None:
        raise GrammarError(f"invalid hardware address {text!r}")
    return text.lower()


def parse_message(message: str) -> tuple[str, str, Action] | None:
    """Parse a hostapd message into ``(interface, mac, action)``.

    Expected shape::

        wl1.1: STA 32:42:fd:88:86:0c IEEE 802.11: associated

    Returns ``None`` for messages that are recognised but carry no
    presence information. Raises :class:`GrammarError` for anything else.
    """
    interface, sep, rest = message.partition(": ")
    if not sep:
        raise GrammarError(f"no interface delimiter in {message!r}")
    if not rest.startswith("STA "):
        raise GrammarError(f"expected 'STA ' in {message!r}")
    rest = rest[len("STA "):]

    match = _MAC_RE.match(rest)
    if match is None:
        raise GrammarError(f"invalid hardware address in {message!r}")
    mac = match.group(1).lower()

    gap = _MAC_TERMINATOR_RE.match(rest, match.end())
    if gap is None:
        raise GrammarError(f"invalid hardware address in {message!r}")
    rest = rest[gap.end():]

    for prefix, action in _ACTIONS:
        if rest.startswith(prefix):
            if action is None:
                return None
            return interface, mac, action

    raise GrammarError(f"unrecognised message {message!r}")


def parse_line(line: str, *, program: str = HOSTAPD) -> Event | None:
    """Parse a raw log line and return an :class:`Event`.

    Returns ``None`` if the line was logged by another program or the
    message is a known no-op. Raises :class:`DecodeError` or
    :class:`GrammarError` on malformed input.
    """
    envelope = parse_envelope(line)
    if envelope.program != program:
        return None

    parsed = parse_message(envelope.message)
    if parsed is None:
        return None

    interface, mac, action = parsed
    return Event(
        timestamp=envelope.timestamp,
        host=envelope.host,
        interface=interface,
        mac=mac,
        action=action,
    )
