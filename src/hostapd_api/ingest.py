from __future__ import annotations

import logging
from collections.abc import AsyncIterator

from hostapd_api.engine import PresenceStore
from hostapd_api.logging import log_witness
from hostapd_api.parser import HOSTAPD, DecodeError, Event, GrammarError, parse_line

logger = logging.getLogger(__name__)


def process_line(
    store: PresenceStore, line: str, *, program: str = HOSTAPD
) -> Event | None:
    """Parse one raw line and witness the resulting event, if any.

    Malformed lines are logged and dropped; they never touch *store*.
    """
    try:
        event = parse_line(line, program=program)
    except DecodeError as exc:
        logger.warning("Dropping undecodable line: %s", exc)
        return None
    except GrammarError as exc:
        logger.error("Dropping unparseable %s message: %s", program, exc)
        return None

    if event is None:
        logger.debug("Ignoring line: %s", line)
        return None

    store.witness(event)
    log_witness(event)
    return event


async def ingest(
    lines: AsyncIterator[str], store: PresenceStore, *, program: str = HOSTAPD
) -> None:
    """Apply every line from *lines* to *store*, in order.

    Returns when *lines* is exhausted. Errors raised by the iterator itself
    propagate to the caller.
    """
    async for line in lines:
        if not line.strip():
            continue
        process_line(store, line, program=program)
    logger.info("Log source exhausted")
