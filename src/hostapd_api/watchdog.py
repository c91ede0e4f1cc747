"""Notifies an HTTP endpoint when the hostapd event stream goes quiet."""

from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timedelta, timezone

import aiohttp

from hostapd_api.engine import PresenceStore

logger = logging.getLogger(__name__)


class Watchdog:
    """Posts ``{"text": ...}`` to *url* once per stale period.

    The endpoint is expected to accept a JSON body with a ``text`` field
    (e.g. a Pushcut webhook). After firing, the watchdog stays quiet until
    events resume.
    """

    def __init__(
        self,
        url: str,
        store: PresenceStore,
        *,
        period: float = 1800,
        interval: float = 60,
        started: datetime | None = None,
    ) -> None:
        self._url = url
        self._store = store
        self._period = timedelta(seconds=period)
        self._interval = interval
        self._started = started or datetime.now(timezone.utc)
        self._fired = False

    @property
    def fired(self) -> bool:
        return self._fired

    def check(self, now: datetime) -> timedelta | None:
        """Return how long the stream has been quiet if an alert is due.

        Receives *now* as an argument so it can be driven by tests.
        """
        last = self._store.last_event_timestamp
        quiet = now - (last if last is not None else self._started)

        if quiet <= self._period:
            if self._fired:
                logger.info("watchdog: events resumed")
            self._fired = False
            return None

        if self._fired:
            return None

        self._fired = True
        return quiet

    async def alert(self, session: aiohttp.ClientSession, quiet: timedelta) -> None:
        minutes = int(quiet.total_seconds() // 60)
        body = {"text": f"No hostapd events in {minutes} minutes"}
        try:
            async with session.post(self._url, json=body) as response:
                response.raise_for_status()
        except (aiohttp.ClientError, TimeoutError) as exc:
            logger.error("error sending watchdog alert: %s", exc)

    async def run(self) -> None:
        """Check staleness every ``interval`` seconds until cancelled."""
        timeout = aiohttp.ClientTimeout(total=10)
        async with aiohttp.ClientSession(timeout=timeout) as session:
            while True:
                await asyncio.sleep(self._interval)
                quiet = self.check(datetime.now(timezone.utc))
                if quiet is None:
                    continue
                if self._store.last_event_timestamp is None:
                    logger.warning(
                        "watchdog: no events since startup %s ago, sending notification",
                        quiet,
                    )
                else:
                    logger.warning(
                        "watchdog: no events in %s, sending notification", quiet
                    )
                await self.alert(session, quiet)
