from __future__ import annotations

import threading
from dataclasses import dataclass, field
from datetime import datetime

from hostapd_api import query
from hostapd_api.parser import Action, Event, Station
from hostapd_api.query import DeviceFilter, DeviceQuery, DeviceSummary, DeviceView


@dataclass
class Device:
    """Per-address presence record.

    ``stations`` is the device's current presence: it is online while the
    set is non-empty.
    """

    stations: set[Station] = field(default_factory=set)
    last_associated: datetime | None = None
    last_disassociated: datetime | None = None
    last_observed: datetime | None = None

    @property
    def online(self) -> bool:
        return bool(self.stations)

    def associate(self, timestamp: datetime, station: Station) -> None:
        self.last_associated = timestamp
        self.stations.add(station)

    def observe(self, timestamp: datetime, station: Station) -> None:
        self.last_observed = timestamp
        self.stations.add(station)

    def disassociate(self, timestamp: datetime, station: Station) -> None:
        self.last_disassociated = timestamp
        self.stations.discard(station)


class PresenceStore:
    """Live index of which device is associated with which station.

    A single lock serialises :meth:`witness` and every query, so readers
    never see a half-applied event. Devices are never evicted.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._devices: dict[str, Device] = {}
        self._last_event_timestamp: datetime | None = None

    # ------------------------------------------------------------------
    # Mutation
    # ------------------------------------------------------------------

    def witness(self, event: Event) -> None:
        """Apply one parsed event.

        Timestamps are overwritten in arrival order; they are never
        compared against the previous value.
        """
        station = event.station
        with self._lock:
            device = self._devices.setdefault(event.mac, Device())
            if event.action is Action.ASSOCIATED:
                device.associate(event.timestamp, station)
            elif event.action is Action.OBSERVED:
                device.observe(event.timestamp, station)
            else:
                device.disassociate(event.timestamp, station)
            self._last_event_timestamp = event.timestamp

    # ------------------------------------------------------------------
    # Queries
    # ------------------------------------------------------------------

    @property
    def last_event_timestamp(self) -> datetime | None:
        """Timestamp of the most recently witnessed event, if any."""
        with self._lock:
            return self._last_event_timestamp

    def __len__(self) -> int:
        with self._lock:
            return len(self._devices)

    def get(self, mac: str) -> DeviceView | None:
        with self._lock:
            return query.get_device(self._devices, mac)

    def list(self, q: DeviceQuery = DeviceFilter.ALL) -> list[DeviceView]:
        with self._lock:
            return query.list_devices(self._devices, q)

    def access_points(self) -> list[str]:
        with self._lock:
            return query.access_points(self._devices)

    def stations(self) -> dict[str, list[str]]:
        with self._lock:
            return query.stations(self._devices)

    def device_map(self) -> dict[str, list[DeviceSummary]]:
        with self._lock:
            return query.device_map(self._devices)

    def station_map(self) -> dict[str, dict[str, list[DeviceSummary]]]:
        with self._lock:
            return query.station_map(self._devices)
