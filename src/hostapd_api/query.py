"""Read-only projections over the device index.

Every function here takes the store's ``mac -> Device`` mapping and builds
fresh result values; nothing returned aliases a :class:`Device`. Callers
are expected to hold the store lock for the duration of the call.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from hostapd_api.engine import Device
    from hostapd_api.parser import Station


class DeviceFilter(Enum):
    ALL = "all"
    ONLINE = "online"
    OFFLINE = "offline"


@dataclass(frozen=True)
class StationFilter:
    """Select devices with at least one current station matching every given field."""

    hostname: str | None = None
    interface: str | None = None

    def matches(self, station: Station) -> bool:
        if self.hostname is not None and station.hostname != self.hostname:
            return False
        if self.interface is not None and station.interface != self.interface:
            return False
        return True


DeviceQuery = DeviceFilter | StationFilter


def _isoformat(ts: datetime | None) -> str | None:
    return ts.isoformat() if ts is not None else None


@dataclass(frozen=True)
class DeviceSummary:
    """A device's address and timestamps, without its stations."""

    mac: str
    last_associated: datetime | None
    last_disassociated: datetime | None
    last_observed: datetime | None

    def to_dict(self) -> dict[str, Any]:
        return {
            "hardware_ethernet": self.mac,
            "last_associated": _isoformat(self.last_associated),
            "last_disassociated": _isoformat(self.last_disassociated),
            "last_observed": _isoformat(self.last_observed),
        }


@dataclass(frozen=True)
class DeviceView:
    mac: str
    stations: list[Station]  # sorted
    last_associated: datetime | None
    last_disassociated: datetime | None
    last_observed: datetime | None
    online: bool

    def to_dict(self) -> dict[str, Any]:
        return {
            "hardware_ethernet": self.mac,
            "stations": [
                {"hostname": s.hostname, "interface": s.interface}
                for s in self.stations
            ],
            "last_associated": _isoformat(self.last_associated),
            "last_disassociated": _isoformat(self.last_disassociated),
            "last_observed": _isoformat(self.last_observed),
            "online": self.online,
        }


def _view(mac: str, device: Device) -> DeviceView:
    return DeviceView(
        mac=mac,
        stations=sorted(device.stations),
        last_associated=device.last_associated,
        last_disassociated=device.last_disassociated,
        last_observed=device.last_observed,
        online=device.online,
    )


def _summary(mac: str, device: Device) -> DeviceSummary:
    return DeviceSummary(
        mac=mac,
        last_associated=device.last_associated,
        last_disassociated=device.last_disassociated,
        last_observed=device.last_observed,
    )


def _matches(query: DeviceQuery, device: Device) -> bool:
    if query is DeviceFilter.ALL:
        return True
    if query is DeviceFilter.ONLINE:
        return device.online
    if query is DeviceFilter.OFFLINE:
        return not device.online
    return any(query.matches(s) for s in device.stations)


def get_device(devices: Mapping[str, Device], mac: str) -> DeviceView | None:
    """Return the view for *mac*, or ``None`` if it was never witnessed."""
    mac = mac.lower()
    device = devices.get(mac)
    if device is None:
        return None
    return _view(mac, device)


def list_devices(
    devices: Mapping[str, Device], query: DeviceQuery = DeviceFilter.ALL
) -> list[DeviceView]:
    """Return views of all devices selected by *query*, ordered by address."""
    return [
        _view(mac, devices[mac])
        for mac in sorted(devices)
        if _matches(query, devices[mac])
    ]


def access_points(devices: Mapping[str, Device]) -> list[str]:
    """Return the distinct hostnames with at least one associated device."""
    return sorted({s.hostname for d in devices.values() for s in d.stations})


def stations(devices: Mapping[str, Device]) -> dict[str, list[str]]:
    """Return ``hostname -> interfaces`` for every active station."""
    index: dict[str, set[str]] = {}
    for device in devices.values():
        for station in device.stations:
            index.setdefault(station.hostname, set()).add(station.interface)
    return {host: sorted(index[host]) for host in sorted(index)}


def device_map(devices: Mapping[str, Device]) -> dict[str, list[DeviceSummary]]:
    """Group online devices by the hostname they are associated with.

    A device associated on several interfaces of one host is listed once.
    """
    grouped: dict[str, list[DeviceSummary]] = {}
    for mac in sorted(devices):
        device = devices[mac]
        for hostname in sorted({s.hostname for s in device.stations}):
            grouped.setdefault(hostname, []).append(_summary(mac, device))
    return {host: grouped[host] for host in sorted(grouped)}


def station_map(
    devices: Mapping[str, Device],
) -> dict[str, dict[str, list[DeviceSummary]]]:
    """Group online devices by hostname, then by interface."""
    grouped: dict[str, dict[str, list[DeviceSummary]]] = {}
    for mac in sorted(devices):
        device = devices[mac]
        for station in sorted(device.stations):
            grouped.setdefault(station.hostname, {}).setdefault(
                station.interface, []
            ).append(_summary(mac, device))
    return {
        host: {iface: grouped[host][iface] for iface in sorted(grouped[host])}
        for host in sorted(grouped)
    }
