from conftest import make_event, ts
from hostapd_api.engine import PresenceStore
from hostapd_api.parser import Action, Station
from hostapd_api.query import DeviceFilter, DeviceSummary, StationFilter


def _macs(views):
    return [v.mac for v in views]


class TestList:
    def test_all_is_ordered_by_address(self, populated_store: PresenceStore):
        assert _macs(populated_store.list()) == [
            "aa:aa:aa:aa:aa:01",
            "aa:aa:aa:aa:aa:02",
            "aa:aa:aa:aa:aa:03",
        ]

    def test_order_ignores_insertion_order(self, store: PresenceStore):
        store.witness(make_event(Action.ASSOCIATED, "ff:00:00:00:00:00"))
        store.witness(make_event(Action.ASSOCIATED, "00:00:00:00:00:ff"))
        assert _macs(store.list()) == ["00:00:00:00:00:ff", "ff:00:00:00:00:00"]

    def test_online(self, populated_store: PresenceStore):
        assert _macs(populated_store.list(DeviceFilter.ONLINE)) == [
            "aa:aa:aa:aa:aa:01",
            "aa:aa:aa:aa:aa:02",
        ]

    def test_offline(self, populated_store: PresenceStore):
        assert _macs(populated_store.list(DeviceFilter.OFFLINE)) == ["aa:aa:aa:aa:aa:03"]

    def test_online_and_offline_partition_all(self, populated_store: PresenceStore):
        online = set(_macs(populated_store.list(DeviceFilter.ONLINE)))
        offline = set(_macs(populated_store.list(DeviceFilter.OFFLINE)))
        every = set(_macs(populated_store.list(DeviceFilter.ALL)))
        assert online.isdisjoint(offline)
        assert online | offline == every

    def test_by_hostname(self, populated_store: PresenceStore):
        views = populated_store.list(StationFilter(hostname="den-ap"))
        assert _macs(views) == ["aa:aa:aa:aa:aa:01"]

    def test_by_interface(self, populated_store: PresenceStore):
        views = populated_store.list(StationFilter(interface="wl0"))
        assert _macs(views) == ["aa:aa:aa:aa:aa:01", "aa:aa:aa:aa:aa:02"]

    def test_by_hostname_and_interface(self, populated_store: PresenceStore):
        assert _macs(populated_store.list(StationFilter("den-ap", "wl1.1"))) == [
            "aa:aa:aa:aa:aa:01"
        ]
        assert populated_store.list(StationFilter("attic-ap", "wl1.1")) == []

    def test_unknown_hostname_is_empty(self, populated_store: PresenceStore):
        assert populated_store.list(StationFilter(hostname="garage-ap")) == []

    def test_views_carry_sorted_stations(self, populated_store: PresenceStore):
        view = populated_store.list()[0]
        assert view.stations == [Station("den-ap", "wl0"), Station("den-ap", "wl1.1")]
        assert view.online is True


class TestAccessPoints:
    def test_distinct_sorted_hostnames(self, populated_store: PresenceStore):
        assert populated_store.access_points() == ["attic-ap", "den-ap"]

    def test_offline_devices_contribute_nothing(self, store: PresenceStore):
        store.witness(make_event(Action.ASSOCIATED, host="den-ap"))
        store.witness(make_event(Action.DISASSOCIATED, host="den-ap", minutes=1))
        assert store.access_points() == []


class TestStations:
    def test_interfaces_grouped_by_hostname(self, populated_store: PresenceStore):
        assert populated_store.stations() == {
            "attic-ap": ["wl0"],
            "den-ap": ["wl0", "wl1.1"],
        }

    def test_keys_are_sorted(self, populated_store: PresenceStore):
        assert list(populated_store.stations()) == ["attic-ap", "den-ap"]


class TestDeviceMap:
    def test_groups_online_devices_by_hostname(self, populated_store: PresenceStore):
        grouped = populated_store.device_map()
        assert list(grouped) == ["attic-ap", "den-ap"]
        assert [s.mac for s in grouped["attic-ap"]] == ["aa:aa:aa:aa:aa:02"]
        # Listed once even though associated on two interfaces.
        assert [s.mac for s in grouped["den-ap"]] == ["aa:aa:aa:aa:aa:01"]

    def test_summary_carries_timestamps(self, populated_store: PresenceStore):
        summary = populated_store.device_map()["den-ap"][0]
        assert summary == DeviceSummary(
            mac="aa:aa:aa:aa:aa:01",
            last_associated=ts(1),
            last_disassociated=None,
            last_observed=None,
        )

    def test_offline_devices_are_excluded(self, populated_store: PresenceStore):
        macs = {s.mac for items in populated_store.device_map().values() for s in items}
        assert "aa:aa:aa:aa:aa:03" not in macs

    def test_empty_store(self, store: PresenceStore):
        assert store.device_map() == {}


class TestStationMap:
    def test_groups_by_hostname_then_interface(self, populated_store: PresenceStore):
        grouped = populated_store.station_map()
        assert list(grouped) == ["attic-ap", "den-ap"]
        assert list(grouped["den-ap"]) == ["wl0", "wl1.1"]
        assert [s.mac for s in grouped["den-ap"]["wl0"]] == ["aa:aa:aa:aa:aa:01"]
        assert [s.mac for s in grouped["attic-ap"]["wl0"]] == ["aa:aa:aa:aa:aa:02"]

    def test_devices_sharing_a_station_are_ordered(self, store: PresenceStore):
        store.witness(make_event(Action.ASSOCIATED, "bb:00:00:00:00:00", "den-ap", "wl0"))
        store.witness(make_event(Action.ASSOCIATED, "aa:00:00:00:00:00", "den-ap", "wl0"))
        grouped = store.station_map()
        assert [s.mac for s in grouped["den-ap"]["wl0"]] == [
            "aa:00:00:00:00:00",
            "bb:00:00:00:00:00",
        ]


class TestSerialisation:
    def test_device_view_to_dict(self, populated_store: PresenceStore):
        data = populated_store.get("aa:aa:aa:aa:aa:03").to_dict()
        assert data == {
            "hardware_ethernet": "aa:aa:aa:aa:aa:03",
            "stations": [],
            "last_associated": ts(3).isoformat(),
            "last_disassociated": ts(4).isoformat(),
            "last_observed": None,
            "online": False,
        }

    def test_device_view_lists_stations(self, populated_store: PresenceStore):
        data = populated_store.get("aa:aa:aa:aa:aa:02").to_dict()
        assert data["stations"] == [{"hostname": "attic-ap", "interface": "wl0"}]
        assert data["online"] is True

    def test_summary_omits_stations(self, populated_store: PresenceStore):
        data = populated_store.device_map()["attic-ap"][0].to_dict()
        assert "stations" not in data
        assert data["last_observed"] == ts(2).isoformat()
