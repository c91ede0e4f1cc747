"""Read-only JSON HTTP API over the presence store."""

from __future__ import annotations

from aiohttp import web

from hostapd_api.engine import PresenceStore
from hostapd_api.query import DeviceFilter, DeviceQuery, DeviceSummary, StationFilter

STORE = web.AppKey("store", PresenceStore)

routes = web.RouteTableDef()


def _store(request: web.Request) -> PresenceStore:
    return request.app[STORE]


def _devices(request: web.Request, query: DeviceQuery) -> web.Response:
    views = _store(request).list(query)
    return web.json_response({"devices": [v.to_dict() for v in views]})


def _summaries(items: list[DeviceSummary]) -> list[dict]:
    return [item.to_dict() for item in items]


@routes.get("/")
async def index(request: web.Request) -> web.Response:
    return _devices(request, DeviceFilter.ALL)


@routes.get("/online")
async def online(request: web.Request) -> web.Response:
    return _devices(request, DeviceFilter.ONLINE)


@routes.get("/offline")
async def offline(request: web.Request) -> web.Response:
    return _devices(request, DeviceFilter.OFFLINE)


@routes.get("/mac/{mac}")
async def mac_get(request: web.Request) -> web.Response:
    view = _store(request).get(request.match_info["mac"])
    return web.json_response({"device": view.to_dict() if view is not None else None})


@routes.get("/ap")
async def ap_index(request: web.Request) -> web.Response:
    return web.json_response({"access_points": _store(request).access_points()})


@routes.get("/ap/{ap}")
async def ap_get(request: web.Request) -> web.Response:
    return _devices(request, StationFilter(hostname=request.match_info["ap"]))


@routes.get("/ap/{ap}/{interface}")
async def ap_interface_get(request: web.Request) -> web.Response:
    return _devices(
        request,
        StationFilter(
            hostname=request.match_info["ap"],
            interface=request.match_info["interface"],
        ),
    )


@routes.get("/interface/{interface}")
async def interface_get(request: web.Request) -> web.Response:
    return _devices(request, StationFilter(interface=request.match_info["interface"]))


@routes.get("/stations")
async def station_index(request: web.Request) -> web.Response:
    return web.json_response({"stations": _store(request).stations()})


@routes.get("/map")
async def device_map(request: web.Request) -> web.Response:
    grouped = _store(request).device_map()
    return web.json_response({
        "device_map": {host: _summaries(items) for host, items in grouped.items()},
    })


@routes.get("/map/stations")
async def station_map(request: web.Request) -> web.Response:
    grouped = _store(request).station_map()
    return web.json_response({
        "station_map": {
            host: {iface: _summaries(items) for iface, items in ifaces.items()}
            for host, ifaces in grouped.items()
        },
    })


def create_app(store: PresenceStore) -> web.Application:
    """Build the aiohttp application serving *store*."""
    app = web.Application()
    app[STORE] = store
    app.add_routes(routes)
    return app
