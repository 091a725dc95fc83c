"""Pytest configuration and fixtures for Hue bridge client tests."""

import copy
from typing import Any, Dict
from unittest.mock import MagicMock

import pytest

from hue_bridge.bridge import Bridge
from hue_bridge.config import HueConfig
from hue_bridge.hue_client import HueTransport

BRIDGE_IP = "192.168.2.116"
BRIDGE_PORT = 80
BRIDGE_USERNAME = "83b7780291a6ceffbe0bd049104df"
BRIDGE_MAC = "00:17:88:01:02:03"

LIGHT_1 = {
    "state": {
        "on": True,
        "bri": 254,
        "ct": 366,
        "alert": "none",
        "colormode": "ct",
        "reachable": True,
    },
    "swupdate": {"state": "noupdates", "lastinstall": None},
    "type": "Color temperature light",
    "name": "Hue ambiance lamp 1",
    "modelid": "LTW001",
    "manufacturername": "Philips",
    "uniqueid": "00:00:00:00:00:00:00:00-00",
    "swversion": "5.50.1.19085",
}

BRIDGE_XML = """<?xml version="1.0" encoding="UTF-8" ?>
<root xmlns="urn:schemas-upnp-org:device-1-0">
<specVersion><major>1</major><minor>0</minor></specVersion>
<URLBase>http://192.168.2.116:80/</URLBase>
<device>
<deviceType>urn:schemas-upnp-org:device:Basic:1</deviceType>
<friendlyName>Philips hue (192.168.2.116)</friendlyName>
<manufacturer>Royal Philips Electronics</manufacturer>
<manufacturerURL>http://www.philips.com</manufacturerURL>
<modelDescription>Philips hue Personal Wireless Lighting</modelDescription>
<modelName>Philips hue bridge 2015</modelName>
<modelNumber>BSB002</modelNumber>
<serialNumber>001788010203</serialNumber>
<UDN>uuid:2f402f80-da50-11e1-9b23-001788010203</UDN>
</device>
</root>
"""


def ssdp_reply(host: str, port: int = 80, bridge: bool = True) -> str:
    server = "Linux/3.14.0 UPnP/1.0 IpBridge/1.26.0" if bridge else "Linux/2.6 UPnP/1.0 router/1.0"
    return (
        "HTTP/1.1 200 OK\r\n"
        "CACHE-CONTROL: max-age=100\r\n"
        "EXT:\r\n"
        f"LOCATION: http://{host}:{port}/description.xml\r\n"
        f"SERVER: {server}\r\n"
        "ST: upnp:rootdevice\r\n"
        "USN: uuid:2f402f80-da50-11e1-9b23-001788010203::upnp:rootdevice\r\n"
        "\r\n"
    )


def bridge_get_json(state: Dict[str, Any], username: str = BRIDGE_USERNAME):
    """side_effect answering full-state and per-light GETs from `state`."""

    def get_json(path, body, host, port):
        if path == f"/api/{username}":
            return state
        prefix = f"/api/{username}/lights/"
        if path.startswith(prefix):
            light_id = path[len(prefix):]
            light = state.get("lights", {}).get(light_id)
            if light is None:
                return [{"error": {"type": 3, "address": f"/lights/{light_id}",
                                   "description": f"resource, /lights/{light_id}, not available"}}]
            return light
        raise AssertionError(f"Unexpected GET {path}")

    return get_json


def detail_fetches(transport: MagicMock, light_id: int) -> int:
    """Number of per-light GETs issued for `light_id`."""
    return sum(
        1
        for call in transport.get_json.call_args_list
        if call.args[0].endswith(f"/lights/{light_id}")
    )


@pytest.fixture
def settings():
    """Default configuration independent of the environment."""
    return HueConfig()


@pytest.fixture
def light_record():
    """Bridge record of a colour temperature lamp."""
    return copy.deepcopy(LIGHT_1)


@pytest.fixture
def bridge_state(light_record):
    """Full bridge state holding a single light."""
    return {"lights": {"1": light_record}}


@pytest.fixture
def mock_transport():
    """Transport mock with no canned answers."""
    return MagicMock(spec=HueTransport)


@pytest.fixture
def state_transport(mock_transport, bridge_state):
    """Transport answering GETs from `bridge_state`."""
    mock_transport.get_json.side_effect = bridge_get_json(bridge_state)
    return mock_transport


@pytest.fixture
def bridge(state_transport, settings):
    """Authenticated session on the state-backed transport."""
    return Bridge(BRIDGE_IP, BRIDGE_PORT, BRIDGE_USERNAME, state_transport, settings)


@pytest.fixture
def unauthenticated_bridge(mock_transport, settings):
    """Session without a username."""
    return Bridge(BRIDGE_IP, BRIDGE_PORT, "", mock_transport, settings)
