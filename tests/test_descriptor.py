"""Unit tests for bridge descriptor parsing."""

import json

import pytest

from conftest import BRIDGE_MAC, BRIDGE_XML
from hue_bridge.descriptor import normalize_mac, parse_description
from hue_bridge.hue_client import HueDescriptorError, HueMalformedResponseError

BARE_XML = """<root>
<device>
<modelName>Philips hue bridge 2012</modelName>
<serialNumber>00:17:88:01:02:03</serialNumber>
</device>
</root>"""


class TestNormalizeMac:
    """Test MAC normalization."""

    @pytest.mark.parametrize(
        "value",
        ["001788010203", "00:17:88:01:02:03", "00-17-88-01-02-03", " 001788010203\n"],
    )
    def test_formats(self, value):
        assert normalize_mac(value) == BRIDGE_MAC

    def test_uppercase(self):
        assert normalize_mac("001788AABBCC") == "00:17:88:aa:bb:cc"

    @pytest.mark.parametrize("value", ["", "0017880102", "00178801020304", "zz1788010203"])
    def test_invalid(self, value):
        with pytest.raises(HueDescriptorError):
            normalize_mac(value)


class TestParseDescription:
    """Test parse_description."""

    def test_namespaced_xml(self):
        assert parse_description(BRIDGE_XML) == BRIDGE_MAC

    def test_bare_xml(self):
        assert parse_description(BARE_XML) == BRIDGE_MAC

    def test_config_json(self):
        config = {
            "name": "Test Bridge",
            "mac": "00:17:88:01:02:03",
            "bridgeid": "001788FFFE010203",
            "modelid": "BSB002",
        }
        assert parse_description(json.dumps(config)) == BRIDGE_MAC

    @pytest.mark.parametrize(
        "text",
        [
            "",
            "invalid stuff",
            "<root><device>",
            BRIDGE_XML.replace("Philips hue bridge 2015", "Some media server"),
            BRIDGE_XML.replace("<serialNumber>001788010203</serialNumber>", ""),
            BRIDGE_XML.replace("001788010203", "not-a-mac"),
            '{"name": "router"}',
            '{"mac": "00:17:88:01:02:03"}',
            "{not json",
        ],
    )
    def test_rejects(self, text):
        with pytest.raises(HueDescriptorError):
            parse_description(text)

    def test_descriptor_error_is_malformed_response(self):
        with pytest.raises(HueMalformedResponseError):
            parse_description("invalid stuff")

    def test_entity_declarations_are_rejected(self):
        text = BRIDGE_XML.replace(
            '<root xmlns="urn:schemas-upnp-org:device-1-0">',
            '<!DOCTYPE root [<!ENTITY mac "001788010203">]>\n'
            '<root xmlns="urn:schemas-upnp-org:device-1-0">',
        ).replace(
            "<serialNumber>001788010203</serialNumber>",
            "<serialNumber>&mac;</serialNumber>",
        )

        with pytest.raises(HueDescriptorError, match="forbidden"):
            parse_description(text)
