"""Parsing of a bridge's self-description into its MAC address."""

import json
import logging
import re
from typing import TYPE_CHECKING, Optional

from defusedxml import DefusedXmlException, ElementTree

from .hue_client import HueDescriptorError

if TYPE_CHECKING:
    from xml.etree.ElementTree import Element

logger = logging.getLogger(__name__)

BRIDGE_MODEL_PREFIX = "Philips hue bridge"

_HEX_MAC = re.compile(r"^[0-9a-f]{12}$")


def normalize_mac(value: str) -> str:
    """Normalize a MAC/serial to lowercase colon-separated pairs.

    Accepts `001788010203`, `00:17:88:01:02:03` and `00-17-88-01-02-03`.
    """
    compact = re.sub(r"[\s:\-]", "", value or "").lower()
    if not _HEX_MAC.match(compact):
        raise HueDescriptorError(f"Not a MAC address: {value!r}")
    return ":".join(compact[i : i + 2] for i in range(0, 12, 2))


def _local(tag: str) -> str:
    return tag.rsplit("}", 1)[-1]


def _child_text(element: "Element", name: str) -> Optional[str]:
    for child in element:
        if _local(child.tag) == name:
            return (child.text or "").strip()
    return None


def _parse_xml(text: str) -> str:
    try:
        root = ElementTree.fromstring(text)
    except ElementTree.ParseError as e:
        raise HueDescriptorError(f"Descriptor is not valid XML: {e}") from e
    except DefusedXmlException as e:
        raise HueDescriptorError(f"Descriptor uses forbidden XML constructs: {e!r}") from e

    for element in root.iter():
        if _local(element.tag) != "device":
            continue
        model = _child_text(element, "modelName") or ""
        if not model.startswith(BRIDGE_MODEL_PREFIX):
            continue
        serial = _child_text(element, "serialNumber")
        if not serial:
            raise HueDescriptorError("Bridge descriptor has no serialNumber")
        return normalize_mac(serial)

    raise HueDescriptorError("Descriptor does not describe a Hue bridge")


def _parse_config_json(text: str) -> str:
    try:
        data = json.loads(text)
    except ValueError as e:
        raise HueDescriptorError(f"Descriptor is not valid JSON: {e}") from e
    if not isinstance(data, dict) or "mac" not in data:
        raise HueDescriptorError("Bridge config has no mac field")
    if "bridgeid" not in data and "modelid" not in data:
        raise HueDescriptorError("Config does not describe a Hue bridge")
    return normalize_mac(str(data["mac"]))


def parse_description(text: str) -> str:
    """Extract the normalized MAC from `/description.xml` or `/api/config`.

    Raises HueDescriptorError for anything that is not a Hue bridge
    self-description.
    """
    stripped = (text or "").strip()
    if not stripped:
        raise HueDescriptorError("Empty descriptor")
    if stripped.startswith("{"):
        mac = _parse_config_json(stripped)
    elif stripped.startswith("<"):
        mac = _parse_xml(stripped)
    else:
        raise HueDescriptorError("Descriptor is neither XML nor JSON")
    logger.debug(f"Parsed bridge descriptor, mac={mac}")
    return mac
