"""Bridge discovery over SSDP and username bookkeeping for discovered bridges."""

import logging
import re
from typing import Dict, List, Optional, Tuple
from urllib.parse import urlparse

from .bridge import Bridge, BridgeIdentity
from .config import (
    BRIDGE_MARKER,
    DESCRIPTION_PATH,
    SSDP_ADDRESS,
    SSDP_PORT,
    HueConfig,
    config,
)
from .credentials import CredentialStore
from .descriptor import parse_description
from .hue_client import (
    HttpHueTransport,
    HueError,
    HueLinkButtonNotPressedError,
    HueTransport,
)
from .responses import LINK_BUTTON_NOT_PRESSED

logger = logging.getLogger(__name__)

SSDP_PROBE = (
    "M-SEARCH * HTTP/1.1\r\n"
    f"HOST: {SSDP_ADDRESS}:{SSDP_PORT}\r\n"
    'MAN: "ssdp:discover"\r\n'
    "MX: 5\r\n"
    "ST: ssdp:all\r\n"
    "\r\n"
)

_LOCATION = re.compile(r"^LOCATION:\s*(\S+)\s*$", re.IGNORECASE | re.MULTILINE)


def parse_ssdp_reply(reply: str) -> Optional[Tuple[str, int]]:
    """Host and port from a bridge's SSDP reply, None for other devices."""
    if BRIDGE_MARKER not in reply:
        return None
    match = _LOCATION.search(reply)
    if not match:
        return None
    location = urlparse(match.group(1))
    if not location.hostname:
        return None
    try:
        port = location.port or 80
    except ValueError:
        return None
    return location.hostname, port


class BridgeFinder:
    """Finds bridges on the local network and hands out sessions for them."""

    def __init__(
        self,
        transport: Optional[HueTransport] = None,
        store: Optional[CredentialStore] = None,
        settings: Optional[HueConfig] = None,
    ):
        self.settings = settings or config
        self._owns_transport = transport is None
        self.transport = transport or HttpHueTransport(self.settings)
        self.store = store if store is not None else CredentialStore()

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the transport if this finder created it.

        Sessions handed out by `get_bridge` share that transport.
        """
        if self._owns_transport:
            self.transport.close()

    def find_bridges(self) -> List[BridgeIdentity]:
        """Probe for bridges and resolve each to (ip, port, mac).

        Candidates whose description cannot be fetched or parsed are skipped.
        Bridges answering more than once are reported once, first seen wins.
        """
        replies = self.transport.send_multicast(
            SSDP_PROBE, SSDP_ADDRESS, SSDP_PORT, self.settings.discovery_timeout
        )

        candidates: List[Tuple[str, int]] = []
        for reply in replies:
            candidate = parse_ssdp_reply(reply)
            if candidate and candidate not in candidates:
                candidates.append(candidate)

        bridges: Dict[str, BridgeIdentity] = {}
        for ip, port in candidates:
            try:
                description = self.transport.get_text(
                    DESCRIPTION_PATH, "application/xml", "", ip, port
                )
                mac = parse_description(description)
            except HueError as e:
                logger.debug(f"Skipping candidate {ip}:{port}: {e}")
                continue
            if mac not in bridges:
                bridges[mac] = BridgeIdentity(ip=ip, port=port, mac=mac)

        logger.info(f"Found {len(bridges)} bridge(s)")
        return list(bridges.values())

    def add_username(self, mac: str, username: str) -> None:
        self.store.add(mac, username)

    def get_all_usernames(self) -> Dict[str, str]:
        return self.store.get_all()

    def get_bridge(self, identity: BridgeIdentity) -> Bridge:
        """Session for a discovered bridge, registering a username if none is stored.

        Raises HueLinkButtonNotPressedError when registration is needed and
        the link button has not been pressed.
        """
        bridge = Bridge.from_identity(identity, self.store, self.transport, self.settings)
        if bridge.username:
            return bridge

        username = bridge.request_username()
        if not username:
            raise HueLinkButtonNotPressedError(
                LINK_BUTTON_NOT_PRESSED, "link button not pressed"
            )
        self.store.add(identity.mac, username)
        return bridge
