"""In-memory store of bridge usernames keyed by bridge MAC."""

import logging
import threading
from typing import Dict, Optional

from .descriptor import normalize_mac
from .hue_client import HueDescriptorError

logger = logging.getLogger(__name__)


class CredentialStore:
    """Thread-safe MAC -> username mapping shared by everything that builds sessions."""

    def __init__(self, initial: Optional[Dict[str, str]] = None):
        self._lock = threading.Lock()
        self._usernames: Dict[str, str] = {}
        for mac, username in (initial or {}).items():
            self.add(mac, username)

    def add(self, mac: str, username: str) -> None:
        """Insert or replace the username for a bridge."""
        key = normalize_mac(mac)
        with self._lock:
            self._usernames[key] = username
        logger.debug(f"Stored username for bridge {key}")

    def get(self, mac: str) -> Optional[str]:
        """Stored username, or None when absent or `mac` is not a MAC address."""
        try:
            key = normalize_mac(mac)
        except HueDescriptorError:
            return None
        with self._lock:
            return self._usernames.get(key)

    def get_all(self) -> Dict[str, str]:
        """Snapshot of all stored usernames."""
        with self._lock:
            return dict(self._usernames)

    def __contains__(self, mac: object) -> bool:
        return isinstance(mac, str) and self.get(mac) is not None

    def __len__(self) -> int:
        with self._lock:
            return len(self._usernames)
