"""Bridge session: username handshake, light cache and error translation."""

import logging
from typing import Any, Dict, List, Optional, Set

from pydantic import BaseModel, ConfigDict

from .config import HueConfig, config
from .credentials import CredentialStore
from .hue_client import (
    HttpHueTransport,
    HueLightNotFoundError,
    HueMalformedResponseError,
    HueNotAuthenticatedError,
    HueTransport,
)
from .light import HueLight, picture_of_model
from .responses import (
    LINK_BUTTON_NOT_PRESSED,
    BridgeErrorItem,
    BridgeResponseItem,
    BridgeSuccess,
    parse_response,
    raise_for_error,
)

logger = logging.getLogger(__name__)


class BridgeIdentity(BaseModel):
    """Address and MAC of a discovered bridge."""

    model_config = ConfigDict(frozen=True)

    ip: str
    port: int
    mac: str


class Bridge:
    """Session with one Hue bridge.

    Lights are fetched lazily and cached by id for the lifetime of the
    session. The cache is never invalidated in the background; it is only
    extended with ids the bridge reports, and entries are dropped by
    `remove_light`.
    """

    def __init__(
        self,
        ip: str,
        port: int = 80,
        username: str = "",
        transport: Optional[HueTransport] = None,
        settings: Optional[HueConfig] = None,
    ):
        self.settings = settings or config
        self._ip = ip
        self._port = port
        self._username = username or ""
        self._owns_transport = transport is None
        self.transport = transport or HttpHueTransport(self.settings)
        self._lights: Dict[int, HueLight] = {}

    @classmethod
    def from_identity(
        cls,
        identity: BridgeIdentity,
        store: CredentialStore,
        transport: Optional[HueTransport] = None,
        settings: Optional[HueConfig] = None,
    ) -> "Bridge":
        """Create a session for a discovered bridge using any stored username."""
        username = store.get(identity.mac) or ""
        return cls(identity.ip, identity.port, username, transport, settings)

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self) -> None:
        """Close the transport if this session created it."""
        if self._owns_transport:
            self.transport.close()

    def __repr__(self) -> str:
        return f"Bridge(ip={self._ip!r}, port={self._port}, authenticated={bool(self._username)})"

    @property
    def ip(self) -> str:
        return self._ip

    @property
    def port(self) -> int:
        return self._port

    @property
    def username(self) -> str:
        return self._username

    def set_ip(self, ip: str) -> None:
        self._ip = ip

    def set_port(self, port: int) -> None:
        self._port = port

    def _api_path(self, *parts: Any) -> str:
        if not self._username:
            raise HueNotAuthenticatedError(
                "No username set for this bridge; call request_username() first"
            )
        return "/".join(["/api", self._username, *(str(part) for part in parts)])

    def request_username(self) -> str:
        """Register this application with the bridge.

        Returns the new username, or an empty string when the link button has
        not been pressed yet. Any other bridge error is raised as
        HueAPIResponseError.
        """
        body = {"devicetype": self.settings.devicetype}
        response = self.transport.post_json("/api", body, self._ip, self._port)
        item = parse_response(response)[0]

        if isinstance(item, BridgeErrorItem):
            if item.code == LINK_BUTTON_NOT_PRESSED:
                logger.warning(f"Link button on bridge {self._ip} not pressed")
                return ""
            raise item.to_exception()

        username = item.success.get("username") if isinstance(item.success, dict) else None
        if not isinstance(username, str) or not username:
            raise HueMalformedResponseError(f"Registration reply has no username: {response!r}")
        self._username = username
        logger.info(f"Registered new username on bridge {self._ip}")
        return username

    def _fetch_state(self) -> Dict[str, Any]:
        """Full bridge state (`GET /api/<username>`)."""
        state = raise_for_error(
            self.transport.get_json(self._api_path(), {}, self._ip, self._port)
        )
        if state is None:
            return {}
        if not isinstance(state, dict):
            raise HueMalformedResponseError(f"Unexpected bridge state: {state!r}")
        return state

    def _fetch_light_ids(self) -> Set[int]:
        lights = self._fetch_state().get("lights") or {}
        if not isinstance(lights, dict):
            raise HueMalformedResponseError("Bridge state has an invalid lights block")
        try:
            return {int(light_id) for light_id in lights}
        except ValueError as e:
            raise HueMalformedResponseError(f"Invalid light id in {list(lights)}") from e

    def _fetch_light(self, light_id: int) -> Dict[str, Any]:
        data = raise_for_error(
            self.transport.get_json(
                self._api_path("lights", light_id), {}, self._ip, self._port
            )
        )
        if not isinstance(data, dict):
            raise HueMalformedResponseError(f"Light {light_id} record is not an object")
        return data

    def _put_light_state(self, light_id: int, body: Dict[str, Any]) -> List[BridgeResponseItem]:
        response = self.transport.put_json(
            self._api_path("lights", light_id, "state"), body, self._ip, self._port
        )
        return parse_response(response)

    def _load_light(self, light_id: int) -> HueLight:
        light = HueLight.from_json(self, light_id, self._fetch_light(light_id))
        self._lights[light_id] = light
        logger.debug(f"Cached {light!r}")
        return light

    def get_light(self, light_id: int) -> HueLight:
        """Return the cached light, fetching and classifying it on first use."""
        light = self._lights.get(light_id)
        if light is not None:
            return light
        if light_id not in self._fetch_light_ids():
            raise HueLightNotFoundError(light_id)
        return self._load_light(light_id)

    def get_all_lights(self) -> List[HueLight]:
        """Refresh the light list and return every cached light, ordered by id.

        Lights the bridge no longer reports are dropped from the cache; lights
        already cached are returned as the same objects.
        """
        light_ids = self._fetch_light_ids()
        for light_id in sorted(light_ids - set(self._lights)):
            self._load_light(light_id)
        # Removals apply only after every new light has loaded.
        for light_id in set(self._lights) - light_ids:
            logger.debug(f"Light {light_id} vanished from bridge {self._ip}")
            del self._lights[light_id]
        return [self._lights[light_id] for light_id in sorted(self._lights)]

    def light_exists(self, light_id: int) -> bool:
        """Check a light id without touching the cache."""
        if light_id in self._lights:
            return True
        return light_id in self._fetch_light_ids()

    def remove_light(self, light_id: int) -> bool:
        """Delete a light from the bridge. False unless the bridge confirms."""
        response = self.transport.delete_json(
            self._api_path("lights", light_id), {}, self._ip, self._port
        )
        try:
            items = parse_response(response)
        except HueMalformedResponseError:
            logger.debug(f"Delete of light {light_id} not acknowledged: {response!r}")
            return False
        if not isinstance(items[0], BridgeSuccess):
            return False
        self._lights.pop(light_id, None)
        logger.info(f"Removed light {light_id} from bridge {self._ip}")
        return True

    def get_picture_of_light(self, light_id: int) -> str:
        """Asset name for a cached light's model; empty if not cached."""
        light = self._lights.get(light_id)
        if light is None:
            return ""
        return picture_of_model(light.model_id)
