"""Light entities, model classification and model pictures."""

import logging
from enum import Enum
from typing import TYPE_CHECKING, Any, Dict, List, Optional, Tuple

from pydantic import BaseModel, ConfigDict, ValidationError

from .hue_client import HueMalformedResponseError, HueValidationError
from .responses import BridgeSuccess

if TYPE_CHECKING:
    from .bridge import Bridge

logger = logging.getLogger(__name__)


class ColorType(Enum):
    """Colour capability of a light."""

    NONE = "none"
    TEMPERATURE = "temperature"
    GAMUT_A = "gamut_a"
    GAMUT_B = "gamut_b"
    GAMUT_C = "gamut_c"


# Exact model ids, checked before any prefix.
_EXACT_MODELS: Dict[ColorType, Tuple[str, ...]] = {
    ColorType.GAMUT_B: ("LCT001", "LCT002", "LCT003", "LCT007", "LLM001"),
    ColorType.GAMUT_C: (
        "LCT010", "LCT011", "LCT012", "LCT014", "LCT015", "LCT016",
        "LLC020", "LST002",
    ),
    ColorType.GAMUT_A: (
        "LST001", "LLC005", "LLC006", "LLC007", "LLC010", "LLC011",
        "LLC012", "LLC013", "LLC014",
    ),
    ColorType.NONE: (
        "LWB004", "LWB006", "LWB007", "LWB010", "LWB014", "LDF001",
        "LDF002", "LDD001", "LDD002", "MWM001", "LOM001",
    ),
    ColorType.TEMPERATURE: (
        "LLM010", "LLM011", "LLM012", "LTW001", "LTW004", "LTW010",
        "LTW011", "LTW012", "LTW013", "LTW014", "LTW015", "LTP001",
        "LTP002", "LTP003", "LTF001", "LTF002", "LTC001", "LTC002",
        "LTC003", "LTC004", "LTD001", "LTD002", "LTD003", "LFF001",
        "LTT001", "LDT001",
    ),
}

# Family prefixes for ids missing from the exact table, first match wins.
_PREFIX_MODELS: Tuple[Tuple[str, ColorType], ...] = (
    ("LCA", ColorType.GAMUT_C),
    ("LCG", ColorType.GAMUT_C),
    ("LCT", ColorType.GAMUT_C),
    ("LST", ColorType.GAMUT_C),
    ("LTA", ColorType.TEMPERATURE),
    ("LTG", ColorType.TEMPERATURE),
    ("LTW", ColorType.TEMPERATURE),
    ("LWA", ColorType.NONE),
    ("LWB", ColorType.NONE),
    ("LWG", ColorType.NONE),
    ("LOM", ColorType.NONE),
)

_MODEL_LOOKUP: Dict[str, ColorType] = {
    model: color_type
    for color_type, models in _EXACT_MODELS.items()
    for model in models
}

_MODEL_PICTURES: Tuple[Tuple[Tuple[str, ...], str], ...] = (
    (
        (
            "LCT001", "LCT007", "LCT010", "LCT014", "LTW010", "LTW001",
            "LTW004", "LTW015", "LWB004", "LWB006",
        ),
        "e27_waca",
    ),
    (("LWB010", "LWB014"), "e27_white"),
    (("LCT012", "LTW012"), "e14"),
    (("LCT002",), "br30"),
    (("LCT011", "LTW011"), "br30_slim"),
    (("LCT003",), "gu10"),
    (("LTW013",), "gu10_perfectfit"),
    (("LST001", "LST002"), "lightstrip"),
    (("LLC006", "LLC010"), "iris"),
    (("LLC005", "LLC011", "LLC012", "LLC007"), "bloom"),
    (("LLC014",), "aura"),
    (("LLC013",), "storylight"),
    (("LLC020",), "go"),
    (("HBL001", "HBL002", "HBL003"), "beyond_ceiling_pendant_table"),
    (("HIL001", "HIL002"), "impulse"),
    (("HEL001", "HEL002"), "entity"),
    (("HML001", "HML002", "HML003", "HML006", "HML007"), "phoenix_ceiling_pendant_table_wall"),
    (("HML004", "HML005"), "phoenix_down"),
    (("LTP001", "LTP002", "LTP003", "LTP004", "LTP005", "LTD003"), "pendant"),
    (("LDF002", "LTF001", "LTF002", "LTC001", "LTC002", "LTC003", "LTC004", "LTD001", "LTD002", "LDF001"), "ceiling"),
    (("LDD002", "LFF001"), "floor"),
    (("LDD001", "LTT001"), "table"),
    (("LDT001", "MWM001"), "recessed"),
    (("BSB001",), "bridge_v1"),
    (("BSB002",), "bridge_v2"),
    (("SWT001",), "tap"),
    (("RWL021",), "hds"),
    (("SML001",), "motion_sensor"),
)

_PICTURE_LOOKUP: Dict[str, str] = {
    model: picture for models, picture in _MODEL_PICTURES for model in models
}

COLOR_TEMPERATURE_TYPES = (ColorType.TEMPERATURE, ColorType.GAMUT_B, ColorType.GAMUT_C)


def classify_model(model_id: str) -> ColorType:
    """Map a bridge model id onto its colour capability.

    Unknown ids are not an error; they are treated as lights without colour
    control.
    """
    model_id = (model_id or "").strip().upper()
    color_type = _MODEL_LOOKUP.get(model_id)
    if color_type is not None:
        return color_type
    for prefix, prefix_type in _PREFIX_MODELS:
        if model_id.startswith(prefix):
            return prefix_type
    return ColorType.NONE


def picture_of_model(model_id: str) -> str:
    """Asset name for a model id, or an empty string if there is none."""
    return _PICTURE_LOOKUP.get((model_id or "").strip().upper(), "")


class LightState(BaseModel):
    """State block of a light as reported by the bridge."""

    model_config = ConfigDict(extra="allow")

    on: bool
    reachable: bool
    bri: Optional[int] = None
    hue: Optional[int] = None
    sat: Optional[int] = None
    xy: Optional[List[float]] = None
    ct: Optional[int] = None
    alert: Optional[str] = None
    effect: Optional[str] = None
    colormode: Optional[str] = None


def _parse_state(light_id: int, data: Dict[str, Any]) -> LightState:
    state = data.get("state")
    if not isinstance(state, dict):
        raise HueMalformedResponseError(f"Light {light_id} has no state block")
    try:
        return LightState.model_validate(state)
    except ValidationError as e:
        raise HueMalformedResponseError(f"Light {light_id} has an invalid state: {e}") from e


class HueLight:
    """A light bound to one bridge session.

    Instances are owned by the session's cache; `Bridge.get_light` and
    `Bridge.get_all_lights` hand out the cached object itself.
    """

    def __init__(self, bridge: "Bridge", light_id: int, data: Dict[str, Any]):
        if not isinstance(data, dict):
            raise HueMalformedResponseError(f"Light {light_id} record is not an object")
        missing = [key for key in ("name", "modelid") if key not in data]
        if missing:
            raise HueMalformedResponseError(
                f"Light {light_id} record is missing {', '.join(missing)}"
            )
        self._bridge = bridge
        self.id = light_id
        self.name: str = data["name"]
        self.model_id: str = data["modelid"]
        self.color_type = classify_model(self.model_id)
        self.type: str = data.get("type", "")
        self.manufacturer: str = data.get("manufacturername", "")
        self.unique_id: str = data.get("uniqueid", "")
        self.sw_version: str = data.get("swversion", "")
        self.state = _parse_state(light_id, data)

    @classmethod
    def from_json(cls, bridge: "Bridge", light_id: int, data: Dict[str, Any]) -> "HueLight":
        """Build a light from its `/lights/<id>` record."""
        return cls(bridge, light_id, data)

    def __repr__(self) -> str:
        return (
            f"HueLight(id={self.id}, name={self.name!r}, model_id={self.model_id!r}, "
            f"color_type={self.color_type.name})"
        )

    @property
    def is_on(self) -> bool:
        return self.state.on

    @property
    def reachable(self) -> bool:
        return self.state.reachable

    @property
    def brightness(self) -> Optional[int]:
        return self.state.bri

    def refresh(self) -> None:
        """Re-read name and state from the bridge. The colour type is kept."""
        data = self._bridge._fetch_light(self.id)
        self.state = _parse_state(self.id, data)
        self.name = data.get("name", self.name)

    def _send_state(self, body: Dict[str, Any], transition: Optional[int] = None) -> bool:
        if transition is not None:
            if transition < 0:
                raise HueValidationError("Transition time must not be negative")
            body = {**body, "transitiontime": transition}
        items = self._bridge._put_light_state(self.id, body)
        success = all(isinstance(item, BridgeSuccess) for item in items)
        if success:
            update = {key: value for key, value in body.items() if key != "transitiontime"}
            self.state = self.state.model_copy(update=update)
        else:
            logger.warning(f"Light {self.id} rejected state change {body}")
        return success

    def turn_on(self, transition: Optional[int] = None) -> bool:
        return self._send_state({"on": True}, transition)

    def turn_off(self, transition: Optional[int] = None) -> bool:
        return self._send_state({"on": False}, transition)

    def set_brightness(self, bri: int, transition: Optional[int] = None) -> bool:
        """Set brightness (0-254). Zero switches the light off."""
        if not 0 <= bri <= 254:
            raise HueValidationError(f"Brightness must be 0-254, got {bri}")
        if bri == 0:
            return self.turn_off(transition)
        return self._send_state({"on": True, "bri": bri}, transition)

    def set_color_temperature(self, mired: int, transition: Optional[int] = None) -> bool:
        """Set colour temperature in mired (153-500)."""
        if self.color_type not in COLOR_TEMPERATURE_TYPES:
            raise HueValidationError(
                f"Light {self.id} ({self.model_id}) does not support color temperature"
            )
        if not 153 <= mired <= 500:
            raise HueValidationError(f"Color temperature must be 153-500, got {mired}")
        return self._send_state({"on": True, "ct": mired}, transition)
