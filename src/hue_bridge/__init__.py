"""Philips Hue bridge client - discovery, pairing and cached light sessions."""

from .bridge import Bridge, BridgeIdentity
from .credentials import CredentialStore
from .descriptor import normalize_mac, parse_description
from .discovery import BridgeFinder
from .hue_client import (
    HttpHueTransport,
    HueAPIResponseError,
    HueConnectionError,
    HueDescriptorError,
    HueError,
    HueLightNotFoundError,
    HueLinkButtonNotPressedError,
    HueMalformedResponseError,
    HueNotAuthenticatedError,
    HueTimeoutError,
    HueTransport,
    HueValidationError,
)
from .light import ColorType, HueLight, LightState, classify_model, picture_of_model

__version__ = "1.0.0"
__description__ = "Client library for discovering and controlling Philips Hue bridges"

__all__ = [
    "Bridge",
    "BridgeFinder",
    "BridgeIdentity",
    "ColorType",
    "CredentialStore",
    "HttpHueTransport",
    "HueLight",
    "HueTransport",
    "LightState",
    "classify_model",
    "normalize_mac",
    "parse_description",
    "picture_of_model",
    "HueError",
    "HueAPIResponseError",
    "HueConnectionError",
    "HueDescriptorError",
    "HueLightNotFoundError",
    "HueLinkButtonNotPressedError",
    "HueMalformedResponseError",
    "HueNotAuthenticatedError",
    "HueTimeoutError",
    "HueValidationError",
]
