"""Decoding of the bridge's success/error response items."""

from typing import Any, List, Union

from pydantic import BaseModel, Field, ValidationError

from .hue_client import HueAPIResponseError, HueMalformedResponseError

LINK_BUTTON_NOT_PRESSED = 101


class BridgeErrorDetail(BaseModel):
    """Body of an error item: numeric type, resource address, description."""

    type: int
    address: str = ""
    description: str = ""


class BridgeSuccess(BaseModel):
    """`{"success": ...}` item. The payload shape depends on the request."""

    success: Any = Field(description="Success payload")


class BridgeErrorItem(BaseModel):
    """`{"error": {...}}` item."""

    error: BridgeErrorDetail

    @property
    def code(self) -> int:
        return self.error.type

    def to_exception(self) -> HueAPIResponseError:
        return HueAPIResponseError(
            self.error.type, self.error.description, self.error.address
        )


BridgeResponseItem = Union[BridgeSuccess, BridgeErrorItem]


def parse_response_item(raw: Any) -> BridgeResponseItem:
    """Decode one item of a bridge response array."""
    if not isinstance(raw, dict):
        raise HueMalformedResponseError(f"Unexpected response item: {raw!r}")
    try:
        if "success" in raw:
            return BridgeSuccess.model_validate(raw)
        if "error" in raw:
            return BridgeErrorItem.model_validate(raw)
    except ValidationError as e:
        raise HueMalformedResponseError(f"Invalid response item: {raw!r}") from e
    raise HueMalformedResponseError(f"Response item is neither success nor error: {raw!r}")


def parse_response(payload: Any) -> List[BridgeResponseItem]:
    """Decode the top-level array the bridge answers POST/PUT/DELETE with."""
    if not isinstance(payload, list) or not payload:
        raise HueMalformedResponseError(f"Expected a non-empty response array, got {payload!r}")
    return [parse_response_item(raw) for raw in payload]


def raise_for_error(payload: Any) -> Any:
    """Raise the first error item of a resource GET, else return the payload.

    Resource GETs answer with a plain object on success and with the usual
    error array on failure (e.g. type 1, unauthorized user).
    """
    if isinstance(payload, list) and payload:
        for item in parse_response(payload):
            if isinstance(item, BridgeErrorItem):
                raise item.to_exception()
    return payload
