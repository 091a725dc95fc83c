"""Hue bridge transport: error taxonomy, abstract transport and the httpx implementation."""

import logging
import socket
import time
from abc import ABC, abstractmethod
from typing import Any, List, Optional

import httpx

from .config import HueConfig, config

logger = logging.getLogger(__name__)


class HueError(Exception):
    """Base exception for all Hue-related errors."""

    pass


class HueConnectionError(HueError):
    """Network/connection related errors."""

    pass


class HueTimeoutError(HueConnectionError):
    """Request timeout errors."""

    pass


class HueValidationError(HueError):
    """Parameter validation errors."""

    pass


class HueNotAuthenticatedError(HueError):
    """An authenticated call was made on a session without a username."""

    pass


class HueAPIResponseError(HueError):
    """The bridge answered with an error item."""

    def __init__(self, code: int, description: str = "", address: str = ""):
        self.code = code
        self.description = description
        self.address = address
        super().__init__(f"Hue API error {code}: {description or 'Unknown error'}")


class HueLinkButtonNotPressedError(HueAPIResponseError):
    """Registration was refused because the link button was not pressed."""

    pass


class HueLightNotFoundError(HueError):
    """The requested light id does not exist on the bridge."""

    def __init__(self, light_id: int):
        self.light_id = light_id
        super().__init__(f"Light {light_id} not found on bridge")


class HueMalformedResponseError(HueError):
    """A response lacks the fields an operation needs."""

    pass


class HueDescriptorError(HueMalformedResponseError):
    """A bridge self-description could not be parsed."""

    pass


class HueTransport(ABC):
    """Wire operations the bridge client needs from its transport."""

    @abstractmethod
    def send_multicast(
        self, payload: str, address: str, port: int, timeout: int
    ) -> List[str]:
        """Send a datagram to a multicast group and collect replies for `timeout` seconds."""

    @abstractmethod
    def get_text(
        self, path: str, accept: str, body: str, host: str, port: int
    ) -> str:
        """GET a resource and return the raw response text."""

    @abstractmethod
    def get_json(self, path: str, body: Any, host: str, port: int) -> Any:
        """GET a resource and decode it as JSON."""

    @abstractmethod
    def post_json(self, path: str, body: Any, host: str, port: int) -> Any:
        """POST a JSON body and decode the JSON reply."""

    @abstractmethod
    def put_json(self, path: str, body: Any, host: str, port: int) -> Any:
        """PUT a JSON body and decode the JSON reply."""

    @abstractmethod
    def delete_json(self, path: str, body: Any, host: str, port: int) -> Any:
        """DELETE a resource and decode the JSON reply."""


class HttpHueTransport(HueTransport):
    """Blocking transport built on httpx with a UDP socket for SSDP."""

    def __init__(self, settings: Optional[HueConfig] = None):
        settings = settings or config
        self.timeout = httpx.Timeout(
            connect=settings.timeout_connect,
            read=settings.timeout_read,
            write=5.0,
            pool=5.0,
        )
        self.limits = httpx.Limits(
            max_connections=settings.max_connections,
            max_keepalive_connections=settings.max_keepalive_connections,
        )
        self._client: Optional[httpx.Client] = None

    def __enter__(self):
        """Context manager entry."""
        self._client = httpx.Client(timeout=self.timeout, limits=self.limits)
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        """Context manager exit."""
        self.close()

    def close(self) -> None:
        if self._client:
            self._client.close()
            self._client = None

    def _get_client(self) -> httpx.Client:
        if self._client is None:
            self._client = httpx.Client(timeout=self.timeout, limits=self.limits)
        return self._client

    def _request(
        self,
        method: str,
        path: str,
        host: str,
        port: int,
        body: Any = None,
        headers: Optional[dict] = None,
    ) -> httpx.Response:
        """Issue one request and map httpx failures onto the Hue taxonomy."""
        url = f"http://{host}:{port}{path}"
        logger.debug(f"{method} {url} body={body!r}")
        try:
            if isinstance(body, str):
                response = self._get_client().request(
                    method, url, content=body or None, headers=headers
                )
            else:
                response = self._get_client().request(
                    method, url, json=body or None, headers=headers
                )
            response.raise_for_status()
            return response
        except httpx.TimeoutException as e:
            raise HueTimeoutError(f"Request to {url} timed out: {e}") from e
        except httpx.HTTPStatusError as e:
            raise HueConnectionError(
                f"Bridge returned HTTP {e.response.status_code} for {url}"
            ) from e
        except httpx.RequestError as e:
            raise HueConnectionError(f"Request to {url} failed: {e}") from e

    def _decode(self, response: httpx.Response) -> Any:
        if not response.content.strip():
            return None
        try:
            return response.json()
        except ValueError as e:
            raise HueMalformedResponseError(
                f"Response from {response.request.url} is not valid JSON"
            ) from e

    def send_multicast(
        self, payload: str, address: str, port: int, timeout: int
    ) -> List[str]:
        replies = []
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM, socket.IPPROTO_UDP)
        try:
            sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 2)
            sock.sendto(payload.encode(), (address, port))
            deadline = time.monotonic() + timeout
            while True:
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    break
                sock.settimeout(remaining)
                try:
                    data, addr = sock.recvfrom(65507)
                except socket.timeout:
                    break
                logger.debug(f"Multicast reply from {addr[0]}")
                replies.append(data.decode(errors="replace"))
        except OSError as e:
            raise HueConnectionError(f"Multicast to {address}:{port} failed: {e}") from e
        finally:
            sock.close()
        return replies

    def get_text(
        self, path: str, accept: str, body: str, host: str, port: int
    ) -> str:
        response = self._request(
            "GET", path, host, port, body=body, headers={"Accept": accept}
        )
        return response.text

    def get_json(self, path: str, body: Any, host: str, port: int) -> Any:
        return self._decode(self._request("GET", path, host, port, body=body))

    def post_json(self, path: str, body: Any, host: str, port: int) -> Any:
        return self._decode(self._request("POST", path, host, port, body=body))

    def put_json(self, path: str, body: Any, host: str, port: int) -> Any:
        return self._decode(self._request("PUT", path, host, port, body=body))

    def delete_json(self, path: str, body: Any, host: str, port: int) -> Any:
        return self._decode(self._request("DELETE", path, host, port, body=body))
