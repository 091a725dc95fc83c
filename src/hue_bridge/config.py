"""Configuration management for the Hue bridge client."""

import ipaddress
import os

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

load_dotenv()


class HueConfig(BaseModel):
    """Configuration for Hue bridge discovery and sessions."""

    bridge_ip: str = Field(
        default="", description="IP address of the Hue bridge (empty = discover)"
    )
    bridge_port: int = Field(default=80, ge=1, le=65535, description="Bridge port")
    username: str = Field(default="", description="Hue bridge username")
    app_name: str = Field(
        default="HuePlusPlus", description="Application part of the devicetype"
    )
    device_name: str = Field(
        default="User", description="Device part of the devicetype"
    )
    log_level: str = Field(default="INFO", description="Logging level")
    timeout_connect: float = Field(
        default=5.0, ge=1.0, le=30.0, description="Connection timeout in seconds"
    )
    timeout_read: float = Field(
        default=10.0, ge=1.0, le=60.0, description="Read timeout in seconds"
    )
    max_connections: int = Field(
        default=10, ge=1, le=50, description="Maximum HTTP connections"
    )
    max_keepalive_connections: int = Field(
        default=5, ge=1, le=20, description="Maximum keepalive connections"
    )
    discovery_timeout: int = Field(
        default=5, ge=1, le=120, description="SSDP response window in seconds"
    )

    @field_validator("bridge_ip")
    @classmethod
    def validate_ip(cls, v):
        """Validate IP address format, allowing an unset address."""
        if not v:
            return v
        try:
            ipaddress.ip_address(v)
            return v
        except ValueError as e:
            raise ValueError(f"Invalid IP address: {v}") from e

    @field_validator("app_name", "device_name")
    @classmethod
    def validate_devicetype_part(cls, v):
        """Validate a devicetype part contains no separator."""
        if not v or "#" in v:
            raise ValueError("Devicetype parts must be non-empty and contain no '#'")
        return v

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v):
        """Validate log level."""
        valid_levels = {"DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"}
        if v.upper() not in valid_levels:
            raise ValueError(f"Log level must be one of: {valid_levels}")
        return v.upper()

    @classmethod
    def from_env(cls) -> "HueConfig":
        """Create configuration from environment variables."""
        return cls(
            bridge_ip=os.getenv("HUE_BRIDGE_IP", ""),
            bridge_port=int(os.getenv("HUE_BRIDGE_PORT", "80")),
            username=os.getenv("HUE_USERNAME", ""),
            app_name=os.getenv("HUE_APP_NAME", "HuePlusPlus"),
            device_name=os.getenv("HUE_DEVICE_NAME", "User"),
            log_level=os.getenv("LOG_LEVEL", "INFO"),
            timeout_connect=float(os.getenv("HUE_TIMEOUT_CONNECT", "5.0")),
            timeout_read=float(os.getenv("HUE_TIMEOUT_READ", "10.0")),
            max_connections=int(os.getenv("HUE_MAX_CONNECTIONS", "10")),
            max_keepalive_connections=int(os.getenv("HUE_MAX_KEEPALIVE", "5")),
            discovery_timeout=int(os.getenv("HUE_DISCOVERY_TIMEOUT", "5")),
        )

    @property
    def devicetype(self) -> str:
        """Get the devicetype sent when registering a new username."""
        return f"{self.app_name}#{self.device_name}"


# Global configuration instance
config = HueConfig.from_env()


# SSDP constants
SSDP_ADDRESS = "239.255.255.250"
SSDP_PORT = 1900
DESCRIPTION_PATH = "/description.xml"
BRIDGE_MARKER = "IpBridge"
