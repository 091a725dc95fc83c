"""Command line entry point: discover bridges and pair with one."""

import argparse
import logging
import sys
import time
from typing import List, Optional

from .bridge import Bridge, BridgeIdentity
from .config import config
from .discovery import BridgeFinder
from .hue_client import HttpHueTransport, HueError

logger = logging.getLogger(__name__)


def _choose_bridge(bridges: List[BridgeIdentity]) -> Optional[BridgeIdentity]:
    if len(bridges) == 1:
        return bridges[0]

    print("🔍 Multiple bridges found:")
    for i, bridge in enumerate(bridges):
        print(f"  {i + 1}. {bridge.ip}:{bridge.port} ({bridge.mac})")
    while True:
        try:
            idx = int(input(f"Select bridge (1-{len(bridges)}): ")) - 1
        except ValueError:
            print("❌ Invalid selection. Please try again.")
            continue
        if 0 <= idx < len(bridges):
            return bridges[idx]
        print("❌ Invalid selection. Please try again.")


def discover(transport: HttpHueTransport) -> int:
    bridges = BridgeFinder(transport).find_bridges()
    if not bridges:
        print("❌ No Hue bridges found on the network.")
        return 1
    for bridge in bridges:
        print(f"{bridge.ip}:{bridge.port} {bridge.mac}")
    return 0


def pair(args: argparse.Namespace, transport: HttpHueTransport) -> int:
    if args.ip:
        bridge = Bridge(args.ip, args.port, transport=transport)
    else:
        bridges = BridgeFinder(transport).find_bridges()
        if not bridges:
            print("❌ No Hue bridges found on the network.")
            return 1
        identity = _choose_bridge(bridges)
        bridge = Bridge(identity.ip, identity.port, transport=transport)

    print(f"🔗 Pairing with bridge at {bridge.ip}:{bridge.port}")
    input("Press the LINK BUTTON on the bridge, then press ENTER: ")

    username = ""
    for attempt in range(args.attempts):
        username = bridge.request_username()
        if username:
            break
        if attempt < args.attempts - 1:
            print(f"   Retrying in {args.interval} seconds... (attempt {attempt + 1}/{args.attempts})")
            time.sleep(args.interval)

    if not username:
        print("❌ Link button was not pressed in time.")
        return 1

    print("✅ Paired. Add these lines to your .env file:")
    print(f"HUE_BRIDGE_IP={bridge.ip}")
    print(f"HUE_BRIDGE_PORT={bridge.port}")
    print(f"HUE_USERNAME={username}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="hue-bridge", description="Discover and pair with Philips Hue bridges"
    )
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("discover", help="List bridges on the local network")

    pair_parser = sub.add_parser("pair", help="Register a new username on a bridge")
    pair_parser.add_argument("--ip", default=config.bridge_ip or None, help="Bridge IP (default: discover)")
    pair_parser.add_argument("--port", type=int, default=config.bridge_port, help="Bridge port")
    pair_parser.add_argument("--attempts", type=int, default=6, help="Registration attempts")
    pair_parser.add_argument("--interval", type=float, default=5.0, help="Seconds between attempts")
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, config.log_level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        with HttpHueTransport(config) as transport:
            if args.command == "discover":
                return discover(transport)
            return pair(args, transport)
    except KeyboardInterrupt:
        print("\n❌ Cancelled by user.")
        return 1
    except HueError as e:
        logger.error(f"Bridge error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
