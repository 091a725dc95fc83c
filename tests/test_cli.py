"""Unit tests for the hue-bridge command line."""

from unittest.mock import patch

import pytest

from conftest import BRIDGE_IP, BRIDGE_MAC, BRIDGE_PORT, BRIDGE_USERNAME
from hue_bridge import cli
from hue_bridge.bridge import BridgeIdentity
from hue_bridge.hue_client import HueConnectionError

IDENTITY = BridgeIdentity(ip=BRIDGE_IP, port=BRIDGE_PORT, mac=BRIDGE_MAC)


@pytest.fixture
def mock_transport_class():
    with patch("hue_bridge.cli.HttpHueTransport") as transport_class:
        yield transport_class


@pytest.fixture
def mock_finder():
    with patch("hue_bridge.cli.BridgeFinder") as finder_class:
        yield finder_class.return_value


@pytest.fixture
def mock_bridge():
    with patch("hue_bridge.cli.Bridge") as bridge_class:
        bridge = bridge_class.return_value
        bridge.ip = BRIDGE_IP
        bridge.port = BRIDGE_PORT
        yield bridge


class TestDiscover:
    """Test the discover command."""

    def test_prints_bridges(self, mock_transport_class, mock_finder, capsys):
        mock_finder.find_bridges.return_value = [IDENTITY]

        assert cli.main(["discover"]) == 0

        assert f"{BRIDGE_IP}:{BRIDGE_PORT} {BRIDGE_MAC}" in capsys.readouterr().out

    def test_no_bridges(self, mock_transport_class, mock_finder):
        mock_finder.find_bridges.return_value = []

        assert cli.main(["discover"]) == 1

    def test_transport_error(self, mock_transport_class, mock_finder):
        mock_finder.find_bridges.side_effect = HueConnectionError("no route")

        assert cli.main(["discover"]) == 1


class TestPair:
    """Test the pair command."""

    @patch("hue_bridge.cli.time.sleep")
    @patch("builtins.input", return_value="")
    def test_pair_with_retry(self, mock_input, mock_sleep, mock_transport_class, mock_bridge, capsys):
        mock_bridge.request_username.side_effect = ["", BRIDGE_USERNAME]

        result = cli.main(["pair", "--ip", BRIDGE_IP, "--attempts", "3", "--interval", "0.5"])

        assert result == 0
        assert mock_bridge.request_username.call_count == 2
        mock_sleep.assert_called_once_with(0.5)
        out = capsys.readouterr().out
        assert f"HUE_BRIDGE_IP={BRIDGE_IP}" in out
        assert f"HUE_USERNAME={BRIDGE_USERNAME}" in out

    @patch("hue_bridge.cli.time.sleep")
    @patch("builtins.input", return_value="")
    def test_pair_gives_up(self, mock_input, mock_sleep, mock_transport_class, mock_bridge):
        mock_bridge.request_username.return_value = ""

        assert cli.main(["pair", "--ip", BRIDGE_IP, "--attempts", "2"]) == 1
        assert mock_bridge.request_username.call_count == 2
        assert mock_sleep.call_count == 1

    @patch("builtins.input", return_value="")
    def test_pair_discovers_bridge(self, mock_input, mock_transport_class, mock_finder, mock_bridge):
        mock_finder.find_bridges.return_value = [IDENTITY]
        mock_bridge.request_username.return_value = BRIDGE_USERNAME

        with patch.object(cli.config, "bridge_ip", ""):
            assert cli.main(["pair"]) == 0

        mock_finder.find_bridges.assert_called_once()

    @patch("builtins.input", side_effect=["7", "2", ""])
    def test_choose_between_bridges(self, mock_input, capsys):
        second = BridgeIdentity(ip="192.168.2.120", port=80, mac="00:17:88:aa:bb:cc")

        assert cli._choose_bridge([IDENTITY, second]) == second
        assert "Invalid selection" in capsys.readouterr().out

    @patch("builtins.input", side_effect=KeyboardInterrupt)
    def test_cancelled(self, mock_input, mock_transport_class, mock_bridge):
        assert cli.main(["pair", "--ip", BRIDGE_IP]) == 1


def test_requires_command():
    with pytest.raises(SystemExit):
        cli.main([])
