# Tests for startup banner address discovery.
# Created: 2026-10-12

import socket
from types import SimpleNamespace
from unittest.mock import patch

from pocketgallery.network import banner_url, get_local_ip


def _addr(family, address):
    return SimpleNamespace(family=family, address=address)


class TestGetLocalIP:
    @patch("pocketgallery.network.psutil.net_if_addrs")
    def test_first_non_loopback_ipv4(self, mock_addrs):
        mock_addrs.return_value = {
            "lo": [_addr(socket.AF_INET, "127.0.0.1")],
            "eth0": [
                _addr(socket.AF_INET6, "fe80::1"),
                _addr(socket.AF_INET, "192.168.1.20"),
            ],
            "wlan0": [_addr(socket.AF_INET, "10.0.0.5")],
        }
        assert get_local_ip() == "192.168.1.20"

    @patch("pocketgallery.network.psutil.net_if_addrs")
    def test_falls_back_to_localhost(self, mock_addrs):
        mock_addrs.return_value = {"lo": [_addr(socket.AF_INET, "127.0.0.1")]}
        assert get_local_ip() == "localhost"

    @patch("pocketgallery.network.psutil.net_if_addrs", side_effect=OSError("boom"))
    def test_enumeration_error(self, _mock):
        assert get_local_ip() == "localhost"


class TestBannerURL:
    @patch("pocketgallery.network.get_local_ip", return_value="192.168.1.20")
    def test_all_interfaces(self, _mock):
        assert banner_url(19992) == "http://192.168.1.20:19992"

    def test_explicit_host(self):
        assert banner_url(8080, host="127.0.0.1") == "http://127.0.0.1:8080"
