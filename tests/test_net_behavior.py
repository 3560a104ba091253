import os
import socket
import unittest
from types import SimpleNamespace
from unittest.mock import patch

from lanshare import net


class _FakeSocket:
    def __init__(self, *, ip: str = "192.168.10.55", raise_connect: bool = False, raise_bind: bool = False):
        """Initialize _FakeSocket state and collaborator references."""
        self._ip = ip
        self._raise_connect = raise_connect
        self._raise_bind = raise_bind
        self.closed = False
        self.connected_to = None
        self.bound_to = None

    def connect(self, addr):
        self.connected_to = addr
        if self._raise_connect:
            raise OSError("connect failed")

    def getsockname(self):
        return (self._ip, 8989)

    def bind(self, addr):
        self.bound_to = addr
        if self._raise_bind:
            raise OSError("address already in use")

    def close(self):
        self.closed = True

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()
        return False


def _addr(ip: str):
    return SimpleNamespace(family=socket.AF_INET, address=ip)


class NetBehaviorTests(unittest.TestCase):
    def setUp(self):
        self._advertise = patch.object(net.config, "ADVERTISE_HOST", "")
        self._advertise.start()

    def tearDown(self):
        self._advertise.stop()

    def test_get_local_ip_returns_route_address(self):
        """Validate scenario: the default-route probe address is advertised."""
        fake = _FakeSocket(ip="10.0.0.42")
        with patch.dict(os.environ, {"LANSHARE_IGNORE_VPN": "0"}, clear=False), patch(
            "lanshare.net.socket.socket", return_value=fake
        ):
            ip = net.get_local_ip()
        self.assertEqual(ip, "10.0.0.42")
        self.assertEqual(fake.connected_to, ("10.255.255.255", 1))
        self.assertTrue(fake.closed)

    def test_get_local_ip_falls_back_to_loopback_on_error(self):
        fake = _FakeSocket(raise_connect=True)
        with patch.dict(os.environ, {"LANSHARE_IGNORE_VPN": "0"}, clear=False), patch(
            "lanshare.net.socket.socket", return_value=fake
        ):
            ip = net.get_local_ip()
        self.assertEqual(ip, "127.0.0.1")
        self.assertTrue(fake.closed)

    def test_advertise_host_overrides_discovery(self):
        with patch.object(net.config, "ADVERTISE_HOST", "files.lan"), patch(
            "lanshare.net.socket.socket"
        ) as msock:
            self.assertEqual(net.get_local_ip(), "files.lan")
        msock.assert_not_called()

    def test_ignore_vpn_prefers_lan_interface(self):
        fake = _FakeSocket(ip="100.64.2.10")
        addrs = {
            "NordLynx": [_addr("100.64.2.10")],
            "Ethernet": [_addr("192.168.1.77")],
            "lo": [_addr("127.0.0.1")],
        }
        stats = {name: SimpleNamespace(isup=True) for name in addrs}
        with patch.dict(os.environ, {"LANSHARE_IGNORE_VPN": "1"}, clear=False), patch(
            "lanshare.net.socket.socket", return_value=fake
        ), patch("lanshare.net.psutil.net_if_addrs", return_value=addrs), patch(
            "lanshare.net.psutil.net_if_stats", return_value=stats
        ):
            self.assertEqual(net.get_local_ip(), "192.168.1.77")

    def test_ignore_vpn_skips_down_interfaces_and_keeps_route_ip(self):
        fake = _FakeSocket(ip="100.64.10.9")
        addrs = {"tailscale0": [_addr("100.64.10.9")], "eth1": [_addr("192.168.5.5")]}
        stats = {"tailscale0": SimpleNamespace(isup=True), "eth1": SimpleNamespace(isup=False)}
        with patch.dict(os.environ, {"LANSHARE_IGNORE_VPN": "1"}, clear=False), patch(
            "lanshare.net.socket.socket", return_value=fake
        ), patch("lanshare.net.psutil.net_if_addrs", return_value=addrs), patch(
            "lanshare.net.psutil.net_if_stats", return_value=stats
        ):
            self.assertEqual(net.get_local_ip(), "100.64.10.9")

    def test_host_for_url_brackets_ipv6(self):
        self.assertEqual(net.host_for_url("192.168.1.5"), "192.168.1.5")
        self.assertEqual(net.host_for_url("fe80::1"), "[fe80::1]")
        self.assertEqual(net.host_for_url("files.lan"), "files.lan")

    def test_port_available_reports_bind_result(self):
        ok = _FakeSocket()
        with patch("lanshare.net.socket.socket", return_value=ok):
            self.assertTrue(net.port_available("0.0.0.0", 8989))
        self.assertEqual(ok.bound_to, ("0.0.0.0", 8989))

        busy = _FakeSocket(raise_bind=True)
        with patch("lanshare.net.socket.socket", return_value=busy):
            self.assertFalse(net.port_available("0.0.0.0", 8989))


if __name__ == "__main__":
    unittest.main()
