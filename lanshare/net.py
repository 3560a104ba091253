"""LAN address discovery and bind probing for the share link."""

import ipaddress
import os
import socket
from typing import Iterator

import psutil

from . import config


_TUNNEL_IFACE_HINTS = (
    "vpn",
    "tun",
    "tap",
    "wireguard",
    "wg",
    "tailscale",
    "zerotier",
    "hamachi",
    "nordlynx",
    "utun",
    "ppp",
)

_LAN_IFACE_HINTS = ("ethernet", "wifi", "wi-fi", "wlan", "eth", "en")

LOOPBACK = "127.0.0.1"


def _env_flag(name: str, default: bool = False) -> bool:
    """Read a truthy/falsy env var."""
    raw = os.environ.get(name)
    if raw is None:
        return default
    value = raw.strip().lower()
    if value in {"1", "true", "yes", "on"}:
        return True
    if value in {"0", "false", "no", "off"}:
        return False
    return default


def _probe_route_ip() -> str:
    """Return the source address the default route would use, loopback on failure."""
    s = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
    try:
        # connect() on UDP only selects a route; nothing is sent.
        s.connect(("10.255.255.255", 1))
        return str(s.getsockname()[0] or LOOPBACK)
    except OSError:
        return LOOPBACK
    finally:
        s.close()


def _looks_like(name: str, hints: tuple) -> bool:
    val = str(name or "").lower()
    return bool(val) and any(h in val for h in hints)


def _rank_candidate(ip: str, iface_name: str) -> int:
    """Score an interface address; negative means skip it."""
    try:
        addr = ipaddress.ip_address(ip)
    except ValueError:
        return -1
    if addr.version != 4 or addr.is_loopback or addr.is_link_local:
        return -1
    if _looks_like(iface_name, _TUNNEL_IFACE_HINTS):
        return -1
    score = 50
    if addr.is_private:
        score += 60
    if _looks_like(iface_name, _LAN_IFACE_HINTS):
        score += 12
    return score


def _iter_lan_ipv4() -> Iterator[str]:
    """Yield IPv4 addresses of active non-tunnel interfaces, best first."""
    try:
        by_iface = psutil.net_if_addrs() or {}
        stats = psutil.net_if_stats() or {}
    except (OSError, psutil.Error):
        return

    ranked = []
    for iface_name, entries in by_iface.items():
        st = stats.get(iface_name)
        if st is not None and not st.isup:
            continue
        for entry in entries or []:
            if entry.family != socket.AF_INET or not entry.address:
                continue
            score = _rank_candidate(entry.address, iface_name)
            if score >= 0:
                ranked.append((score, entry.address))

    ranked.sort(key=lambda item: item[0], reverse=True)
    seen = set()
    for _score, ip in ranked:
        if ip not in seen:
            seen.add(ip)
            yield ip


def get_local_ip() -> str:
    """Return the LAN address to advertise in the share link.

    ``config.ADVERTISE_HOST`` wins when set. Otherwise the default route is
    probed; with ``LANSHARE_IGNORE_VPN=1`` tunnel interfaces are skipped in
    favour of a physical LAN address. Falls back to ``127.0.0.1``.
    """
    if config.ADVERTISE_HOST:
        return config.ADVERTISE_HOST
    route_ip = _probe_route_ip()
    if not _env_flag("LANSHARE_IGNORE_VPN"):
        return route_ip
    for ip in _iter_lan_ipv4():
        return ip
    return route_ip


def host_for_url(host: str) -> str:
    """Bracket IPv6 literals so they can be embedded in a URL authority."""
    value = str(host or "").strip()
    try:
        if ipaddress.ip_address(value).version == 6:
            return f"[{value}]"
    except ValueError:
        pass
    return value


def port_available(host: str, port: int) -> bool:
    """Return True when host/port can be bound right now."""
    try:
        with socket.socket(socket.AF_INET, socket.SOCK_STREAM) as s:
            s.bind((host, int(port)))
            return True
    except OSError:
        return False
