"""Lookup of the machine's network interfaces and their IPv4 addresses."""

from __future__ import annotations

import enum
import ipaddress
import socket
from typing import Iterator

import psutil

from chatbye.network import AddressEntry

_WIFI_MARKERS = ("wlan", "wi-fi", "wlp", "wl")


class InterfaceFilter(enum.Enum):
    """Which kind of interfaces to include."""

    ALL_INTERFACES = "all"
    ONLY_WIFI = "wifi"
    ONLY_LAN = "lan"


def is_wifi_name(name: str) -> bool:
    """Guess from an interface name whether it is a wireless interface."""
    lowered = name.lower()
    return any(marker in lowered for marker in _WIFI_MARKERS)


def _is_loopback_address(address: str) -> bool:
    try:
        return ipaddress.ip_address(address.split("%")[0]).is_loopback
    except ValueError:
        return False


def _active_interfaces() -> Iterator[tuple[str, list]]:
    """Yield the interfaces that are up, running and not loopback."""
    addresses = psutil.net_if_addrs()
    stats = psutil.net_if_stats()
    for name, entries in addresses.items():
        stat = stats.get(name)
        if stat is None or not stat.isup:
            continue
        flags = {flag for flag in getattr(stat, "flags", "").split(",") if flag}
        if flags and "running" not in flags:
            continue
        if "loopback" in flags or any(
            entry.family == socket.AF_INET and _is_loopback_address(entry.address)
            for entry in entries
        ):
            continue
        yield name, entries


def _accepts(name: str, filter: InterfaceFilter) -> bool:
    wifi = is_wifi_name(name)
    if filter is InterfaceFilter.ONLY_WIFI:
        return wifi
    if filter is InterfaceFilter.ONLY_LAN:
        return not wifi
    return True


def network_entries(filter: InterfaceFilter) -> list[AddressEntry]:
    """Return the IPv4 address entries of active interfaces matching the filter."""
    return [
        AddressEntry(ip=entry.address, netmask=entry.netmask, broadcast=entry.broadcast)
        for name, entries in _active_interfaces()
        if _accepts(name, filter)
        for entry in entries
        if entry.family == socket.AF_INET
    ]


def ip_addresses(filter: InterfaceFilter) -> list[str]:
    """Return the IPv4 addresses of active interfaces matching the filter."""
    return [entry.ip for entry in network_entries(filter)]


def find_interface_for_host(host: str) -> str:
    """Return the name of the interface that owns the given address."""
    for name, entries in psutil.net_if_addrs().items():
        for entry in entries:
            if entry.address.split("%")[0] == host:
                return name
    raise LookupError(f"no interface has address {host}")