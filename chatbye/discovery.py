"""Finding a chat server on the local network by UDP multicast."""

from __future__ import annotations

import json
import socket
import threading
import time
from typing import Any, Optional

from chatbye.network import AddressEntry, HostBindingMode

DISCOVERY_REQUEST = b"SERVER_DISCOVERY"
DISCOVERY_GROUP = "239.255.43.21"
DISCOVERY_PORT = 50501
_REQUIRED_FIELDS = ("message", "host_address", "port")

Discovered = tuple[AddressEntry, int, HostBindingMode]


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def _to_port(value: Any) -> int:
    if isinstance(value, bool):
        raise ValueError(f"invalid port in discovery reply: {value!r}")
    if isinstance(value, int):
        port = value
    elif isinstance(value, str):
        try:
            port = int(value.strip())
        except ValueError as exc:
            raise ValueError(f"invalid port in discovery reply: {value!r}") from exc
    else:
        raise ValueError(f"invalid port in discovery reply: {value!r}")
    if not 0 <= port <= 0xFFFF:
        raise ValueError(f"port out of range in discovery reply: {port}")
    return port


def parse_discovery_reply(datagram: bytes) -> tuple[AddressEntry, int]:
    """Decode a server's JSON reply into its address entry and port."""
    try:
        document = json.loads(datagram)
    except ValueError as exc:
        raise ValueError(f"malformed discovery reply: {exc}") from exc
    if not isinstance(document, dict):
        raise ValueError("discovery reply is not a JSON object")
    missing = [field for field in _REQUIRED_FIELDS if field not in document]
    if missing:
        raise ValueError(f"discovery reply lacks fields: {', '.join(missing)}")

    port = _to_port(document["port"])
    entry = AddressEntry(
        ip=_text(document["host_address"]),
        netmask=_text(document.get("netmask")) or None,
        broadcast=_text(document.get("broadcast")) or None,
    )
    return entry, port


class DiscoveryManager:
    """Sends discovery requests and waits for a server to answer."""

    def __init__(
        self,
        *,
        group: str = DISCOVERY_GROUP,
        discovery_port: int = DISCOVERY_PORT,
        interval: float = 0.5,
    ) -> None:
        self.group = group
        self.discovery_port = discovery_port
        self.interval = interval
        self._sock: Optional[socket.socket] = None
        self._lock = threading.Lock()
        self._active = False
        self._stopped = threading.Event()
        self.entry: Optional[AddressEntry] = None
        self.host: Optional[str] = None
        self.port: Optional[int] = None
        self.mode: Optional[HostBindingMode] = None

    def discover(
        self,
        entry: AddressEntry,
        port: int,
        mode: HostBindingMode,
        timeout: float = 2.0,
    ) -> Optional[Discovered]:
        """Look for a server.

        With a fixed port the given entry and port are taken as found at once.
        Otherwise requests are sent until a server replies or the timeout
        passes; None means discovery failed.
        """
        with self._lock:
            if self._active:
                raise RuntimeError("discovery is already running")
            self._active = True
            self._stopped.clear()

        self.entry, self.host, self.port, self.mode = entry, entry.ip, port, mode
        try:
            if mode is HostBindingMode.FIXED_PORT:
                return entry, port, mode
            self._open_socket()
            return self._listen(timeout)
        finally:
            self.stop()

    def send_request(self) -> bool:
        """Send one discovery request; return whether it went out."""
        sock = self._sock
        if sock is None:
            return False
        try:
            sock.sendto(DISCOVERY_REQUEST, (self.group, self.discovery_port))
        except OSError:
            return False
        return True

    def stop(self) -> None:
        """End a running discovery and release the socket."""
        self._stopped.set()
        with self._lock:
            self._active = False
            sock, self._sock = self._sock, None
        if sock is not None:
            sock.close()

    def _open_socket(self) -> None:
        sock = socket.socket(socket.AF_INET, socket.SOCK_DGRAM)
        sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
        sock.bind(("0.0.0.0", 0))
        sock.setsockopt(socket.IPPROTO_IP, socket.IP_MULTICAST_TTL, 1)
        with self._lock:
            old, self._sock = self._sock, sock
        if old is not None:
            old.close()

    def _listen(self, timeout: float) -> Optional[Discovered]:
        deadline = time.monotonic() + timeout
        next_send = time.monotonic()
        while not self._stopped.is_set():
            now = time.monotonic()
            if now >= deadline:
                return None
            if now >= next_send:
                self.send_request()
                next_send = now + self.interval
            sock = self._sock
            if sock is None:
                return None
            sock.settimeout(max(0.001, min(deadline, next_send) - now))
            try:
                datagram, _ = sock.recvfrom(65535)
            except socket.timeout:
                continue
            except OSError:
                # Unreachable-port notices and the like; keep waiting.
                continue
            try:
                found_entry, found_port = parse_discovery_reply(datagram)
            except ValueError:
                continue
            self.entry, self.host, self.port = found_entry, found_entry.ip, found_port
            self.mode = HostBindingMode.DYNAMIC_PORT
            return found_entry, found_port, HostBindingMode.DYNAMIC_PORT
        return None