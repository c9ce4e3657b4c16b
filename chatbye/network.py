"""TCP client connection, length-prefixed framing and chat server port scanning."""

from __future__ import annotations

import enum
import ipaddress
import itertools
import socket
import struct
import threading
import time
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, replace
from typing import Callable, Optional

SCAN_PORTS = range(50500, 50515)
MAX_FRAME_SIZE = 0xFFFF
_HEADER = struct.Struct(">H")

Target = tuple[str, int]
ProgressCallback = Callable[[int, int], None]
Probe = Callable[[str, int, float], bool]


class ScanMode(enum.Enum):
    """How wide a port scan reaches."""

    FULL_SCAN = "full_scan"
    SINGLE_IP_ONLY = "single_ip_only"


class HostBindingMode(enum.Enum):
    """Whether the server port was chosen by the user or found dynamically."""

    FIXED_PORT = "fixed_port"
    DYNAMIC_PORT = "dynamic_port"


@dataclass(frozen=True)
class AddressEntry:
    """An interface address with its netmask and broadcast address."""

    ip: str
    netmask: Optional[str] = None
    broadcast: Optional[str] = None

    @property
    def is_ipv4(self) -> bool:
        try:
            ipaddress.IPv4Address(self.ip)
        except ValueError:
            return False
        return True

    def prefix_length(self) -> int:
        """Return the netmask's prefix length, or -1 if it is missing or invalid."""
        if not self.netmask:
            return -1
        try:
            return ipaddress.IPv4Network(f"0.0.0.0/{self.netmask}").prefixlen
        except ValueError:
            return -1


def encode_frame(payload: bytes) -> bytes:
    """Prefix a payload with its length as a big-endian 16-bit integer."""
    if not payload:
        raise ValueError("cannot send an empty message")
    if len(payload) > MAX_FRAME_SIZE:
        raise ValueError(f"message of {len(payload)} bytes exceeds {MAX_FRAME_SIZE} bytes")
    return _HEADER.pack(len(payload)) + payload


class FrameDecoder:
    """Reassembles length-prefixed frames from a byte stream."""

    def __init__(self) -> None:
        self._buffer = bytearray()

    def feed(self, data: bytes) -> list[bytes]:
        """Add received bytes and return every frame now complete."""
        self._buffer.extend(data)
        frames: list[bytes] = []
        while len(self._buffer) >= _HEADER.size:
            (size,) = _HEADER.unpack_from(self._buffer)
            end = _HEADER.size + size
            if len(self._buffer) < end:
                break
            frames.append(bytes(self._buffer[_HEADER.size:end]))
            del self._buffer[:end]
        return frames


def generate_targets(entry: AddressEntry, mode: ScanMode) -> list[Target]:
    """List the (host, port) pairs to probe for a running chat server."""
    if not entry.is_ipv4:
        return []

    if mode is ScanMode.SINGLE_IP_ONLY:
        ip = str(ipaddress.IPv4Address(entry.ip))
        return [(ip, port) for port in SCAN_PORTS]

    prefix = entry.prefix_length()
    # Networks wider than /24 are narrowed to the address's own /24.
    if prefix < 24:
        prefix = 24

    network = ipaddress.IPv4Network(f"{entry.ip}/{prefix}", strict=False)
    first = int(network.network_address) + 1
    last = int(network.broadcast_address)
    return [
        (str(ipaddress.IPv4Address(address)), port)
        for address in range(first, last)
        for port in SCAN_PORTS
    ]


def probe_port(host: str, port: int, timeout: float) -> bool:
    """Return True if a TCP connection to host:port succeeds within timeout."""
    try:
        with socket.create_connection((host, port), timeout=timeout):
            return True
    except OSError:
        return False


class NetworkManager:
    """Client side of the chat connection, with server port scanning."""

    def __init__(
        self,
        *,
        connect_timeout: float = 5.0,
        probe_timeout: float = 0.03,
        retry_delay: float = 0.5,
        max_workers: int = 64,
        probe: Probe = probe_port,
        on_progress: Optional[ProgressCallback] = None,
    ) -> None:
        self.connect_timeout = connect_timeout
        self.probe_timeout = probe_timeout
        self.retry_delay = retry_delay
        self.max_workers = max_workers
        self.on_progress = on_progress
        self._probe = probe
        self._sock: Optional[socket.socket] = None
        self._decoder = FrameDecoder()
        self._found = threading.Event()
        self._lock = threading.Lock()
        self.entry: Optional[AddressEntry] = None
        self.host: Optional[str] = None
        self.port: Optional[int] = None

    def __enter__(self) -> "NetworkManager":
        return self

    def __exit__(self, *exc_info) -> None:
        self.disconnect()

    def connect(self, entry: AddressEntry, port: int) -> None:
        """Connect to the server at entry's address; does nothing if already connected."""
        if self.is_connected():
            return
        self.entry, self.host, self.port = entry, entry.ip, port
        try:
            sock = socket.create_connection((entry.ip, port), timeout=self.connect_timeout)
        except OSError as exc:
            raise ConnectionError(f"cannot connect to {entry.ip}:{port}: {exc}") from exc
        sock.settimeout(None)
        self._sock = sock
        self._decoder = FrameDecoder()

    def is_connected(self) -> bool:
        return self._sock is not None

    def send(self, payload: bytes) -> bool:
        """Send one framed message; return False if there is no connection."""
        if self._sock is None:
            return False
        self._sock.sendall(encode_frame(payload))
        return True

    def receive(self) -> list[bytes]:
        """Block until at least one whole message arrives and return all complete ones."""
        if self._sock is None:
            raise ConnectionError("not connected")
        while True:
            chunk = self._sock.recv(4096)
            if not chunk:
                self.disconnect()
                raise ConnectionError("connection closed by server")
            messages = self._decoder.feed(chunk)
            if messages:
                return messages

    def disconnect(self) -> None:
        """Close the connection if one is open."""
        sock, self._sock = self._sock, None
        if sock is None:
            return
        try:
            sock.shutdown(socket.SHUT_RDWR)
        except OSError:
            pass
        sock.close()
        self._decoder = FrameDecoder()
        self._found.clear()

    def stop_scan(self) -> None:
        """Make a running scan finish without a result."""
        self._found.set()

    def scan(
        self,
        entry: AddressEntry,
        port: int,
        mode: ScanMode,
        max_attempts: int,
    ) -> Optional[tuple[AddressEntry, int]]:
        """Search for a listening server.

        Returns the entry carrying the server's address together with its port,
        or None when every attempt failed or the scan was stopped.
        """
        self._found.clear()
        self.entry, self.host, self.port = entry, entry.ip, port

        attempt = 0
        while not self._found.is_set() and attempt < max_attempts:
            attempt += 1
            targets = generate_targets(entry, mode)
            hit = self._scan_once(targets, max_attempts * len(targets))
            if hit is not None:
                host, found_port = hit
                self.host, self.port = host, found_port
                self.entry = replace(entry, ip=host)
                if self.is_connected():
                    return None
                return self.entry, found_port
            time.sleep(self.retry_delay)
        return None

    def _scan_once(self, targets: list[Target], total: int) -> Optional[Target]:
        counter = itertools.count(1)
        counter_lock = threading.Lock()

        def probe_target(target: Target) -> Optional[Target]:
            with counter_lock:
                progress = next(counter)
            if self.on_progress is not None:
                self.on_progress(progress, total)
            if self._found.is_set():
                return None
            host, port = target
            if not self._probe(host, port, self.probe_timeout):
                return None
            with self._lock:
                if self._found.is_set():
                    return None
                self._found.set()
                return target

        with ThreadPoolExecutor(max_workers=self.max_workers) as pool:
            results = list(pool.map(probe_target, targets))
        return next((result for result in results if result is not None), None)