"""Address parsing, path joining and local listener helpers."""

from __future__ import annotations

import ipaddress
import os
import posixpath
import socket
import sys
import tempfile
from dataclasses import dataclass
from typing import Any, Optional, Union

IPAddress = Union[ipaddress.IPv4Address, ipaddress.IPv6Address]


@dataclass(frozen=True)
class TCPAddress:
    """A TCP endpoint; ``ip`` is None when the host part was empty."""

    ip: Optional[IPAddress]
    port: int

    network = "tcp"

    def __str__(self) -> str:
        host = "" if self.ip is None else str(self.ip)
        if ":" in host:
            host = f"[{host}]"
        return f"{host}:{self.port}"


@dataclass(frozen=True)
class UnixAddress:
    """A Unix domain socket path."""

    name: str
    net: str = "unix"

    @property
    def network(self) -> str:
        return self.net

    def __str__(self) -> str:
        return self.name


Address = Union[TCPAddress, UnixAddress]


def has_elem(seq: Any, elem: Any) -> bool:
    """True if ``seq`` is a list or tuple containing ``elem``."""
    if isinstance(seq, (list, tuple)):
        return any(item == elem for item in seq)
    return False


def split2(s: str, sep: str) -> Optional[tuple[str, str]]:
    """Split ``s`` at the first ``sep``; None if ``sep`` does not occur."""
    head, found, tail = s.partition(sep)
    if not found:
        return None
    return head, tail


def _parse_port(text: str) -> int:
    if text == "":
        return 0
    if text.isascii() and text.isdigit():
        port = int(text)
        if port > 0xFFFF:
            raise ValueError(f"invalid port {text!r}")
        return port
    return socket.getservbyname(text, "tcp")


def _resolve_tcp(network: str, endpoint: str) -> Optional[TCPAddress]:
    host, sep, port_text = endpoint.rpartition(":")
    if not sep:
        return None
    if host.startswith("[") and host.endswith("]"):
        host = host[1:-1]
    elif ":" in host:
        return None
    try:
        port = _parse_port(port_text)
        if host == "":
            return TCPAddress(None, port)
        try:
            ip: IPAddress = ipaddress.ip_address(host)
        except ValueError:
            family = {"tcp4": socket.AF_INET, "tcp6": socket.AF_INET6}.get(network, socket.AF_UNSPEC)
            infos = socket.getaddrinfo(host, None, family, socket.SOCK_STREAM)
            candidates = [ipaddress.ip_address(info[4][0]) for info in infos]
            if not candidates:
                return None
            v4 = [c for c in candidates if c.version == 4]
            ip = v4[0] if v4 else candidates[0]
    except (OSError, ValueError, UnicodeError):
        return None
    if network == "tcp4" and ip.version != 4:
        return None
    if network == "tcp6" and ip.version != 6:
        return None
    return TCPAddress(ip, port)


def parse_scheme_address(addr: str) -> Optional[Address]:
    """Parse ``tcp://host:port``, ``tcp4://``, ``tcp6://`` or ``unix://path``."""
    parts = split2(addr, "://")
    if parts is None:
        return None
    network, endpoint = parts
    if network in ("tcp", "tcp4", "tcp6"):
        return _resolve_tcp(network, endpoint)
    if network == "unix":
        return UnixAddress(endpoint, network)
    return None


def convert_to_scheme_address(addr: Any) -> str:
    """Render an address back into its scheme form, or "" if unsupported."""
    if isinstance(addr, TCPAddress):
        if addr.ip is None:
            return ""
        scheme = "tcp4" if addr.ip.version == 4 else "tcp6"
        return f"{scheme}://{addr}"
    if isinstance(addr, UnixAddress):
        return f"unix://{addr}"
    return ""


def last_char(s: str) -> str:
    """Last character of ``s``, or "" when empty."""
    return s[-1:] if s else ""


def _clean(path: str) -> str:
    cleaned = posixpath.normpath(path)
    if cleaned.startswith("//") and not cleaned.startswith("///"):
        cleaned = cleaned[1:]
    return cleaned


def join_path(absolute_path: str, relative_path: str) -> str:
    """Join two URL-style paths, keeping a trailing slash from the relative part."""
    if relative_path == "":
        return absolute_path
    joined = "/".join(p for p in (absolute_path, relative_path) if p)
    final = _clean(joined)
    if last_char(relative_path) == "/" and last_char(final) != "/":
        return final + "/"
    return final


class _Listener:
    """A listening socket that removes its Unix socket file on close."""

    def __init__(self, sock: socket.socket, addr: Address, path: Optional[str] = None) -> None:
        self._sock = sock
        self._addr = addr
        self._path = path
        self._closed = False

    @property
    def addr(self) -> Address:
        return self._addr

    def accept(self) -> tuple[socket.socket, Any]:
        return self._sock.accept()

    def fileno(self) -> int:
        return self._sock.fileno()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        self._sock.close()
        if self._path is not None:
            os.remove(self._path)

    def __enter__(self) -> "_Listener":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()


def _listener_tcp() -> _Listener:
    sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    try:
        sock.bind(("127.0.0.1", 0))
        sock.listen()
    except OSError as exc:
        sock.close()
        raise OSError("couldn't bind plugin TCP listener") from exc
    host, port = sock.getsockname()[:2]
    return _Listener(sock, TCPAddress(ipaddress.ip_address(host), port))


def _listener_unix() -> _Listener:
    fd, path = tempfile.mkstemp(prefix="urcf-plugin-")
    os.close(fd)
    os.remove(path)
    sock = socket.socket(socket.AF_UNIX, socket.SOCK_STREAM)
    try:
        sock.bind(path)
        sock.listen()
    except OSError:
        sock.close()
        raise
    return _Listener(sock, UnixAddress(path), path)


def listener(force_tcp: bool) -> _Listener:
    """Open a local listener: loopback TCP on Windows or when forced, else a Unix socket."""
    if sys.platform == "win32" or force_tcp:
        return _listener_tcp()
    return _listener_unix()


def get_random_listener_addr(force_tcp: bool) -> Address:
    """Address of a briefly opened local listener, free for reuse."""
    with listener(force_tcp) as lis:
        return lis.addr