"""Network primitives - address parsing and a non-blocking socket backend.

Every call here returns immediately: readiness is checked with a zero-timeout
``select`` before accept/receive, and sockets are switched to non-blocking
mode as soon as they exist.
"""

import logging
import os
import select
import socket
from dataclasses import dataclass
from pathlib import Path

from ..errors import AddressError

log = logging.getLogger(__name__)

IP4_PREFIX = "ip4://"
IP6_PREFIX = "ip6://"
UNIX_PREFIX = "unix:"


@dataclass(frozen=True)
class Address:
    family: int
    host: str = ""
    port: int = 0
    path: str = ""

    @property
    def sockaddr(self):
        if self.family == socket.AF_UNIX:
            return self.path
        return (self.host, self.port)

    def __str__(self) -> str:
        if self.family == socket.AF_UNIX:
            return f"{UNIX_PREFIX}{self.path}"
        if self.family == socket.AF_INET6:
            return f"{IP6_PREFIX}[{self.host}]:{self.port}"
        return f"{IP4_PREFIX}{self.host}:{self.port}"


def _parse_port(text: str, spec: str) -> int:
    try:
        port = int(text)
    except ValueError:
        raise AddressError(f"invalid port in address: {spec!r}") from None
    if not 0 <= port <= 65535:
        raise AddressError(f"port out of range in address: {spec!r}")
    return port


def parse_address(spec: str | None) -> Address:
    """Parse ``ip4://host:port``, ``ip6://[host]:port``, ``unix:/path`` or ``host:port``."""
    if not spec or not spec.strip():
        raise AddressError("address not set")
    spec = spec.strip()

    if spec.startswith(UNIX_PREFIX):
        path = spec[len(UNIX_PREFIX):]
        if not path:
            raise AddressError(f"missing socket path in address: {spec!r}")
        return Address(socket.AF_UNIX, path=path)

    if spec.startswith(IP6_PREFIX):
        rest = spec[len(IP6_PREFIX):]
        if not rest.startswith("[") or "]:" not in rest:
            raise AddressError(f"ip6 address must look like ip6://[host]:port: {spec!r}")
        host, _, port = rest[1:].partition("]:")
        if not host:
            raise AddressError(f"missing host in address: {spec!r}")
        return Address(socket.AF_INET6, host=host, port=_parse_port(port, spec))

    rest = spec[len(IP4_PREFIX):] if spec.startswith(IP4_PREFIX) else spec
    if "://" in rest:
        raise AddressError(f"unsupported address scheme: {spec!r}")
    host, sep, port = rest.rpartition(":")
    if not sep or not host or ":" in host:
        raise AddressError(f"ip4 address must look like host:port: {spec!r}")
    return Address(socket.AF_INET, host=host, port=_parse_port(port, spec))


class SocketBackend:
    """Thin wrapper over :mod:`socket` used by the drive status server."""

    def listen(self, address: Address, backlog: int = 1) -> socket.socket:
        """Open a non-blocking listener. Raises OSError on bind failure."""
        if address.family == socket.AF_UNIX:
            # Clean stale socket
            Path(address.path).unlink(missing_ok=True)
        sock = socket.socket(address.family, socket.SOCK_STREAM)
        try:
            if address.family != socket.AF_UNIX:
                sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
            sock.bind(address.sockaddr)
            sock.listen(backlog)
            sock.setblocking(False)
        except OSError:
            sock.close()
            raise
        if address.family == socket.AF_UNIX:
            os.chmod(address.path, 0o600)
        return sock

    def readable(self, sock: socket.socket) -> bool:
        try:
            ready, _, _ = select.select([sock], [], [], 0)
        except (OSError, ValueError):
            # closed or invalid descriptor: report readable so the caller's
            # next receive surfaces the failure
            return True
        return bool(ready)

    def accept(self, listener: socket.socket) -> socket.socket | None:
        try:
            client, peer = listener.accept()
        except OSError as e:
            log.debug("accept failed: %s", e)
            return None
        client.setblocking(False)
        log.debug("Accepted connection from %s", peer or "local socket")
        return client

    def send(self, sock: socket.socket, data: bytes) -> int:
        """Fire-and-forget send; returns bytes written or -1."""
        try:
            return sock.send(data)
        except OSError as e:
            log.debug("send failed: %s", e)
            return -1

    def receive(self, sock: socket.socket, size: int) -> bytes:
        return sock.recv(size)

    def close(self, sock: socket.socket):
        try:
            sock.close()
        except OSError:
            pass

    def close_listener(self, sock: socket.socket, address: Address):
        self.close(sock)
        if address.family == socket.AF_UNIX:
            Path(address.path).unlink(missing_ok=True)

    def local_address(self, sock: socket.socket, address: Address) -> Address:
        """The address a listener actually bound to (resolves port 0)."""
        if address.family == socket.AF_UNIX:
            return address
        name = sock.getsockname()
        return Address(address.family, host=name[0], port=name[1])
