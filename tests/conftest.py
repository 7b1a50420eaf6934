"""Shared fixtures for the drive status test suite."""

from collections import deque

import pytest

from drivestatus.hardware import DriveUnit, build_bank
from drivestatus.server.daemon import DriveStatusServer
from drivestatus.status import StatusRegistry


class FakeSocket:
    """Records sent bytes and serves queued inbound chunks."""

    def __init__(self, name: str = "client"):
        self.name = name
        self.sent: list[bytes] = []
        self.inbound: deque[bytes] = deque()
        self.hung_up = False
        self.recv_error: OSError | None = None
        self.closed = False

    def lines(self) -> list[str]:
        return b"".join(self.sent).decode("ascii").splitlines(keepends=True)

    def take_lines(self) -> list[str]:
        lines = self.lines()
        self.sent.clear()
        return lines

    def hang_up(self):
        self.hung_up = True


class FakeNetwork:
    """In-memory stand-in for SocketBackend."""

    def __init__(self):
        self.listeners: list[FakeSocket] = []
        self.pending: deque[FakeSocket] = deque()
        self.fail_bind = False

    def connect(self) -> FakeSocket:
        client = FakeSocket()
        self.pending.append(client)
        return client

    def listen(self, address, backlog=1):
        if self.fail_bind:
            raise OSError("Address already in use")
        sock = FakeSocket("listener")
        self.listeners.append(sock)
        return sock

    def local_address(self, sock, address):
        return address

    def readable(self, sock) -> bool:
        if sock in self.listeners:
            return bool(self.pending)
        return bool(sock.inbound) or sock.hung_up or sock.recv_error is not None

    def accept(self, listener):
        if not self.pending:
            return None
        return self.pending.popleft()

    def send(self, sock, data: bytes) -> int:
        sock.sent.append(data)
        return len(data)

    def receive(self, sock, size: int) -> bytes:
        if sock.recv_error is not None:
            raise sock.recv_error
        if sock.inbound:
            return sock.inbound.popleft()[:size]
        return b""

    def close(self, sock):
        sock.closed = True

    def close_listener(self, sock, address):
        sock.closed = True


@pytest.fixture
def drive():
    """Unit 0 hardware: spinning, LED lit, head on half-track 35, rw flag set."""
    d = DriveUnit(half_track=35, read_write_mode=True)
    d.motor_active = True
    d.led_on = True
    return d


@pytest.fixture
def bank(drive):
    return build_bank({0: drive})


@pytest.fixture
def registry(bank):
    reg = StatusRegistry(bank)
    reg.init()
    return reg


@pytest.fixture
def net():
    return FakeNetwork()


@pytest.fixture
def server(registry, net):
    """An enabled server listening on the fake network."""
    srv = DriveStatusServer(registry, net=net)
    assert srv.enable()
    return srv
