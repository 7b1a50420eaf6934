"""DriveStatusClient - async reader for the drive status line stream."""

import asyncio
import logging
import socket

from drivestatus.constants import DEFAULT_RECONNECT_INTERVAL
from drivestatus.server.net import Address
from drivestatus.server.protocol import INVALID_DRIVE, decode_line

log = logging.getLogger(__name__)


class DriveStatusClient:
    """Connects to a drive status server and reports decoded lines. Auto-reconnects."""

    def __init__(self, address: Address, reconnect_interval: float = DEFAULT_RECONNECT_INTERVAL):
        self._address = address
        self._reconnect_interval = reconnect_interval
        self._reader: asyncio.StreamReader | None = None
        self._writer: asyncio.StreamWriter | None = None
        self._running = False
        self._connected = False
        self._wake = asyncio.Event()
        self._callbacks: dict[str, list] = {
            "connected": [],
            "disconnected": [],
            "status": [],
            "invalid_drive": [],
        }

    @property
    def is_connected(self) -> bool:
        return self._connected

    @property
    def address(self) -> Address:
        return self._address

    def on(self, event_name: str, callback):
        """Register a callback: 'connected', 'disconnected', 'status', 'invalid_drive'."""
        if event_name in self._callbacks:
            self._callbacks[event_name].append(callback)

    async def connect_and_read(self):
        """Connect and read lines until closed, reconnecting on failure."""
        self._running = True
        while self._running:
            # a reconnect() issued from here on skips the next wait
            self._wake.clear()
            try:
                await self._connect()
                await self._read_loop()
            except OSError as e:
                log.debug("Connection failed: %s", e)
            except asyncio.CancelledError:
                break
            finally:
                self._drop()

            if not self._running:
                break

            try:
                await asyncio.wait_for(self._wake.wait(), self._reconnect_interval)
            except asyncio.TimeoutError:
                pass

    def reconnect(self):
        """Drop the current connection (if any) and retry immediately."""
        if self._writer:
            self._writer.close()
        self._wake.set()

    async def _connect(self):
        addr = self._address
        if addr.family == socket.AF_UNIX:
            self._reader, self._writer = await asyncio.open_unix_connection(addr.path)
        else:
            self._reader, self._writer = await asyncio.open_connection(addr.host, addr.port)
        self._connected = True
        log.info("Connected to drive status server at %s", addr)
        self._fire("connected")

    async def _read_loop(self):
        while self._running and self._reader:
            line = await self._reader.readline()
            if not line:
                break
            self.dispatch(line)

    def dispatch(self, line: bytes):
        msg = decode_line(line)
        if msg is None:
            log.debug("Ignoring malformed line: %r", line)
        elif msg is INVALID_DRIVE:
            self._fire("invalid_drive")
        else:
            self._fire("status", msg)

    async def close(self):
        """Stop reading and disconnect."""
        self._running = False
        self._wake.set()
        self._drop()

    def _drop(self):
        if self._writer:
            try:
                self._writer.close()
            except OSError:
                pass
            self._writer = None
        self._reader = None
        if self._connected:
            self._connected = False
            self._fire("disconnected")

    def _fire(self, event_name: str, *args):
        for cb in self._callbacks.get(event_name, []):
            try:
                cb(*args)
            except Exception:
                log.exception("Callback error: %s", event_name)
