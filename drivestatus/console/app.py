"""ConsoleApp - live terminal view of the drive status stream."""

import asyncio
import logging
import sys

from rich.console import Console
from rich.live import Live

from drivestatus.server.net import Address
from drivestatus.status import StatusRecord

from .client import DriveStatusClient
from .input import InputHandler
from .layout import LayoutManager

log = logging.getLogger(__name__)

RENDER_INTERVAL = 0.1


class ConsoleApp:
    """Coordinates the stream client, key input and rendering."""

    def __init__(self, address: Address, reconnect_interval: float, interactive: bool = True):
        self._quit_event = asyncio.Event()
        self._interactive = interactive and sys.stdin.isatty()
        self._live: Live | None = None

        self.console = Console()
        self.client = DriveStatusClient(address, reconnect_interval=reconnect_interval)
        self.input_handler = InputHandler()
        self.layout = LayoutManager()
        self.layout.header.update(address=str(address))

        self.client.on("connected", self._on_connected)
        self.client.on("disconnected", self._on_disconnected)
        self.client.on("status", self._on_status)
        self.client.on("invalid_drive", self._on_invalid_drive)

    def start(self):
        """Blocking entry point."""
        asyncio.run(self._run())

    async def _run(self):
        loop = asyncio.get_running_loop()

        if self._interactive:
            self.input_handler.on_hotkey = self.handle_hotkey
            self.input_handler.start(loop)

        self.log_event("info", f"Watching {self.client.address}")

        reader_task = asyncio.create_task(self.client.connect_and_read())
        render_task = asyncio.create_task(self._render_loop())

        try:
            with Live(
                self.layout.layout,
                console=self.console,
                screen=True,
                auto_refresh=False,
                redirect_stderr=False,
            ) as live:
                self._live = live
                await self._quit_event.wait()
        except KeyboardInterrupt:
            pass
        finally:
            self.input_handler.stop()
            render_task.cancel()
            await self.client.close()
            reader_task.cancel()
            for task in (reader_task, render_task):
                try:
                    await task
                except asyncio.CancelledError:
                    pass

    async def _render_loop(self):
        while not self._quit_event.is_set():
            await asyncio.sleep(RENDER_INTERVAL)
            self.layout.refresh_all(input_hints=self.input_handler.hint_text)
            if self._live:
                self._live.refresh()

    # ── Stream events ─────────────────────────────────────────────────

    def _on_connected(self):
        # The server resends a full snapshot on every new connection
        self.layout.drives.clear()
        self.layout.header.update(server_connected=True, lines=0)
        self.log_event("success", "Connected to drive status server")

    def _on_disconnected(self):
        self.layout.header.update(server_connected=False)
        self.log_event("warning", "Disconnected from drive status server")

    def _on_status(self, record: StatusRecord):
        header = self.layout.header
        header.update(lines=header.lines + 1)
        previous = self.layout.drives.records.get(record.drive_num)
        self.layout.drives.apply(record)
        if previous is None or previous.motor_on != record.motor_on:
            state = "on" if record.motor_on else "off"
            self.log_event("info", f"Drive {record.drive_num}: motor {state}, track {record.track}")

    def _on_invalid_drive(self):
        header = self.layout.header
        header.update(lines=header.lines + 1)
        self.layout.drives.mark_invalid()
        self.log_event("error", "Server reported an invalid drive")

    # ── Hotkeys ───────────────────────────────────────────────────────

    def handle_hotkey(self, key: str):
        if key == "q":
            self._quit_event.set()
        elif key == "r":
            self.log_event("info", "Reconnecting...")
            self.client.reconnect()
        elif key == "c":
            self.layout.events.clear()

    def log_event(self, level: str, message: str):
        self.layout.events.add(level, message)
