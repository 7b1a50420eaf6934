"""Input handler - single-key hotkeys using prompt_toolkit."""

import asyncio
import logging
from typing import Callable

from prompt_toolkit.input import create_input
from prompt_toolkit.keys import Keys

log = logging.getLogger(__name__)

HINT_TEXT = "[r]econnect  [c]lear events  [q]uit"


class InputHandler:
    """Raw-mode key capture that forwards printable keys as hotkeys."""

    def __init__(self):
        self.on_hotkey: Callable[[str], None] | None = None
        self._pt_input = None
        self._raw_ctx = None
        self._attach_handle = None
        self._loop: asyncio.AbstractEventLoop | None = None

    @property
    def hint_text(self) -> str:
        return HINT_TEXT

    def start(self, loop: asyncio.AbstractEventLoop):
        """Enter raw mode and attach to asyncio event loop."""
        self._loop = loop
        self._pt_input = create_input()
        self._raw_ctx = self._pt_input.raw_mode()
        self._raw_ctx.__enter__()
        self._attach_handle = self._pt_input.attach(self._keys_ready)
        self._attach_handle.__enter__()

    def stop(self):
        """Exit raw mode and detach."""
        if self._attach_handle:
            self._attach_handle.__exit__(None, None, None)
            self._attach_handle = None
        if self._raw_ctx:
            self._raw_ctx.__exit__(None, None, None)
            self._raw_ctx = None
        self._pt_input = None

    def _keys_ready(self):
        """Called by prompt_toolkit when stdin has keys. Runs on asyncio loop thread."""
        if not self._pt_input:
            return
        for kp in self._pt_input.read_keys():
            self.process_key(kp.key, kp.data)

    def process_key(self, key, data: str = ""):
        if key == Keys.ControlC:
            char = "q"
        else:
            char = data or str(key)
        if self.on_hotkey and self._loop:
            self._loop.call_soon_threadsafe(self.on_hotkey, char.lower())
