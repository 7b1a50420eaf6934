"""DriveStatusServer - single-client diff push of drive status over a socket.

The host calls :meth:`DriveStatusServer.poll` once per emulation tick. Each
call accepts a pending connection (evicting the current client), notices a
client hang-up, and writes one line per unit whose status changed since the
last line delivered to that client.
"""

import logging
from dataclasses import dataclass, field
from typing import Any

from ..constants import DEFAULT_ADDRESS, RECEIVE_PROBE_SIZE
from ..errors import AddressError
from ..status import StatusRecord, StatusRegistry
from .net import Address, SocketBackend, parse_address
from .protocol import encode_error, encode_status

log = logging.getLogger(__name__)


# ── Server states ─────────────────────────────────────────────────────

@dataclass
class Disabled:
    pass


@dataclass
class Listening:
    listener: Any
    address: Address


@dataclass
class Connected:
    listener: Any
    address: Address
    client: Any
    # Last record delivered per unit; None marks an invalid entry
    delivered: list[StatusRecord | None] = field(default_factory=list)


class DriveStatusServer:
    """Drive status server over one injected registry and network backend."""

    def __init__(self, registry: StatusRegistry, address: str = DEFAULT_ADDRESS,
                 net=None):
        self._registry = registry
        self._net = net or SocketBackend()
        self._address = address
        self._state: Disabled | Listening | Connected = Disabled()
        self._bound: Address | None = None

    # ── Introspection ─────────────────────────────────────────────────

    @property
    def state(self) -> Disabled | Listening | Connected:
        return self._state

    @property
    def enabled(self) -> bool:
        return not isinstance(self._state, Disabled)

    @property
    def connected(self) -> bool:
        return isinstance(self._state, Connected)

    @property
    def address(self) -> str:
        return self._address

    @property
    def bound_address(self) -> Address | None:
        """Address the listener is bound to, with ephemeral ports resolved."""
        return self._bound

    # ── Lifecycle ─────────────────────────────────────────────────────

    def enable(self, address: str | None = None) -> bool:
        """Start listening. Returns False (and stays disabled) on failure."""
        if self.enabled:
            if address is not None and address != self._address:
                return self.change_address(address)
            return True
        if address is not None:
            self._address = address

        try:
            addr = parse_address(self._address)
        except AddressError as e:
            log.error("drivestatus server address invalid: %s", e)
            return False

        try:
            listener = self._net.listen(addr)
        except OSError as e:
            log.error("could not start drivestatus server socket on %s: %s", addr, e)
            return False

        self._bound = self._net.local_address(listener, addr)
        self._state = Listening(listener, addr)
        log.info("Drive status server listening on %s", self._bound)
        return True

    def disable(self):
        """Close the listener and drop any client."""
        state = self._state
        if isinstance(state, Disabled):
            return
        if isinstance(state, Connected):
            self._net.close(state.client)
        self._net.close_listener(state.listener, state.address)
        self._state = Disabled()
        self._bound = None
        log.info("Drive status server stopped.")

    close = disable

    def change_address(self, address: str) -> bool:
        """Rebind to ``address``; only records it while disabled."""
        if address == self._address:
            return True
        was_enabled = self.enabled
        if was_enabled:
            self.disable()
        self._address = address
        if was_enabled:
            return self.enable()
        return True

    def set_enabled(self, value: bool) -> bool:
        if value:
            return self.enable()
        self.disable()
        return True

    # ── Poll ──────────────────────────────────────────────────────────

    def poll(self):
        """Run one cycle: accept, detect hang-up, push changed records."""
        if isinstance(self._state, Disabled):
            return

        self._poll_listen()

        state = self._state
        if not isinstance(state, Connected):
            return

        if self._net.readable(state.client) and not self._client_alive(state.client):
            self._drop_client()
            return

        self._push_changes(state)

    def _poll_listen(self):
        state = self._state
        if not self._net.readable(state.listener):
            return
        client = self._net.accept(state.listener)
        if client is None:
            return

        # Only one client at a time: drop previous
        if isinstance(state, Connected):
            log.info("Evicting client for new connection")
            self._net.close(state.client)

        connected = Connected(
            state.listener, state.address, client,
            delivered=[None] * len(self._registry),
        )
        self._state = connected
        log.info("Client connected")
        self._send_initial(connected)

    def _client_alive(self, client) -> bool:
        # Inbound bytes are ignored; only a hang-up matters
        try:
            data = self._net.receive(client, RECEIVE_PROBE_SIZE)
        except OSError as e:
            log.debug("receive failed: %s", e)
            return False
        return bool(data)

    def _drop_client(self):
        state = self._state
        self._net.close(state.client)
        self._state = Listening(state.listener, state.address)
        log.info("Client disconnected")

    # ── Push ──────────────────────────────────────────────────────────

    def _send(self, state: Connected, data: bytes):
        log.debug("-> %r", data)
        self._net.send(state.client, data)

    def _send_initial(self, state: Connected):
        any_active = False
        for unit in range(len(self._registry)):
            record = self._registry.take(unit)
            if record is None:
                continue
            any_active = True
            self._send(state, encode_status(record))
            state.delivered[unit] = record.without_step()

        if not any_active:
            self._send(state, encode_error())

    def _push_changes(self, state: Connected):
        for unit in range(len(self._registry)):
            record = self._registry.peek(unit)
            previous = state.delivered[unit]

            if record is None:
                if previous is not None:
                    self._send(state, encode_error())
                    state.delivered[unit] = None
                continue

            if previous is not None and record == previous:
                continue

            self._send(state, encode_status(record))
            if record.step_event:
                # clear the one-shot flag once delivered
                self._registry.take(unit)
                record = record.without_step()
            state.delivered[unit] = record
