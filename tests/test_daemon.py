"""Tests for drivestatus.server.daemon - connection lifecycle and diff push."""

import logging
import socket

import pytest

from drivestatus.hardware import DriveUnit, build_bank
from drivestatus.server.daemon import Connected, Disabled, DriveStatusServer, Listening
from drivestatus.status import StatusRegistry

from test_net import wait_until

ERROR_LINE = "ERROR: INVALID DRIVE\n"


class TestLifecycle:
    def test_initially_disabled(self, registry, net):
        """A new server is disabled and polling does nothing."""
        srv = DriveStatusServer(registry, net=net)
        assert isinstance(srv.state, Disabled)
        assert not srv.enabled
        srv.poll()
        assert net.listeners == []

    def test_enable_listens(self, server, net):
        """Enabling opens one listener."""
        assert isinstance(server.state, Listening)
        assert server.bound_address is not None
        assert len(net.listeners) == 1

    def test_enable_twice_is_noop(self, server, net):
        """Enabling again keeps the existing listener."""
        assert server.enable()
        assert len(net.listeners) == 1

    def test_bad_address_stays_disabled(self, registry, net, caplog):
        """A malformed address is logged and leaves the server disabled."""
        srv = DriveStatusServer(registry, address="not an address", net=net)
        with caplog.at_level(logging.ERROR):
            assert srv.enable() is False
        assert isinstance(srv.state, Disabled)
        assert "address invalid" in caplog.text

    def test_bind_failure_stays_disabled(self, registry, net, caplog):
        """A bind failure is logged and leaves the server disabled."""
        net.fail_bind = True
        srv = DriveStatusServer(registry, net=net)
        with caplog.at_level(logging.ERROR):
            assert srv.enable() is False
        assert isinstance(srv.state, Disabled)
        assert "could not start" in caplog.text

    def test_disable_closes_listener_and_client(self, server, net):
        """Disabling closes both sockets."""
        client = net.connect()
        server.poll()
        listener = net.listeners[0]
        server.disable()
        assert isinstance(server.state, Disabled)
        assert listener.closed and client.closed
        assert server.bound_address is None

    def test_change_address_while_disabled_records_only(self, registry, net):
        """A disabled server only records the new address."""
        srv = DriveStatusServer(registry, net=net)
        assert srv.change_address("ip4://127.0.0.1:7000")
        assert srv.address == "ip4://127.0.0.1:7000"
        assert not srv.enabled
        assert net.listeners == []

    def test_change_address_rebinds(self, server, net):
        """An enabled server rebinds to the new address."""
        old = net.listeners[0]
        assert server.change_address("ip4://127.0.0.1:7000")
        assert old.closed
        assert len(net.listeners) == 2
        assert str(server.state.address) == "ip4://127.0.0.1:7000"

    def test_change_address_same_is_noop(self, server, net):
        """Setting the current address again changes nothing."""
        server.change_address(server.address)
        assert len(net.listeners) == 1

    def test_change_address_failure_disables(self, server, net):
        """A failed rebind leaves the server disabled."""
        assert server.change_address("garbage") is False
        assert isinstance(server.state, Disabled)

    def test_enable_with_new_address_rebinds(self, server, net):
        """enable() with a different address rebinds."""
        assert server.enable("ip4://127.0.0.1:7001")
        assert server.address == "ip4://127.0.0.1:7001"
        assert len(net.listeners) == 2

    def test_set_enabled(self, registry, net):
        """The boolean setter enables and disables."""
        srv = DriveStatusServer(registry, net=net)
        assert srv.set_enabled(True)
        assert srv.enabled
        assert srv.set_enabled(False)
        assert not srv.enabled


class TestInitialPush:
    def test_connect_sends_full_snapshot(self, server, net, registry):
        """New client gets one line per active unit, with the step consumed."""
        registry.set_step_event(0)
        client = net.connect()
        server.poll()
        assert isinstance(server.state, Connected)
        assert client.lines() == ["8 1 1 18 1 1\n"]
        assert registry.peek(0).step_event is False
        assert server.state.delivered[0].step_event is False

    def test_connect_with_no_active_units_sends_error(self, net):
        """No active unit: a single error line."""
        srv = DriveStatusServer(StatusRegistry(build_bank()), net=net)
        srv.enable()
        client = net.connect()
        srv.poll()
        assert client.lines() == [ERROR_LINE]

    def test_one_line_per_active_unit(self, net):
        """Initial push covers each active unit in order."""
        bank = build_bank({0: DriveUnit(), 2: DriveUnit(half_track=20)})
        srv = DriveStatusServer(StatusRegistry(bank), net=net)
        srv.enable()
        client = net.connect()
        srv.poll()
        assert client.lines() == ["8 0 0 1 0 0\n", "10 0 0 10 0 0\n"]

    def test_new_client_evicts_old(self, server, net):
        """A second connection replaces the first."""
        first = net.connect()
        server.poll()
        second = net.connect()
        server.poll()
        assert first.closed
        assert server.state.client is second
        assert second.lines() == ["8 1 1 18 1 0\n"]


class TestDiffPush:
    def test_unchanged_state_sends_nothing(self, server, net):
        """Identical snapshots send no lines."""
        client = net.connect()
        server.poll()
        client.take_lines()
        for _ in range(3):
            server.poll()
        assert client.sent == []

    def test_change_is_pushed_once(self, server, net, drive):
        """A change is sent once, then cached."""
        client = net.connect()
        server.poll()
        client.take_lines()
        drive.half_track = 37
        server.poll()
        server.poll()
        assert client.lines() == ["8 1 1 19 1 0\n"]

    def test_unit_going_inactive_sends_error_once(self, server, net, drive):
        """A unit dropping out sends one error line; coming back resends its status."""
        client = net.connect()
        server.poll()
        client.take_lines()
        drive.enabled = False
        server.poll()
        server.poll()
        assert client.take_lines() == [ERROR_LINE]
        assert server.state.delivered[0] is None

        drive.enabled = True
        server.poll()
        assert client.lines() == ["8 1 1 18 1 0\n"]

    def test_unit_becoming_active_is_pushed(self, net):
        """A newly attached unit is pushed on the next cycle."""
        bank = build_bank()
        srv = DriveStatusServer(StatusRegistry(bank), net=net)
        srv.enable()
        client = net.connect()
        srv.poll()
        assert client.take_lines() == [ERROR_LINE]

        bank[1] = DriveUnit(half_track=2)
        srv.poll()
        assert client.lines() == ["9 0 0 1 0 0\n"]

    def test_no_output_without_client(self, server, registry, drive):
        """Without a client the step flag is left pending."""
        registry.set_step_event(0)
        drive.half_track = 40
        server.poll()
        assert isinstance(server.state, Listening)
        assert registry.peek(0).step_event is True

    def test_end_to_end_step_sequence(self, server, net, registry):
        """Connect, idle, step, idle: exactly the expected lines."""
        registry.set_motor(0, True)
        registry.set_step_event(0)

        client = net.connect()
        server.poll()
        assert client.take_lines() == ["8 1 1 18 1 1\n"]
        assert registry.peek(0).step_event is False

        server.poll()
        assert client.take_lines() == []

        registry.set_step_event(0)
        server.poll()
        assert client.take_lines() == ["8 1 1 18 1 1\n"]
        assert registry.peek(0).step_event is False
        assert server.state.delivered[0].step_event is False

        server.poll()
        assert client.take_lines() == []


class TestDisconnect:
    def test_hang_up_returns_to_listening(self, server, net):
        """An empty read closes the client and returns to listening."""
        client = net.connect()
        server.poll()
        client.hang_up()
        server.poll()
        assert isinstance(server.state, Listening)
        assert client.closed

    def test_receive_error_is_disconnect(self, server, net):
        """A receive error counts as a hang-up."""
        client = net.connect()
        server.poll()
        client.recv_error = ConnectionResetError("reset")
        server.poll()
        assert isinstance(server.state, Listening)

    def test_inbound_bytes_are_ignored(self, server, net, drive):
        """Bytes from the client are discarded and the push continues."""
        client = net.connect()
        server.poll()
        client.take_lines()
        client.inbound.append(b"hello")
        drive.led_on = False
        server.poll()
        assert isinstance(server.state, Connected)
        assert client.lines() == ["8 1 0 18 1 0\n"]

    def test_reconnect_resends_full_snapshot(self, server, net):
        """After a hang-up the next client gets a full snapshot."""
        first = net.connect()
        server.poll()
        first.hang_up()
        server.poll()

        second = net.connect()
        server.poll()
        assert second.lines() == ["8 1 1 18 1 0\n"]


class TestLoopback:
    def test_real_socket_round_trip(self, registry):
        """The default backend serves the initial line over TCP."""
        srv = DriveStatusServer(registry, address="ip4://127.0.0.1:0")
        assert srv.enable()
        try:
            peer = socket.create_connection(srv.bound_address.sockaddr, timeout=2)
            try:
                assert wait_until(lambda: (srv.poll(), srv.connected)[1])
                assert peer.recv(64) == b"8 1 1 18 1 0\n"

                peer.close()
                assert wait_until(lambda: (srv.poll(), not srv.connected)[1])
                assert isinstance(srv.state, Listening)
            finally:
                peer.close()
        finally:
            srv.close()
        assert isinstance(srv.state, Disabled)
