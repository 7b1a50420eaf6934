"""Tests for drivestatus.server.protocol - line encoding and decoding."""

import pytest

from drivestatus.server.protocol import INVALID_DRIVE, decode_line, encode_error, encode_status
from drivestatus.status import RwMode, StatusRecord


class TestEncode:
    def test_status_line(self):
        """Fields are written in order as 0/1 flags and integers."""
        record = StatusRecord(8, True, True, 18, RwMode.MODE_A, False)
        assert encode_status(record) == b"8 1 1 18 1 0\n"

    def test_idle_line(self):
        """An idle drive encodes mode 0."""
        record = StatusRecord(9, False, False, 0, RwMode.IDLE, True)
        assert encode_status(record) == b"9 0 0 0 0 1\n"

    def test_error_line(self):
        """The error line is fixed text."""
        assert encode_error() == b"ERROR: INVALID DRIVE\n"


class TestDecode:
    def test_status_line(self):
        """A status line decodes to its record."""
        record = decode_line(b"10 1 0 35 2 1\n")
        assert record == StatusRecord(10, True, False, 35, RwMode.MODE_B, True)

    def test_error_line(self):
        """The error line decodes to the sentinel."""
        assert decode_line("ERROR: INVALID DRIVE\n") is INVALID_DRIVE

    @pytest.mark.parametrize("line", [
        b"", b"\n", b"8 1 1 18 1", b"8 1 1 18 1 0 0", b"8 x 1 18 1 0",
        b"8 1 1 18 3 0", b"8 2 1 18 1 0", b"8 1 1 -1 1 0", b"ERROR: SOMETHING\n",
    ])
    def test_malformed(self, line):
        """Bad lines decode to None."""
        assert decode_line(line) is None
