"""Drive status protocol - one ASCII record per line, server to client only."""

from ..constants import ERROR_INVALID_DRIVE
from ..status import RwMode, StatusRecord

# Returned by decode_line() for the in-band error line.
INVALID_DRIVE = object()

_FIELD_COUNT = 6


# ── Encode ────────────────────────────────────────────────────────────

def encode_status(record: StatusRecord) -> bytes:
    """Server → Client status line: drive motor led track mode step."""
    line = "%d %d %d %d %d %d\n" % (
        record.drive_num,
        int(record.motor_on),
        int(record.led_on),
        record.track,
        int(record.rw_mode),
        int(record.step_event),
    )
    return line.encode("ascii")


def encode_error() -> bytes:
    """Server → Client invalid drive notice."""
    return (ERROR_INVALID_DRIVE + "\n").encode("ascii")


# ── Decode ────────────────────────────────────────────────────────────

def decode_line(line: bytes | str):
    """Parse one received line.

    Returns a StatusRecord, INVALID_DRIVE for the error line, or None on bad
    input.
    """
    if isinstance(line, bytes):
        line = line.decode("ascii", errors="replace")
    line = line.strip()
    if not line:
        return None
    if line == ERROR_INVALID_DRIVE:
        return INVALID_DRIVE

    parts = line.split()
    if len(parts) != _FIELD_COUNT:
        return None
    try:
        drive_num, motor, led, track, mode, step = (int(p) for p in parts)
        rw_mode = RwMode(mode)
    except ValueError:
        return None
    if motor not in (0, 1) or led not in (0, 1) or step not in (0, 1) or track < 0:
        return None

    return StatusRecord(
        drive_num=drive_num,
        motor_on=bool(motor),
        led_on=bool(led),
        track=track,
        rw_mode=rw_mode,
        step_event=bool(step),
    )
