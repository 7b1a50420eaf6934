"""StatusRegistry - cached motor state and one-shot step flags per drive unit.

The registry keeps the two pieces of drive status that are not simply read
off the hardware on every poll:

* the motor state, derived lazily from the hardware motor bit on the first
  successful query and then held until overridden or reset;
* a one-shot step flag, raised by the drive emulation on every head step and
  cleared only by a reader that takes it.

Everything else in a :class:`StatusRecord` is recomputed from the hardware on
each query by :func:`assemble_record`.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from enum import Enum, IntEnum

from .constants import DRIVE_UNIT_MAX, DRIVE_UNIT_MIN
from .hardware import DriveUnit


class MotorState(Enum):
    UNKNOWN = "unknown"
    ON = "on"
    OFF = "off"

    @classmethod
    def from_bool(cls, on: bool) -> "MotorState":
        return cls.ON if on else cls.OFF


class RwMode(IntEnum):
    IDLE = 0
    MODE_A = 1  # motor on, read/write flag set
    MODE_B = 2  # motor on, read/write flag clear


@dataclass(frozen=True)
class StatusRecord:
    drive_num: int
    motor_on: bool
    led_on: bool
    track: int
    rw_mode: RwMode
    step_event: bool

    def without_step(self) -> "StatusRecord":
        """Copy of this record with the step event consumed."""
        if not self.step_event:
            return self
        return StatusRecord(
            self.drive_num, self.motor_on, self.led_on,
            self.track, self.rw_mode, False,
        )


@dataclass
class RegistryEntry:
    motor: MotorState = MotorState.UNKNOWN
    step_pending: bool = False


# ── Snapshot assembly ─────────────────────────────────────────────────

def track_from_half_track(half_track: int) -> int:
    """Logical track for a head position; 0 when the position is undefined."""
    if half_track <= 0:
        return 0
    return (half_track + 1) // 2


def assemble_record(drive_num: int, motor_on: bool, step_event: bool,
                    drive: DriveUnit) -> StatusRecord:
    """Combine cached registry state with a fresh hardware readout."""
    if not motor_on:
        rw_mode = RwMode.IDLE
    elif drive.read_write_mode:
        rw_mode = RwMode.MODE_A
    else:
        rw_mode = RwMode.MODE_B
    return StatusRecord(
        drive_num=drive_num,
        motor_on=motor_on,
        led_on=drive.led_on,
        track=track_from_half_track(drive.half_track),
        rw_mode=rw_mode,
        step_event=step_event,
    )


# ── Identifier mapping ────────────────────────────────────────────────

def drive_to_unit(drive_num: int) -> int | None:
    """Map an external drive number (8..11) to a unit index, or None."""
    if drive_num < DRIVE_UNIT_MIN or drive_num > DRIVE_UNIT_MAX:
        return None
    return drive_num - DRIVE_UNIT_MIN


def unit_to_drive(unit: int) -> int:
    return DRIVE_UNIT_MIN + unit


# ── Registry ──────────────────────────────────────────────────────────

class StatusRegistry:
    """Per-unit status cache over an injected bank of drive slots."""

    def __init__(self, bank: Sequence[DriveUnit | None]):
        self._bank = bank
        self._entries = [RegistryEntry() for _ in range(len(bank))]

    def __len__(self) -> int:
        return len(self._entries)

    def _in_range(self, unit: int) -> bool:
        return 0 <= unit < len(self._entries)

    def init(self):
        """Reset every unit to an unknown motor state with no step pending."""
        for unit in range(len(self._entries)):
            self.reset_unit(unit)

    def reset_unit(self, unit: int):
        if not self._in_range(unit):
            return
        self._entries[unit] = RegistryEntry()

    def set_motor(self, unit: int, on: bool):
        if not self._in_range(unit):
            return
        self._entries[unit].motor = MotorState.from_bool(on)

    def set_step_event(self, unit: int):
        if not self._in_range(unit):
            return
        self._entries[unit].step_pending = True

    def motor_state(self, unit: int) -> MotorState | None:
        if not self._in_range(unit):
            return None
        return self._entries[unit].motor

    def is_unit_active(self, unit: int) -> bool:
        if not self._in_range(unit):
            return False
        drive = self._bank[unit]
        if drive is None:
            return False
        return drive.enabled and drive.has_drive_type

    def snapshot(self, unit: int, clear_step: bool = False) -> StatusRecord | None:
        """Query one unit; None when it is out of range or inactive.

        A failed query has no side effects. ``clear_step`` consumes the step
        flag after it has been read into the record.
        """
        if not self.is_unit_active(unit):
            return None

        drive = self._bank[unit]
        entry = self._entries[unit]

        if entry.motor is MotorState.UNKNOWN:
            entry.motor = MotorState.from_bool(drive.motor_active)

        record = assemble_record(
            unit_to_drive(unit),
            entry.motor is MotorState.ON,
            entry.step_pending,
            drive,
        )
        if clear_step:
            entry.step_pending = False
        return record

    def peek(self, unit: int) -> StatusRecord | None:
        """Query without consuming the step flag."""
        return self.snapshot(unit, clear_step=False)

    def take(self, unit: int) -> StatusRecord | None:
        """Query and consume the step flag."""
        return self.snapshot(unit, clear_step=True)
