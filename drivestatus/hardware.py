"""Drive hardware readout - the per-unit state the status registry polls."""

from dataclasses import dataclass

from .constants import (
    DRIVE_TYPE_1541,
    DRIVE_TYPE_NONE,
    LED_BIT,
    MIN_HALF_TRACK,
    MOTOR_ON_BIT,
    NUM_DISK_UNITS,
)


@dataclass
class DriveUnit:
    """Live hardware state of one drive unit.

    ``byte_ready_active`` and ``led_status`` are raw register-style bit
    fields; the properties below expose the bits the status code cares about.
    """

    enabled: bool = True
    drive_type: int = DRIVE_TYPE_1541
    byte_ready_active: int = 0
    led_status: int = 0
    half_track: int = MIN_HALF_TRACK
    read_write_mode: bool = True

    @property
    def has_drive_type(self) -> bool:
        return self.drive_type != DRIVE_TYPE_NONE

    @property
    def motor_active(self) -> bool:
        return bool(self.byte_ready_active & MOTOR_ON_BIT)

    @motor_active.setter
    def motor_active(self, on: bool):
        if on:
            self.byte_ready_active |= MOTOR_ON_BIT
        else:
            self.byte_ready_active &= ~MOTOR_ON_BIT

    @property
    def led_on(self) -> bool:
        return bool(self.led_status & LED_BIT)

    @led_on.setter
    def led_on(self, on: bool):
        if on:
            self.led_status |= LED_BIT
        else:
            self.led_status &= ~LED_BIT


def build_bank(units: dict[int, DriveUnit] | None = None) -> list[DriveUnit | None]:
    """Return a fixed-size slot list; slots without a unit have no backing context."""
    bank: list[DriveUnit | None] = [None] * NUM_DISK_UNITS
    for index, unit in (units or {}).items():
        if not 0 <= index < NUM_DISK_UNITS:
            raise IndexError(f"unit {index} out of range (0..{NUM_DISK_UNITS - 1})")
        bank[index] = unit
    return bank
