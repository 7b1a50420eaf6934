"""Simulated drive activity used by the stand-alone server host.

Each tick may spin a motor up or down, seek the head toward a random target
one half-track at a time, and blink the activity LED. Motor changes and head
steps are reported to the registry the way a drive emulation would.
"""

import logging
import random

from .constants import (
    DIRECTORY_HALF_TRACK,
    MAX_HALF_TRACK,
    MIN_HALF_TRACK,
)
from .hardware import DriveUnit
from .status import StatusRegistry

log = logging.getLogger(__name__)

SPIN_UP_CHANCE = 0.01
SPIN_DOWN_CHANCE = 0.02
SEEK_CHANCE = 0.05
MODE_FLIP_CHANCE = 0.01


class DriveSimulator:
    """Drives random but plausible activity on a bank of units."""

    def __init__(self, bank: list[DriveUnit | None], registry: StatusRegistry,
                 seed: int | None = None):
        self.bank = bank
        self.registry = registry
        self._rng = random.Random(seed)
        self._targets: dict[int, int] = {}
        self.ticks = 0

    def tick(self):
        self.ticks += 1
        for unit, drive in enumerate(self.bank):
            if drive is None or not self.registry.is_unit_active(unit):
                continue
            self._tick_unit(unit, drive)

    def _tick_unit(self, unit: int, drive: DriveUnit):
        rng = self._rng

        if not drive.motor_active:
            if rng.random() < SPIN_UP_CHANCE:
                self.set_motor(unit, True)
                self._targets[unit] = DIRECTORY_HALF_TRACK
            return

        target = self._targets.get(unit)
        if target is None:
            if rng.random() < SPIN_DOWN_CHANCE:
                self.set_motor(unit, False)
                return
            if rng.random() < SEEK_CHANCE:
                self._targets[unit] = rng.randint(MIN_HALF_TRACK, MAX_HALF_TRACK)
            if rng.random() < MODE_FLIP_CHANCE:
                drive.read_write_mode = not drive.read_write_mode
            drive.led_on = rng.random() < 0.5
            return

        if drive.half_track == target:
            del self._targets[unit]
            return
        self.step_head(unit, 1 if target > drive.half_track else -1)

    def set_motor(self, unit: int, on: bool):
        drive = self.bank[unit]
        drive.motor_active = on
        drive.led_on = on
        self.registry.set_motor(unit, on)
        log.debug("unit %d motor %s", unit, "on" if on else "off")

    def step_head(self, unit: int, direction: int):
        drive = self.bank[unit]
        half_track = min(MAX_HALF_TRACK, max(MIN_HALF_TRACK, drive.half_track + direction))
        if half_track == drive.half_track:
            return
        drive.half_track = half_track
        self.registry.set_step_event(unit)
