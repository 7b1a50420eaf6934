"""
drivestatus - Live drive activity for external observers.
Motor, LED, head track, read/write mode and head steps of each emulated
drive unit, pushed as text lines to a single socket client.

Usage:
    from drivestatus import StatusRegistry, DriveStatusServer
    from drivestatus.hardware import DriveUnit, build_bank
"""

from .status import (
    MotorState, RwMode, StatusRecord, StatusRegistry,
    drive_to_unit, unit_to_drive, track_from_half_track,
)
from .server import DriveStatusServer

__version__ = "1.0.0"
