"""
constants.py - Shared constants for the drive status modules.
Kept separate so hardware, status and server code can import without cycles.
"""

# Drive slots
NUM_DISK_UNITS = 4
DRIVE_UNIT_MIN = 8
DRIVE_UNIT_MAX = DRIVE_UNIT_MIN + NUM_DISK_UNITS - 1

# Drive types (0 means the slot has no drive configured)
DRIVE_TYPE_NONE = 0
DRIVE_TYPE_1541 = 1541

# Hardware bits
MOTOR_ON_BIT = 0x04
LED_BIT = 0x01

# Head position: 1541-style drives span 35 tracks, two half-tracks each
MIN_HALF_TRACK = 2
MAX_HALF_TRACK = 84
DIRECTORY_HALF_TRACK = 35

# Wire protocol
ERROR_INVALID_DRIVE = "ERROR: INVALID DRIVE"
RECEIVE_PROBE_SIZE = 4

# Configuration defaults
DEFAULT_ADDRESS = "ip4://127.0.0.1:6511"
DEFAULT_TICKS_PER_SECOND = 50.0
DEFAULT_RECONNECT_INTERVAL = 2.0
