"""Runtime configuration for the drive status server."""

import os
from dataclasses import dataclass

from .constants import DEFAULT_ADDRESS, DEFAULT_TICKS_PER_SECOND

_TRUTHY = ("1", "true", "yes", "on")


@dataclass
class DriveStatusConfig:
    """Enable switch, bind address and host tick rate."""
    enabled: bool = False
    address: str = DEFAULT_ADDRESS
    ticks_per_second: float = DEFAULT_TICKS_PER_SECOND

    @classmethod
    def from_env(cls, environ=None) -> "DriveStatusConfig":
        env = os.environ if environ is None else environ
        enabled = env.get("DRIVESTATUS_SERVER", "0").strip().lower() in _TRUTHY
        address = env.get("DRIVESTATUS_ADDRESS") or DEFAULT_ADDRESS
        rate = float(env.get("DRIVESTATUS_TICK_RATE", DEFAULT_TICKS_PER_SECOND))
        if rate <= 0:
            raise ValueError(f"DRIVESTATUS_TICK_RATE must be positive, got {rate}")
        return cls(enabled=enabled, address=address, ticks_per_second=rate)

    def apply(self, server) -> bool:
        """Push address, then enabled state, into a DriveStatusServer."""
        server.change_address(self.address)
        return server.set_enabled(self.enabled)
