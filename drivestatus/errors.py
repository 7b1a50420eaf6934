"""Exception types raised by the drive status modules."""


class DriveStatusError(RuntimeError):
    """Base class for drive status failures."""


class AddressError(DriveStatusError, ValueError):
    """Raised when a server address string cannot be parsed."""
