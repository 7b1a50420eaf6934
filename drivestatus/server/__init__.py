"""Drive status server - push drive activity to one observer over a socket."""

from .daemon import DriveStatusServer, Disabled, Listening, Connected
from .net import Address, SocketBackend, parse_address
from .protocol import INVALID_DRIVE, encode_status, encode_error, decode_line
