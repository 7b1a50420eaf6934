"""Drive status console - run with: python3 -m drivestatus.console [--address ADDR]"""

import argparse
import logging
import sys

from drivestatus.config import DriveStatusConfig
from drivestatus.constants import DEFAULT_RECONNECT_INTERVAL
from drivestatus.errors import AddressError
from drivestatus.server.net import parse_address


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(
        prog="drivestatus.console",
        description="Live terminal view of a drive status server",
    )
    parser.add_argument(
        "--address", "-a", default=None,
        help="Server address (default: DRIVESTATUS_ADDRESS or ip4://127.0.0.1:6511)",
    )
    parser.add_argument(
        "--reconnect", type=float, default=DEFAULT_RECONNECT_INTERVAL,
        help="Seconds between reconnect attempts",
    )
    parser.add_argument(
        "--verbose", "-v", action="store_true",
        help="Verbose logging",
    )
    args = parser.parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.WARNING
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    spec = args.address or DriveStatusConfig.from_env().address
    try:
        address = parse_address(spec)
    except AddressError as e:
        parser.error(str(e))

    from .app import ConsoleApp
    app = ConsoleApp(address, reconnect_interval=args.reconnect)
    app.start()
    return 0


if __name__ == "__main__":
    sys.exit(main())
