"""Drive status server CLI - run with: python3 -m drivestatus.server -drivestatusserver [-drivestatusaddress ADDR]"""

import argparse
import logging
import signal
import sys
import time

from ..config import DriveStatusConfig
from ..hardware import DriveUnit, build_bank
from ..simulator import DriveSimulator
from ..status import StatusRegistry, drive_to_unit
from .daemon import DriveStatusServer

log = logging.getLogger("drivestatus.server")


def _parse_drives(text: str) -> list[int]:
    units = []
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        try:
            unit = drive_to_unit(int(part))
        except ValueError:
            unit = None
        if unit is None:
            raise argparse.ArgumentTypeError(f"invalid drive number: {part!r}")
        units.append(unit)
    return units


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="drivestatus.server",
        description="Drive status server driven by simulated drive activity",
        prefix_chars="-+",
    )
    parser.add_argument("-drivestatusserver", dest="enabled", action="store_const",
                        const=True, default=None, help="Enable drive status TCP server")
    parser.add_argument("+drivestatusserver", dest="enabled", action="store_const",
                        const=False, help="Disable drive status TCP server")
    parser.add_argument("-drivestatusaddress", dest="address", metavar="<addr>",
                        help="Bind drive status TCP server to address")
    parser.add_argument("--drives", type=_parse_drives, default=[0],
                        help="Comma-separated drive numbers to attach (default: 8)")
    parser.add_argument("--tick-rate", type=float, default=None,
                        help="Emulation ticks per second")
    parser.add_argument("--seed", type=int, default=None, help="Simulator random seed")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")
    return parser


def run(server: DriveStatusServer, simulator: DriveSimulator, ticks_per_second: float):
    """Tick the simulator and poll the server until SIGINT/SIGTERM."""
    stopping = False

    def _signal_handler(signum, frame):
        nonlocal stopping
        stopping = True

    for sig in (signal.SIGTERM, signal.SIGINT):
        signal.signal(sig, _signal_handler)

    interval = 1.0 / ticks_per_second
    print(f"Drive status server running on {server.bound_address}")
    print("Press Ctrl+C to stop.")
    try:
        while not stopping:
            simulator.tick()
            server.poll()
            time.sleep(interval)
    finally:
        server.close()


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)

    level = logging.DEBUG if args.verbose else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s [%(name)s] %(levelname)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    try:
        config = DriveStatusConfig.from_env()
    except ValueError as e:
        log.error("Invalid environment configuration: %s", e)
        return 2
    if args.enabled is not None:
        config.enabled = args.enabled
    if args.address:
        config.address = args.address
    if args.tick_rate is not None:
        if args.tick_rate <= 0:
            log.error("--tick-rate must be positive")
            return 2
        config.ticks_per_second = args.tick_rate

    bank = build_bank({unit: DriveUnit() for unit in args.drives})
    registry = StatusRegistry(bank)
    registry.init()

    server = DriveStatusServer(registry)
    config.apply(server)
    if not server.enabled:
        log.error("Drive status server is disabled (use -drivestatusserver to enable).")
        return 1

    simulator = DriveSimulator(bank, registry, seed=args.seed)
    run(server, simulator, config.ticks_per_second)
    return 0


if __name__ == "__main__":
    sys.exit(main())
