"""
Command-line interface for MIDI perform.
"""

import argparse
import sys
import threading
from pathlib import Path

from .broker import create_broker
from .coalescer import ModifierCoalescer
from .config import Config, load_config
from .devices import DeviceManager, MidoTransport, list_midi_ports
from .errors import MidiPerformError, TransportError
from .keyboard import DryRunKeySimulator, KeySimulator, PynputKeySimulator
from .mappings import MappingTable, default_mapping_table

VERSION = "0.1.0"


def build_config(args: argparse.Namespace) -> Config:
    """Load the config file (if any) and apply command-line overrides."""
    config = load_config(Path(args.config)) if args.config else Config()

    if args.device is not None:
        config.device = args.device
    if args.mappings is not None:
        config.mappings = Path(args.mappings)
    if args.dry_run:
        config.dry_run = True
    if args.quiet:
        config.quiet = True
    return config


def build_mapping_table(config: Config) -> MappingTable:
    """Load the mapping file if one is configured, otherwise the default layout."""
    if config.mappings is None:
        return default_mapping_table()

    table = MappingTable()
    count = table.import_file(config.mappings)
    print(f"Loaded {count} mappings from {config.mappings}")
    return table


def build_simulator(config: Config) -> KeySimulator:
    if config.dry_run:
        return DryRunKeySimulator()
    return PynputKeySimulator()


def cmd_run(args: argparse.Namespace) -> int:
    """Connect to MIDI devices and play key sequences until interrupted."""
    try:
        config = build_config(args)
        table = build_mapping_table(config)
    except (MidiPerformError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    try:
        simulator = build_simulator(config)
    except Exception as e:
        print(f"Error: Unable to initialize keyboard: {e}", file=sys.stderr)
        return 1

    try:
        transport = MidoTransport()
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    coalescer = ModifierCoalescer(simulator, config.tracked_modifiers)
    broker = create_broker(table, coalescer, settle_ms=config.settle_delay_ms, quiet=config.quiet)
    device_manager = DeviceManager(
        transport,
        broker.handle,
        device_filter=config.device,
        poll_interval=config.poll_interval,
    )

    if config.device:
        print(f"Waiting for device: {config.device}")
    print("Press Ctrl+C to stop")
    print("-" * 60)

    stop_event = threading.Event()
    broker.start()
    try:
        device_manager.run(stop_event)
    except KeyboardInterrupt:
        print("\n" + "-" * 60)
        print("Stopped.")
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    finally:
        stop_event.set()
        device_manager.close()
        broker.stop()

    return 0


def cmd_list_devices(args: argparse.Namespace) -> int:
    """List available MIDI devices."""
    try:
        ports = list_midi_ports(MidoTransport())
    except TransportError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    print("Available MIDI devices:")
    for port in ports:
        print(f"    {port}")

    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="midi-perform",
        description="Accepts MIDI controller data and simulates keyboard presses",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s v{VERSION}",
    )
    parser.add_argument(
        "-l", "--list",
        action="store_true",
        help="List available devices",
    )
    parser.add_argument(
        "-d", "--device",
        metavar="DEVICE",
        help="Connect to specified device",
    )
    parser.add_argument(
        "-f", "--mappings",
        metavar="MAPPINGS",
        help="Load a mappings file (line format: note channel keydown keyup)",
    )
    parser.add_argument(
        "-c", "--config",
        metavar="CONFIG",
        help="Path to a YAML config file",
    )
    parser.add_argument(
        "-n", "--dry-run",
        action="store_true",
        help="Print key events instead of sending them",
    )
    parser.add_argument(
        "-q", "--quiet",
        action="store_true",
        help="Don't print every incoming note",
    )
    return parser


def main(argv: list[str] | None = None) -> None:
    """Main entry point."""
    args = build_parser().parse_args(argv)

    # Ensure unbuffered output
    sys.stdout.reconfigure(line_buffering=True)

    if args.list:
        sys.exit(cmd_list_devices(args))
    sys.exit(cmd_run(args))
