"""FuseDB CLI - inspect and move data in any configured store.

Usage:
    fusedb keys                              # list keys
    fusedb get user:1                        # print a value as JSON
    fusedb set user:1 '{"name": "Ada"}'      # VALUE is JSON, else a string
    fusedb find 'user:*'
    fusedb export -o backup.json
    fusedb import backup.json
    fusedb --driver sqlite --path data.db size

The store comes from --config (a YAML file), else $FUSEDB_CONFIG, else
~/.fusedb/config.yaml; --driver/--path override the file.
"""

import argparse
import asyncio
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .config import EngineConfig
from .config.drivers import DriverType
from .engine import Engine
from .errors import FuseError
from .interfaces import MISSING


def _parse_value(raw: str) -> Any:
    try:
        return json.loads(raw)
    except json.JSONDecodeError:
        return raw


def _print_json(value: Any) -> None:
    print(json.dumps(value, indent=2, ensure_ascii=False, default=str))


def load_config(args: argparse.Namespace) -> EngineConfig:
    """Resolve the engine configuration from file and flags."""
    if args.config:
        config = EngineConfig.from_file(args.config)
    else:
        config = EngineConfig.from_default_location()

    if args.driver:
        config.driver.type = DriverType(args.driver)
    if args.path:
        config.driver.path = args.path
    if args.debug:
        config.debug = True
    return config


async def _run_command(engine: Engine, args: argparse.Namespace) -> int:
    command = args.command

    if command == "get":
        value = await engine.get(args.key, default=MISSING)
        if value is MISSING:
            print(f"Key not found: {args.key}", file=sys.stderr)
            return 1
        _print_json(value)
    elif command == "set":
        await engine.set(args.key, _parse_value(args.value))
    elif command == "remove":
        await engine.remove(args.key)
    elif command == "keys":
        _print_json(await engine.keys())
    elif command == "size":
        print(await engine.size())
    elif command == "find":
        _print_json(await engine.find(args.pattern))
    elif command == "export":
        snapshot = await engine.export_snapshot()
        if isinstance(snapshot, bytes):
            snapshot = snapshot.decode("utf-8")
        if args.output:
            Path(args.output).write_text(snapshot, encoding="utf-8")
            print(f"Exported {await engine.size()} entries to {args.output}")
        else:
            print(snapshot)
    elif command == "import":
        blob = Path(args.file).read_text(encoding="utf-8")
        await engine.import_snapshot(blob)
        print(f"Imported snapshot; store now has {await engine.size()} entries")
    return 0


async def run(args: argparse.Namespace) -> int:
    """Execute one CLI command against the configured store."""
    config = load_config(args)
    if config.debug:
        logging.getLogger().setLevel(logging.DEBUG)
    engine = Engine.from_config(config)
    async with engine:
        return await _run_command(engine, args)


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="fusedb",
        description="FuseDB - unified key-value storage",
    )
    parser.add_argument("--config", "-c", type=str, default=None,
                        help="Path to a YAML config file")
    parser.add_argument("--driver", type=str, default=None,
                        choices=[t.value for t in DriverType],
                        help="Override the configured driver")
    parser.add_argument("--path", type=str, default=None,
                        help="Override the driver's file path")
    parser.add_argument("--debug", action="store_true",
                        help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    get_parser = subparsers.add_parser("get", help="Print the value of a key")
    get_parser.add_argument("key")

    set_parser = subparsers.add_parser("set", help="Store a value (JSON or plain string)")
    set_parser.add_argument("key")
    set_parser.add_argument("value")

    remove_parser = subparsers.add_parser("remove", help="Remove a key")
    remove_parser.add_argument("key")

    subparsers.add_parser("keys", help="List all keys")
    subparsers.add_parser("size", help="Print the number of entries")

    find_parser = subparsers.add_parser("find", help="Print entries matching a glob")
    find_parser.add_argument("pattern")

    export_parser = subparsers.add_parser("export", help="Write a snapshot")
    export_parser.add_argument("--output", "-o", type=str, default=None,
                               help="File to write (default: stdout)")

    import_parser = subparsers.add_parser("import", help="Replace the store from a snapshot")
    import_parser.add_argument("file")

    return parser


def main(argv: Optional[list[str]] = None) -> None:
    """Main CLI entry point."""
    parser = build_parser()
    args = parser.parse_args(argv)

    if not args.command:
        parser.print_help()
        sys.exit(1)

    logging.basicConfig(
        level=logging.DEBUG if args.debug else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        sys.exit(asyncio.run(run(args)))
    except (FuseError, ValueError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
