#!/usr/bin/env python3
"""
dyngraph CLI - Main entry point.

Usage:
    dyngraph init                              # Write a default dyngraph.yaml
    dyngraph serve                             # Run the GraphQL server
    dyngraph print-schema --scope system       # Print the SDL of a scope
    dyngraph check                             # Compile the schema and report problems
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from graphql import print_schema, validate_schema

from ..core.compiler import SCOPES
from ..core.errors import SchemaConfigError
from ..core.loader import load_schema_file
from ..engine import SnapshotStore
from .config import DynGraphConfig, load_config


def _get_config(args: argparse.Namespace) -> DynGraphConfig:
    config = load_config(args.config) or DynGraphConfig()
    if getattr(args, "schema", None):
        config.schema_path = args.schema
    return config


def cmd_init(args: argparse.Namespace) -> int:
    """Write a default configuration file."""
    config_path = Path(args.config)

    if config_path.exists() and not args.force:
        print(f"Error: {config_path} already exists. Use --force to overwrite.")
        return 1

    DynGraphConfig(schema_path="schema.yaml").save(config_path)
    print(f"Created {config_path}")
    return 0


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the GraphQL server."""
    import uvicorn

    from ..gateway import Gateway

    config = _get_config(args)
    if args.port:
        config.port = args.port

    try:
        gateway = Gateway(config)
    except SchemaConfigError as e:
        print(f"Error: {e}")
        return 1

    uvicorn.run(gateway.app, host=config.host, port=config.port, log_level=args.log_level.lower())
    return 0


def cmd_print_schema(args: argparse.Namespace) -> int:
    """Print the SDL of one scope."""
    config = _get_config(args)
    if not config.schema_path:
        print("Error: no schema file given (use --schema or schema_path in the config).")
        return 1

    try:
        overview = load_schema_file(config.schema_path)
    except SchemaConfigError as e:
        print(f"Error: {e}")
        return 1

    snapshot = SnapshotStore(system_prefix=config.system_prefix).compile(overview)
    print(print_schema(snapshot.get_schema(args.scope)))
    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Compile the schema and validate every scope."""
    config = _get_config(args)
    if not config.schema_path:
        print("Error: no schema file given (use --schema or schema_path in the config).")
        return 1

    try:
        overview = load_schema_file(config.schema_path)
    except SchemaConfigError as e:
        print(f"Error: {e}")
        return 1

    snapshot = SnapshotStore(system_prefix=config.system_prefix).compile(overview)

    failed = False
    for scope in SCOPES:
        errors = validate_schema(snapshot.get_schema(scope))
        if errors:
            failed = True
            for error in errors:
                print(f"[{scope}] {error.message}")
        else:
            print(f"[{scope}] ok")

    print(f"{len(snapshot.object_types)} collections compiled (version {snapshot.version})")
    return 1 if failed else 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="dyngraph",
        description="dyngraph - dynamic GraphQL over a relational schema"
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")
    parser.add_argument("--config", "-c", default="dyngraph.yaml", help="Config file path")
    parser.add_argument(
        "--log-level",
        default="INFO",
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        help="Logging level",
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init
    init_parser = subparsers.add_parser("init", help="Write a default config file")
    init_parser.add_argument("--force", "-f", action="store_true", help="Overwrite existing config")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the GraphQL server")
    serve_parser.add_argument("--schema", "-s", help="Schema file (overrides config)")
    serve_parser.add_argument("--port", "-p", type=int, help="Port (overrides config)")

    # print-schema
    print_parser = subparsers.add_parser("print-schema", help="Print the SDL of a scope")
    print_parser.add_argument("--schema", "-s", help="Schema file (overrides config)")
    print_parser.add_argument("--scope", choices=list(SCOPES), default="items", help="Schema scope")

    # check
    check_parser = subparsers.add_parser("check", help="Compile the schema and report problems")
    check_parser.add_argument("--schema", "-s", help="Schema file (overrides config)")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    logging.basicConfig(
        level=getattr(logging, parsed.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    if not parsed.command:
        parser.print_help()
        return 0

    commands = {
        "init": cmd_init,
        "serve": cmd_serve,
        "print-schema": cmd_print_schema,
        "check": cmd_check,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
