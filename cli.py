#!/usr/bin/env python3
"""
constscan CLI

Lists the named constants declared for an integer type in a Go package,
with their values, as input for stringer-style code generators.
"""

import argparse
import logging
import sys
from pathlib import Path
from typing import Dict, List

from config import ConfigError, VALID_FORMATS, build_config, find_config_file, read_config_file
from exporters import to_json, to_text
from exporters.text_exporter import summarize
from loader.errors import LoadError
from model.records import ConstantRecord
from scanner import InternalInconsistencyError, NotFoundError, parse_package


logger = logging.getLogger("constscan")


def parse_args(args=None):
    """Parse command line arguments."""
    parser = argparse.ArgumentParser(
        prog="constscan",
        description="List the constants declared for a type in a Go package.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  constscan ./color -t Color               # Constants of type Color
  constscan . -t Color -t Weekday -f json  # Several types, JSON output
  constscan . -t Color --names-only        # Just the names, one per line
  constscan . -t Color --sort-by-value     # Order by value, not declaration
  constscan . --tags integration -t Mode   # Honour extra build tags
        """,
    )

    # Positional arguments
    parser.add_argument(
        "root",
        nargs="?",
        default=".",
        help="Go package directory (default: current directory)",
    )

    parser.add_argument(
        "-t", "--type",
        action="append",
        default=None,
        help="Type name to list constants for; repeat or comma-separate for several",
    )

    # Output options
    parser.add_argument(
        "-o", "--output",
        type=str,
        default=None,
        help="Output file (default: stdout)",
    )

    parser.add_argument(
        "-f", "--format",
        choices=list(VALID_FORMATS),
        default=None,
        help="Output format (default: text)",
    )

    parser.add_argument(
        "--names-only",
        action="store_true",
        default=None,
        help="Print only constant names, one per line",
    )

    parser.add_argument(
        "--sort-by-value",
        action="store_true",
        default=None,
        help="Order constants by value instead of declaration order",
    )

    # Loading options
    parser.add_argument(
        "--include-tests",
        action="store_true",
        default=None,
        help="Also scan _test.go files of the package",
    )

    parser.add_argument(
        "--tags",
        type=str,
        default=None,
        help="Comma-separated list of additional build tags",
    )

    parser.add_argument(
        "-c", "--config",
        type=str,
        default=None,
        help="Config file (default: constscan.yaml/.yml/.toml in the package directory)",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Log loader details to stderr",
    )

    return parser.parse_args(args)


def main(args=None):
    """Main entry point."""
    parsed = parse_args(args)

    logging.basicConfig(
        level=logging.DEBUG if parsed.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
        stream=sys.stderr,
    )

    # Resolve paths
    root = Path(parsed.root).resolve()
    if not root.is_dir():
        print(f"Error: '{parsed.root}' is not a directory", file=sys.stderr)
        return 1

    # Load the config file, if any
    try:
        config_path = Path(parsed.config) if parsed.config else find_config_file(root)
        file_values = read_config_file(config_path) if config_path else {}
        config = build_config(parsed, file_values, root)
    except ConfigError as e:
        print(f"Error: {e.message}", file=sys.stderr)
        if e.suggestion:
            print(f"  {e.suggestion}", file=sys.stderr)
        return 1
    if config_path:
        logger.debug("using config file %s", config_path)

    if not config.type_names:
        print("Error: no type names given (use -t TYPE or 'types' in a config file)", file=sys.stderr)
        return 1

    # Load the package
    try:
        package = parse_package(
            root,
            include_tests=config.include_tests,
            build_tags=config.build_tags,
        )
    except LoadError as e:
        print(f"Error loading package: {e}", file=sys.stderr)
        return 1

    # Scan each requested type; a type without constants does not stop the others
    results: Dict[str, List[ConstantRecord]] = {}
    missing = False
    for type_name in config.type_names:
        try:
            results[type_name] = package.constants_of_type(type_name)
        except NotFoundError as e:
            print(f"Warning: {e}", file=sys.stderr)
            missing = True
        except InternalInconsistencyError as e:
            print(f"Error scanning type {type_name}: {e}", file=sys.stderr)
            return 1

    for type_name, count in summarize(results).items():
        logger.debug("%s: %d values", type_name, count)

    if not results:
        return 1

    # Generate output
    if config.output_format == "json":
        output = to_json(results, package=package.name, sort_by_value=config.sort_by_value)
    else:
        output = to_text(
            results,
            package=package.name,
            names_only=config.names_only,
            sort_by_value=config.sort_by_value,
        )

    # Write output
    if config.output:
        try:
            config.output.write_text(output + "\n", encoding="utf-8")
            print(f"Output written to: {config.output}", file=sys.stderr)
        except OSError as e:
            print(f"Error writing output: {e}", file=sys.stderr)
            return 1
    else:
        print(output)

    return 1 if missing else 0


if __name__ == "__main__":
    sys.exit(main())
