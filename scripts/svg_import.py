#!/usr/bin/env python3
"""Import directories of SVG icons as icon collections (JSON)."""

import argparse
import json
import logging
import sys
from pathlib import Path

# Add src to path for imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from svg_icons.config import ImportConfig, parse_import_config_file
from svg_icons.diagnostics import DiagnosticCollector, format_diagnostics, log_diagnostic
from svg_icons.errors import SourceError
from svg_icons.importer import import_svg_collection, import_svg_collections


def build_config(args: argparse.Namespace) -> ImportConfig:
    """Build the import configuration from a config file and arguments.

    Command-line arguments override values from the config file.

    Raises:
        ValueError: If neither a source nor a config file is given.
    """
    if args.config is not None:
        config = parse_import_config_file(args.config)
    elif args.source is not None:
        config = ImportConfig(source=args.source)
    else:
        raise ValueError("A source directory or --config is required")

    if args.source is not None:
        config.source = args.source
    if args.multi:
        config.mode = "multi"
    if args.prefix is not None:
        config.prefix = args.prefix
    if args.no_subdirs:
        config.include_sub_dirs = False
    if args.output is not None:
        config.output = args.output
    if args.jobs is not None:
        config.max_workers = args.jobs
    return config


def main() -> int:
    """Main entry point.

    Returns:
        Exit code:
        - 0: Success
        - 1: I/O or source error
        - 2: Config error
    """
    parser = argparse.ArgumentParser(
        description="Import SVG icon directories as icon collections.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  # One collection from a directory (sub-directories included)
  %(prog)s icons/line -o line.json

  # One collection per directory containing SVG files
  %(prog)s icons --multi --prefix ic -o collections.json

  # Settings from a YAML config file
  %(prog)s --config icons.yaml
""",
    )
    parser.add_argument("source", type=Path, nargs="?", help="SVG source directory")
    parser.add_argument("--config", "-c", type=Path, help="YAML config file")
    parser.add_argument(
        "--multi", action="store_true", help="One collection per icon directory"
    )
    parser.add_argument("--prefix", "-p", type=str, help="Collection prefix")
    parser.add_argument(
        "--no-subdirs",
        action="store_true",
        help="Ignore files in sub-directories (single collection mode)",
    )
    parser.add_argument("--output", "-o", type=Path, help="Output JSON file")
    parser.add_argument("--jobs", "-j", type=int, help="Directories processed in parallel")
    parser.add_argument("--verbose", "-v", action="store_true", help="Verbose logging")

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    try:
        config = build_config(args)
    except Exception as e:
        print(f"Error: Failed to load config: {e}", file=sys.stderr)
        return 2

    collector = DiagnosticCollector(forward=log_diagnostic if args.verbose else None)
    try:
        if config.mode == "multi":
            result = import_svg_collections(
                config.source,
                prefix=config.prefix,
                options=config.options,
                sink=collector,
                max_workers=config.max_workers,
            )
        else:
            result = import_svg_collection(
                config.source,
                include_sub_dirs=config.include_sub_dirs,
                prefix=config.prefix or "",
                options=config.options,
                sink=collector,
            )
    except SourceError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if collector.diagnostics:
        print(format_diagnostics(collector.diagnostics), file=sys.stderr)

    text = json.dumps(result, indent=2, ensure_ascii=False)
    if config.output is None:
        print(text)
        return 0

    try:
        config.output.write_text(text + "\n", encoding="utf-8")
        print(f"Output written to: {config.output}", file=sys.stderr)
    except OSError as e:
        print(f"Error: Failed to write output: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
