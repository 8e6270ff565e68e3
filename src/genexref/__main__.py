"""Command-line entry point for genexref.

Usage:
    python -m genexref --from symbol --to entrez ASIC1 RGS5
    python -m genexref --table hgnc.txt --from entrez --to ensembl < ids.txt
    python -m genexref --stats
    python -m genexref --download-only --force-download
"""

from __future__ import annotations

import argparse
import logging
import sys
from collections.abc import Sequence
from pathlib import Path
from typing import TYPE_CHECKING, TextIO

from genexref.errors import ConfigurationError, DownloadError

if TYPE_CHECKING:
    from genexref.matrix import ConverterMatrix


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genexref",
        description="Convert gene identifiers between HGNC, symbol, Entrez, RefSeq, UniProt and Ensembl",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Convert symbols to Entrez IDs using the cached default table
    python -m genexref --from symbol --to entrez ASIC1 RGS5

    # Use your own table, read identifiers from stdin
    python -m genexref --table hgnc.txt --from entrez --to ensembl < ids.txt

    # Ask before correcting unrecognized symbols
    python -m genexref --manual --from symbol --to hgncid asic-1

    # Show table statistics or the available converters
    python -m genexref --stats
    python -m genexref --list-converters
""",
    )

    # Conversion
    parser.add_argument("values", nargs="*", help="Identifiers to convert (default: stdin)")
    parser.add_argument("--from", dest="src", type=str, help="Source scheme, e.g. symbol")
    parser.add_argument("--to", dest="dst", type=str, help="Target scheme, e.g. entrez")

    # Table options
    parser.add_argument(
        "--table",
        type=Path,
        help="Path to an HGNC table (default: cached download in the data directory)",
    )
    parser.add_argument(
        "--download-only",
        action="store_true",
        help="Only download the default table, don't convert",
    )
    parser.add_argument(
        "--force-download",
        action="store_true",
        help="Re-download the default table even if cached",
    )

    # Correction switches
    parser.add_argument(
        "--manual",
        action="store_true",
        help="Ask on the terminal how to correct unrecognized symbols",
    )
    parser.add_argument(
        "--no-correct",
        action="store_true",
        help="Do not try to correct unrecognized symbols",
    )

    # Informational
    parser.add_argument("--stats", action="store_true", help="Print per-scheme entry counts")
    parser.add_argument(
        "--list-converters",
        action="store_true",
        help="List available <src>2<dst> converters and exit",
    )

    # Configuration
    parser.add_argument("--env", type=Path, help="Path to .env file (default: .env)")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    return parser


def configure_logging(verbose: bool = False) -> None:
    """Initialise the root logger for command-line use."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
        datefmt="%H:%M:%S",
    )


def main(argv: Sequence[str] | None = None, stdin: TextIO | None = None) -> int:
    """Main entry point for the converter CLI."""
    parser = _build_parser()
    args = parser.parse_args(argv)
    configure_logging(args.verbose)

    from genexref.config import Settings, set_settings
    from genexref.resolver import CorrectionPolicy

    try:
        settings = Settings.from_env(args.env)
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    # Apply CLI overrides
    if args.manual:
        settings.correction_policy = CorrectionPolicy.MANUAL
    if args.no_correct:
        settings.correct_symbols = False
    set_settings(settings)

    if args.download_only:
        from genexref.source import HGNCSource

        try:
            path = HGNCSource(settings).download(force=args.force_download)
        except DownloadError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(path)
        return 0

    from genexref.loader import open_dictionary

    try:
        matrix = open_dictionary(args.table, force_download=args.force_download)
    except (ConfigurationError, DownloadError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1

    if args.list_converters:
        return _list_converters(matrix)
    if args.stats:
        return _print_stats(matrix)

    if not args.src or not args.dst:
        parser.error("--from and --to are required to convert identifiers")

    values = args.values or [line.strip() for line in (stdin or sys.stdin) if line.strip()]
    try:
        for value in values:
            print(f"{value}\t{matrix.convert(args.src, args.dst, value)}")
    except ConfigurationError as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    return 0


def _list_converters(matrix: ConverterMatrix) -> int:
    """List all accessor names."""
    listing = matrix.converter_list()
    for kind in ("direct", "indirect"):
        print(f"{kind.capitalize()} converters:")
        for name in listing[kind]:
            print(f"  {name}")
    return 0


def _print_stats(matrix: ConverterMatrix) -> int:
    """Print per-scheme entry counts."""
    if matrix.load_stats is not None:
        print(f"Loaded: {matrix.load_stats}")
    for scheme, count in matrix.stat().items():
        print(f"  {scheme:10} {count:>8,}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
