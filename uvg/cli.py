# File: uvg/cli.py
"""
uvg - Command-Line Interface
============================

``argparse``-based front end for ``ModelGenerator``.

Usage examples::

    # Declarative classes on stdout
    python -m uvg schema.yaml

    # Core tables for two schemas, written to a file
    uvg schema.json --generator tables --schemas public,audit -o models.py

    # Skip indexes and comments, only two tables, no views
    uvg schema.yaml --options noindexes,nocomments --tables users,posts --noviews

Exit codes:
    0 - success
    2 - generation error (unknown generator)
    3 - output write error
    4 - input error (missing / invalid schema file)
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, NoReturn, Optional, Sequence

# ---------------------------------------------------------------------------
# Logger (configured in _setup_logging)
# ---------------------------------------------------------------------------
logger: logging.Logger = logging.getLogger("uvg")


# ---------------------------------------------------------------------------
# Exit codes
# ---------------------------------------------------------------------------

EXIT_SUCCESS: int = 0
EXIT_GENERATION_ERROR: int = 2
EXIT_WRITE_ERROR: int = 3
EXIT_INPUT_ERROR: int = 4


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


def _setup_logging(verbosity: int) -> None:
    """
    Configure the root uvg logger based on verbosity level.

    Args:
        verbosity: -1 = CRITICAL only, 0 = WARNING, 1 = INFO, 2+ = DEBUG.
    """
    if verbosity >= 2:
        level = logging.DEBUG
    elif verbosity >= 1:
        level = logging.INFO
    elif verbosity == 0:
        level = logging.WARNING
    else:
        level = logging.CRITICAL

    handler: logging.StreamHandler = logging.StreamHandler(sys.stderr)
    handler.setLevel(level)

    fmt: str = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
    datefmt: str = "%H:%M:%S"
    handler.setFormatter(logging.Formatter(fmt, datefmt=datefmt))

    root_logger: logging.Logger = logging.getLogger("uvg")
    root_logger.setLevel(level)

    # Remove existing handlers to prevent duplication
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.propagate = False


# ---------------------------------------------------------------------------
# Argument parser
# ---------------------------------------------------------------------------


def _split_list(value: Optional[str]) -> List[str]:
    """``"a, b,,c"`` → ``["a", "b", "c"]``."""
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def _build_parser() -> argparse.ArgumentParser:
    """Build and return the argument parser."""
    from uvg import __version__

    parser: argparse.ArgumentParser = argparse.ArgumentParser(
        prog="uvg",
        description=(
            "Generate SQLAlchemy model code from an introspected database "
            "schema dump (JSON or YAML)."
        ),
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog=(
            "Examples:\n"
            "  %(prog)s schema.yaml\n"
            "  %(prog)s schema.json --generator tables -o models.py\n"
            "  %(prog)s schema.yaml --options noindexes,nocomments --noviews\n"
        ),
    )

    parser.add_argument(
        "--version",
        action="version",
        version=f"uvg v{__version__}",
    )

    parser.add_argument(
        "schema",
        type=str,
        metavar="SCHEMA_FILE",
        help="Path to the introspected schema dump (JSON or YAML).",
    )

    # --- Generation ---
    generation_group = parser.add_argument_group("generation")
    generation_group.add_argument(
        "--generator",
        type=str,
        default="declarative",
        metavar="NAME",
        help="Output style: declarative (default) or tables.",
    )
    generation_group.add_argument(
        "--options",
        type=str,
        default="",
        metavar="OPTS",
        help=(
            "Comma-delimited generator options: noindexes, noconstraints, "
            "nocomments, use_inflect, nojoined, nobidi."
        ),
    )

    # --- Selection ---
    selection_group = parser.add_argument_group("table selection")
    selection_group.add_argument(
        "--schemas",
        type=str,
        default=None,
        metavar="NAMES",
        help="Comma-delimited schemas to include (default: all).",
    )
    selection_group.add_argument(
        "--tables",
        type=str,
        default=None,
        metavar="NAMES",
        help="Comma-delimited table names to include (default: all).",
    )
    selection_group.add_argument(
        "--noviews",
        action="store_true",
        default=False,
        help="Ignore views.",
    )

    # --- Output ---
    parser.add_argument(
        "-o", "--outfile",
        type=str,
        default=None,
        metavar="PATH",
        help="Write the generated module here instead of standard output.",
    )

    # --- Verbosity ---
    verbosity_group = parser.add_argument_group("verbosity")
    verbosity_group.add_argument(
        "-v", "--verbose",
        action="count",
        default=0,
        help="Increase verbosity (-v for INFO, -vv for DEBUG).",
    )
    verbosity_group.add_argument(
        "-q", "--quiet",
        action="store_true",
        default=False,
        help="Suppress all log output except critical errors.",
    )

    return parser


# ---------------------------------------------------------------------------
# Generation
# ---------------------------------------------------------------------------


def _run_generation(args: argparse.Namespace, verbosity: int) -> int:
    """
    Run the pipeline and deliver the output.

    Returns the appropriate exit code.
    """
    from uvg.codegen import UnknownGeneratorError
    from uvg.generator import GenerationReport, ModelGenerator
    from uvg.models import GeneratorOptions
    from uvg.utils import write_file

    options: GeneratorOptions = GeneratorOptions.parse(args.options)

    try:
        generator: ModelGenerator = ModelGenerator(args.generator, options)
    except UnknownGeneratorError as exc:
        logger.error("%s", exc)
        return EXIT_GENERATION_ERROR

    schema_path: Path = Path(args.schema)
    try:
        report: GenerationReport = generator.generate_from_file(
            schema_path,
            schemas=_split_list(args.schemas),
            tables=_split_list(args.tables),
            noviews=args.noviews,
        )
    except (FileNotFoundError, ValueError) as exc:
        logger.error("Failed to load schema: %s", exc)
        return EXIT_INPUT_ERROR

    if args.outfile:
        outfile: Path = Path(args.outfile)
        try:
            written: int = write_file(outfile, report.output)
        except OSError as exc:
            logger.error("Failed to write %s: %s", outfile, exc)
            return EXIT_WRITE_ERROR
        logger.info("Wrote %d bytes to %s.", written, outfile)
    else:
        sys.stdout.write(report.output)
        sys.stdout.flush()

    if verbosity >= 1:
        print(report.summary(include_info=verbosity >= 2), file=sys.stderr)

    return EXIT_SUCCESS


# ---------------------------------------------------------------------------
# Main entry point
# ---------------------------------------------------------------------------


def cli_main(argv: Optional[Sequence[str]] = None) -> NoReturn:
    """
    Main CLI entry point.

    Can be called from ``__main__.py`` or directly for testing.

    Args:
        argv: Optional argument list (defaults to sys.argv[1:]).
    """
    parser: argparse.ArgumentParser = _build_parser()
    args: argparse.Namespace = parser.parse_args(argv)

    verbosity: int = -1 if args.quiet else args.verbose
    _setup_logging(verbosity)

    logger.info("Schema:    %s", args.schema)
    logger.info("Generator: %s", args.generator)

    exit_code: int = _run_generation(args, verbosity)

    if exit_code != EXIT_SUCCESS:
        logger.error("Generation failed with exit code %d.", exit_code)

    sys.exit(exit_code)


# ---------------------------------------------------------------------------
# Module-level exports
# ---------------------------------------------------------------------------

__all__: List[str] = [
    "cli_main",
    "EXIT_SUCCESS",
    "EXIT_GENERATION_ERROR",
    "EXIT_WRITE_ERROR",
    "EXIT_INPUT_ERROR",
]
