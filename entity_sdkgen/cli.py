"""Command line entry point for entity-sdkgen."""

from __future__ import annotations

import argparse
from typing import Sequence

from . import __version__
from .codegen.cli_integration import add_codegen_args, handle_codegen_command
from .logging_config import get_logger, setup_logging

logger = get_logger(__name__)


def create_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the ``entity-sdkgen`` command."""
    parser = argparse.ArgumentParser(
        prog="entity-sdkgen",
        description="Generate client SDK stubs from an entity schema",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  entity-sdkgen entities.json --backend unity --output Assets/Plugins/KBEngine
  entity-sdkgen entities.json -b ue4 -o Source/KBEnginePlugins/Scripts
  entity-sdkgen --url https://build.example.com/entities.json -b unity -o out
  entity-sdkgen --list-backends
        """.strip(),
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")

    add_codegen_args(parser)

    logging_group = parser.add_argument_group("logging")
    logging_group.add_argument(
        "--log-level",
        choices=["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"],
        type=str.upper,
        help="Logging level (default: WARNING or $ENTITY_SDKGEN_LOG_LEVEL)",
    )
    logging_group.add_argument("--log-file", metavar="FILE", help="Also write the log to FILE")

    return parser


def main(argv: Sequence[str] | None = None) -> int:
    """Run the command line interface.

    Args:
        argv: Arguments without the program name; defaults to ``sys.argv[1:]``.

    Returns:
        Exit code (0 for success, 1 for failure).
    """
    parser = create_parser()
    args = parser.parse_args(argv)

    setup_logging(
        level=args.log_level,
        log_file=args.log_file,
        rich_tracebacks=args.log_level == "DEBUG",
    )
    logger.debug("Parsed arguments: %s", vars(args))

    if not (args.list_backends or args.backend_info or args.backend):
        parser.print_help()
        return 1

    return handle_codegen_command(args)
