"""
Wordwise CLI.
"""

import argparse
import logging

from rich.console import Console
from rich.logging import RichHandler

from wordwise.cli.commands import annotate, job, lookup, serve
from wordwise.config import get_settings


def setup_logging(verbose: bool = False):
    level = logging.DEBUG if verbose else get_settings().log_level.upper()
    logging.basicConfig(
        level=level,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), rich_tracebacks=True, show_path=False)],
    )


def main():
    parser = argparse.ArgumentParser(prog="wordwise", description="Inline vocabulary glosses for e-books")
    parser.add_argument("--verbose", "-v", action="store_true", help="Debug logging")
    subparsers = parser.add_subparsers(dest="command")

    annotate.add_subparser(subparsers)
    lookup.add_subparser(subparsers)
    job.add_subparser(subparsers)
    serve.add_subparser(subparsers)

    args = parser.parse_args()
    setup_logging(args.verbose)

    if hasattr(args, "func"):
        args.func(args)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
