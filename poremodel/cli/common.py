"""Shared argparse argument factories and setup for poremodel CLI tools."""

import argparse
import logging
import sys

from poremodel.core.constants import STRAND_NAMES


def add_strand_args(parser: argparse.ArgumentParser,
                    default: str = 'template') -> None:
    """Add --strand argument."""
    parser.add_argument(
        '--strand', '-s',
        choices=list(STRAND_NAMES),
        default=default,
        help=f"Read strand whose model to use (default: {default})"
    )


def add_output_args(parser: argparse.ArgumentParser,
                    required: bool = True,
                    help_text: str = "Output model file") -> None:
    """Add -o/--output argument."""
    parser.add_argument(
        '-o', '--output', required=required,
        help=help_text
    )


def add_verbose_args(parser: argparse.ArgumentParser) -> None:
    """Add --verbose flag."""
    parser.add_argument(
        '-v', '--verbose', action='store_true',
        help="Verbose output"
    )


def add_version_args(parser: argparse.ArgumentParser) -> None:
    """Add --version flag."""
    from poremodel import __version__
    parser.add_argument(
        '--version', action='version',
        version=f'%(prog)s {__version__}'
    )


def setup_logging(verbose: bool = False) -> None:
    """Log plain messages to stdout; DEBUG when verbose."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format='%(message)s',
        handlers=[logging.StreamHandler(sys.stdout)],
        force=True,
    )
