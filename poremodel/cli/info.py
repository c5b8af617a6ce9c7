#!/usr/bin/env python3
"""
poremodel info CLI entry point.
Summarises a text pore model table.
"""

import argparse
import logging

from poremodel.core.errors import PoreModelError
from poremodel.core.model_io import load_model
from poremodel.cli.common import add_verbose_args, add_version_args, setup_logging

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Print a summary of a pore model table',
    )
    add_version_args(parser)
    parser.add_argument('model', help='Pore model table (kmer + 4 parameter columns)')
    parser.add_argument('--strict', action='store_true',
                        help='Fail if any k-mer is missing or listed twice')
    add_verbose_args(parser)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        model = load_model(args.model, strict=args.strict)
    except (PoreModelError, OSError) as e:
        logger.error(f"Could not load {args.model}: {e}")
        return 1

    level_mean = model.states['level_mean']
    logger.info(f"Model: {model.name}")
    logger.info(f"  k: {model.k}")
    logger.info(f"  States: {len(model)}")
    logger.info(f"  Level mean range: {level_mean.min():.3f} - {level_mean.max():.3f}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
