#!/usr/bin/env python3
"""
poremodel export CLI entry point.
Writes the per-read pore model stored in a FAST5 file as a text table.
"""

import argparse
import logging

from poremodel.core.errors import PoreModelError
from poremodel.core.model_io import load_model_from_fast5, save_model
from poremodel.cli.common import (
    add_output_args, add_strand_args, add_verbose_args, add_version_args, setup_logging,
)

logger = logging.getLogger(__name__)


def parse_args(argv=None):
    parser = argparse.ArgumentParser(
        description='Export the pore model of one read strand from a FAST5 file',
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog='''
Examples:
  # Template strand model
  poremodel-export read.fast5 -o template.model

  # Complement strand, custom header name
  poremodel-export read.fast5 -s complement -o comp.model --model-name r9_comp
'''
    )
    add_version_args(parser)
    parser.add_argument('fast5', help='FAST5 read file with basecaller model records')
    add_output_args(parser)
    add_strand_args(parser)
    parser.add_argument('--model-name', default=None,
                        help='Name written to the #model_name header (default: from FAST5)')
    add_verbose_args(parser)
    return parser.parse_args(argv)


def main(argv=None) -> int:
    args = parse_args(argv)
    setup_logging(args.verbose)

    try:
        model = load_model_from_fast5(args.fast5, args.strand)
    except (PoreModelError, OSError, KeyError) as e:
        logger.error(f"Could not read {args.strand} model from {args.fast5}: {e}")
        return 1

    logger.info(f"Loaded {args.strand} model '{model.name}' (k={model.k}, {len(model)} states)")
    logger.info(f"  shift={model.shift:.4f} scale={model.scale:.4f} "
                f"drift={model.drift:.6f} var={model.var:.4f}")

    try:
        save_model(model, args.output, model_name=args.model_name)
    except OSError as e:
        logger.error(f"Could not write {args.output}: {e}")
        return 1

    logger.info(f"Wrote {args.output}")
    return 0


if __name__ == '__main__':
    raise SystemExit(main())
