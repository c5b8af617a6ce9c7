"""
poremodel - Nanopore pore model tables: per-kmer Gaussian current levels,
per-read recalibration, and text/FAST5 I/O.
"""

__version__ = "1.0.0"

from poremodel.core.alphabet import Alphabet, DNAAlphabet, DNA_ALPHABET
from poremodel.core.model import PoreModel, ScalingParams
from poremodel.core.model_io import load_model, save_model, load_model_from_fast5
