"""Pore model table, alphabet ranking and model I/O."""

from poremodel.core.alphabet import Alphabet, SymbolAlphabet, DNAAlphabet, DNA_ALPHABET
from poremodel.core.errors import (
    PoreModelError, ParseError, SizeMismatchError,
    UnsupportedAlphabetError, NumericDomainError,
)
from poremodel.core.model import PoreModel, ScalingParams, bake_gaussian_parameters
from poremodel.core.fast5_reader import Fast5ModelReader, ModelEntry
from poremodel.core.model_io import load_model, save_model, load_model_from_fast5, model_name_from_path
