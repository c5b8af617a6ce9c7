"""
poremodel model I/O module

Handles building PoreModel instances from:
- text tables: one "kmer level_mean level_stdv sd_mean sd_stdv" row per k-mer,
  with an optional "#model_name <name>" header line
- FAST5 files: the per-strand model table and scaling record written by the
  basecaller (see poremodel.core.fast5_reader)

and writing them back out as text tables.
"""

import logging
import os
import warnings
from typing import Optional

import numpy as np

from poremodel.core.alphabet import DNA_ALPHABET, Alphabet
from poremodel.core.constants import MODEL_INSTALL_PREFIX, STATE_FIELDS, resolve_strand
from poremodel.core.errors import ParseError, SizeMismatchError
from poremodel.core.fast5_reader import Fast5ModelReader
from poremodel.core.model import STATE_DTYPE, PoreModel, ScalingParams

logger = logging.getLogger(__name__)

MODEL_NAME_TAG = '#model_name'


# =============================================================================
# Text tables
# =============================================================================

def load_model(filepath: str, alphabet: Alphabet = DNA_ALPHABET,
               strict: bool = False) -> PoreModel:
    """
    Load an unscaled model from a text table.

    Data rows may appear in any order; each is stored at the rank of its
    k-mer. The first data row fixes k.

    Args:
        filepath: Path to the model table
        alphabet: Alphabet used to rank k-mers
        strict: If True, also require every rank to be written exactly once.
            By default only the total row count is checked, so a duplicated
            k-mer can mask a missing one (a warning is logged in that case).

    Returns:
        PoreModel with no scaling coefficients

    Raises:
        ParseError: malformed data row
        SizeMismatchError: row count differs from alphabet.get_num_strings(k)
        UnsupportedAlphabetError: k-mer symbol not in the alphabet
    """
    name = None
    k = None
    states = None
    written = None
    n_inserted = 0

    with open(filepath, 'r') as f:
        for line_no, line in enumerate(f, start=1):
            tokens = line.split()

            if MODEL_NAME_TAG in line:
                idx = tokens.index(MODEL_NAME_TAG) if MODEL_NAME_TAG in tokens else 0
                if idx + 1 < len(tokens):
                    name = tokens[idx + 1]

            # header, comments and blank lines
            if not tokens or line.startswith('#') or tokens[0] == 'kmer':
                continue

            if len(tokens) < 5:
                raise ParseError(
                    f"expected 5 fields (kmer + 4 parameters), found {len(tokens)}",
                    filepath, line_no,
                )
            kmer = tokens[0]
            try:
                params = tuple(float(t) for t in tokens[1:5])
            except ValueError as e:
                raise ParseError(str(e), filepath, line_no) from None

            if k is None:
                k = len(kmer)
                n_states = alphabet.get_num_strings(k)
                states = np.zeros(n_states, dtype=STATE_DTYPE)
                written = np.zeros(n_states, dtype=np.int64)
            elif len(kmer) != k:
                raise ParseError(
                    f"k-mer '{kmer}' has length {len(kmer)}, expected {k}",
                    filepath, line_no,
                )

            rank = alphabet.kmer_rank(kmer, k)
            states[rank] = params
            written[rank] += 1
            n_inserted += 1

    if states is None:
        raise SizeMismatchError(f"{filepath}: no data rows found", found=0)

    if n_inserted != len(states):
        raise SizeMismatchError(
            f"{filepath}: found {n_inserted} data rows, expected {len(states)} "
            f"for k={k}",
            expected=len(states), found=n_inserted,
        )

    n_bad = int(np.count_nonzero(written != 1))
    if n_bad:
        msg = f"{filepath}: {n_bad} k-mer(s) missing or listed more than once"
        if strict:
            raise SizeMismatchError(msg, expected=len(states), found=n_inserted)
        logger.warning(msg)

    if name is None:
        name = os.path.basename(filepath)

    logger.debug(f"Loaded model '{name}' from {filepath}: k={k}, {n_inserted} states")
    return PoreModel(states, k, alphabet=alphabet, name=name)


def save_model(model: PoreModel, filepath: str, model_name: Optional[str] = None):
    """
    Write a model's raw table as text.

    Rows are written in rank order, so the k-mer on row i is
    alphabet.unrank(i, k). Floats are written with full precision so that
    load_model reproduces the table exactly.

    Args:
        model: PoreModel
        filepath: Output path
        model_name: Name for the header line (defaults to model.name)
    """
    out_name = model_name or model.name
    if not out_name:
        warnings.warn(f"Writing model to '{filepath}' with an empty model name.")

    alphabet = model.alphabet
    kmer = alphabet.base(0) * model.k
    with open(filepath, 'w') as f:
        f.write(f"{MODEL_NAME_TAG}\t{out_name}\n")
        for row in model.states:
            values = '\t'.join(repr(float(row[field])) for field in STATE_FIELDS)
            f.write(f"{kmer}\t{values}\n")
            kmer = alphabet.lexicographic_next(kmer)

    logger.debug(f"Wrote {len(model)} states of model '{out_name}' to {filepath}")


# =============================================================================
# FAST5 containers
# =============================================================================

def model_name_from_path(model_file: str) -> str:
    """
    Shorten a basecaller model path into a name usable as a filename fragment.

    The installation prefix is stripped when present and every '/' becomes '_'.
    """
    if model_file.startswith(MODEL_INSTALL_PREFIX):
        model_file = model_file[len(MODEL_INSTALL_PREFIX):]
    return model_file.replace('/', '_')


def load_model_from_fast5(source, strand=0, alphabet: Alphabet = DNA_ALPHABET) -> PoreModel:
    """
    Load the per-read, scaled model for one strand of a FAST5 file.

    Args:
        source: Path to a FAST5 file, or a reader exposing get_model(strand),
            get_model_parameters(strand) and get_model_file(strand)
        strand: 0/'template' or 1/'complement'
        alphabet: Alphabet used to rank k-mers

    Returns:
        Scaled PoreModel

    Raises:
        SizeMismatchError: record count differs from alphabet.get_num_strings(k)
        ParseError: a record's k-mer length differs from the first record's
        KeyError: the file has no model records for this strand
    """
    if isinstance(source, (str, os.PathLike)):
        with Fast5ModelReader(source) as reader:
            return _model_from_reader(reader, strand, alphabet)
    return _model_from_reader(source, strand, alphabet)


def _model_from_reader(reader, strand, alphabet: Alphabet) -> PoreModel:
    strand = resolve_strand(strand)

    entries = reader.get_model(strand)
    if len(entries) == 0:
        raise SizeMismatchError(f"No model records for strand {strand}", found=0)

    k = len(entries[0][0])
    states = np.zeros(alphabet.get_num_strings(k), dtype=STATE_DTYPE)
    if len(entries) != len(states):
        raise SizeMismatchError(
            f"Strand {strand} has {len(entries)} model records, expected "
            f"{len(states)} for k={k}",
            expected=len(states), found=len(entries),
        )

    for i, entry in enumerate(entries):
        kmer = entry[0]
        if len(kmer) != k:
            raise ParseError(
                f"strand {strand} record {i}: k-mer '{kmer}' has length "
                f"{len(kmer)}, expected {k}"
            )
        states[alphabet.kmer_rank(kmer, k)] = tuple(float(v) for v in entry[1:5])

    scaling = ScalingParams.coerce(reader.get_model_parameters(strand))
    name = model_name_from_path(reader.get_model_file(strand))

    model = PoreModel(states, k, alphabet=alphabet, name=name, scaling=scaling)
    logger.debug(f"Loaded strand {strand} model '{name}' from container: k={k}, {scaling}")
    return model
