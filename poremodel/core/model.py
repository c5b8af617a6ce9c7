"""
poremodel model module

Provides:
1. PoreModel: dense, rank-indexed table of per-kmer Gaussian level parameters
2. ScalingParams: per-read affine recalibration coefficients
3. bake_gaussian_parameters: the scaling transform applied to a raw table

A PoreModel is either unscaled (raw table only) or scaled (raw table,
coefficients and the parameters derived from them). Scaled parameters are
only ever produced by bake_gaussian_parameters, and are recomputed whenever
the raw table or the coefficients change.
"""

from collections.abc import Mapping, Sequence
from dataclasses import asdict, dataclass
from typing import Optional

import numpy as np

from poremodel.core.alphabet import DNA_ALPHABET, Alphabet
from poremodel.core.constants import SCALING_FIELDS, STATE_FIELDS
from poremodel.core.errors import NumericDomainError, SizeMismatchError


STATE_DTYPE = np.dtype([(field, np.float64) for field in STATE_FIELDS])
SCALED_DTYPE = np.dtype([
    ('mean', np.float64),
    ('stdv', np.float64),
    ('log_stdv', np.float64),
])


@dataclass(frozen=True)
class ScalingParams:
    """Shift/scale/drift/var coefficients recorded for one read strand."""
    drift: float = 0.0
    scale: float = 1.0
    scale_sd: float = 1.0
    shift: float = 0.0
    var: float = 1.0
    var_sd: float = 1.0

    @classmethod
    def from_mapping(cls, values: Mapping) -> 'ScalingParams':
        """Build from a dict-like object (e.g. HDF5 attributes)."""
        missing = [f for f in SCALING_FIELDS if f not in values]
        if missing:
            raise KeyError(f"Missing scaling parameters: {', '.join(missing)}")
        return cls(**{f: float(values[f]) for f in SCALING_FIELDS})

    @classmethod
    def coerce(cls, values) -> 'ScalingParams':
        """
        Accept a ScalingParams, a mapping, a (drift, scale, scale_sd, shift,
        var, var_sd) sequence, or any object with the six attributes.
        """
        if isinstance(values, cls):
            return values
        if isinstance(values, Mapping):
            return cls.from_mapping(values)
        if isinstance(values, (Sequence, np.ndarray)) and not isinstance(values, (str, bytes)):
            if len(values) != len(SCALING_FIELDS):
                raise ValueError(
                    f"Scaling record must have {len(SCALING_FIELDS)} values "
                    f"({', '.join(SCALING_FIELDS)}), got {len(values)}"
                )
            return cls(**{f: float(v) for f, v in zip(SCALING_FIELDS, values)})
        return cls(**{f: float(getattr(values, f)) for f in SCALING_FIELDS})

    def to_dict(self) -> dict:
        return asdict(self)


def as_state_array(states) -> np.ndarray:
    """
    Convert a raw parameter table to a fresh STATE_DTYPE array.

    Accepts a structured array with the four state fields, an (n, 4) float
    array, or a sequence of (level_mean, level_stdv, sd_mean, sd_stdv) rows.
    """
    if isinstance(states, np.ndarray) and states.dtype.names is not None:
        missing = [f for f in STATE_FIELDS if f not in states.dtype.names]
        if missing:
            raise ValueError(f"State table is missing fields: {', '.join(missing)}")
        out = np.empty(len(states), dtype=STATE_DTYPE)
        for field in STATE_FIELDS:
            out[field] = states[field]
        return out

    arr = np.asarray(states, dtype=np.float64)
    if arr.size == 0:
        arr = arr.reshape(0, len(STATE_FIELDS))
    if arr.ndim != 2 or arr.shape[1] != len(STATE_FIELDS):
        raise ValueError(
            f"State table must have shape (n, {len(STATE_FIELDS)}), got {arr.shape}"
        )
    out = np.empty(arr.shape[0], dtype=STATE_DTYPE)
    for i, field in enumerate(STATE_FIELDS):
        out[field] = arr[:, i]
    return out


def bake_gaussian_parameters(states: np.ndarray, scaling: ScalingParams) -> np.ndarray:
    """
    Apply the per-read recalibration to a raw state table.

    mean = level_mean * scale + shift
    stdv = level_stdv * var
    log_stdv = ln(stdv), precomputed for the scoring loops

    drift, scale_sd and var_sd are carried on the model but not applied here.

    Args:
        states: STATE_DTYPE array
        scaling: Recalibration coefficients

    Returns:
        SCALED_DTYPE array, one row per state

    Raises:
        NumericDomainError: if any scaled stdv is not strictly positive
    """
    stdv = states['level_stdv'] * scaling.var
    bad = ~(stdv > 0)
    if bad.any():
        first = int(np.flatnonzero(bad)[0])
        raise NumericDomainError(
            f"{int(bad.sum())} scaled level stdv value(s) are not positive "
            f"(first at rank {first}: {stdv[first]!r}); log_stdv is undefined"
        )

    scaled = np.empty(len(states), dtype=SCALED_DTYPE)
    scaled['mean'] = states['level_mean'] * scaling.scale + scaling.shift
    scaled['stdv'] = stdv
    scaled['log_stdv'] = np.log(stdv)
    return scaled


def _readonly(arr: np.ndarray) -> np.ndarray:
    arr.flags.writeable = False
    return arr


class PoreModel:
    """
    Per-kmer emission model for one pore type.

    Index i of ``states`` (and ``scaled_params``) holds the parameters of the
    k-mer whose alphabet rank is i. Both arrays are owned by the model and
    exposed read-only; use update_states() to replace the table.
    """

    def __init__(self, states, k: int, alphabet: Alphabet = DNA_ALPHABET,
                 name: str = '', scaling=None):
        """
        Args:
            states: Raw parameter table (see as_state_array)
            k: k-mer length
            alphabet: Alphabet defining the rank of each k-mer
            name: Model name (provenance)
            scaling: Optional ScalingParams; if given the model is scaled immediately
        """
        expected = alphabet.get_num_strings(k)
        table = as_state_array(states)
        if len(table) != expected:
            raise SizeMismatchError(
                f"State table has {len(table)} rows, expected {expected} "
                f"for k={k} over a {alphabet.size()}-symbol alphabet",
                expected=expected, found=len(table),
            )

        self.k = k
        self.alphabet = alphabet
        self.name = name
        self._states = _readonly(table)
        self._scaling: Optional[ScalingParams] = None
        self._scaled: Optional[np.ndarray] = None

        if scaling is not None:
            self.set_scaling(scaling)

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def states(self) -> np.ndarray:
        return self._states

    @property
    def scaled_params(self) -> Optional[np.ndarray]:
        return self._scaled

    @property
    def scaling(self) -> Optional[ScalingParams]:
        return self._scaling

    @property
    def is_scaled(self) -> bool:
        return self._scaled is not None

    def _coefficient(self, field: str) -> Optional[float]:
        if self._scaling is None:
            return None
        return getattr(self._scaling, field)

    shift = property(lambda self: self._coefficient('shift'))
    scale = property(lambda self: self._coefficient('scale'))
    drift = property(lambda self: self._coefficient('drift'))
    var = property(lambda self: self._coefficient('var'))
    scale_sd = property(lambda self: self._coefficient('scale_sd'))
    var_sd = property(lambda self: self._coefficient('var_sd'))

    def __len__(self):
        return len(self._states)

    def __repr__(self):
        status = 'scaled' if self.is_scaled else 'unscaled'
        return f"PoreModel(name={self.name!r}, k={self.k}, n_states={len(self)}, {status})"

    # -------------------------------------------------------------------------
    # Lookup
    # -------------------------------------------------------------------------

    def rank(self, kmer: str) -> int:
        return self.alphabet.kmer_rank(kmer, self.k)

    def get_parameters(self, kmer: str) -> np.void:
        """Raw (level_mean, level_stdv, sd_mean, sd_stdv) row for a k-mer."""
        return self._states[self.rank(kmer)]

    def get_scaled_parameters(self, kmer: str) -> np.void:
        """Scaled (mean, stdv, log_stdv) row for a k-mer."""
        if self._scaled is None:
            raise ValueError(f"Model '{self.name}' has not been scaled")
        return self._scaled[self.rank(kmer)]

    # -------------------------------------------------------------------------
    # Scaling
    # -------------------------------------------------------------------------

    def set_scaling(self, scaling) -> None:
        """Assign recalibration coefficients and rescale."""
        scaling = ScalingParams.coerce(scaling)
        scaled = bake_gaussian_parameters(self._states, scaling)
        self._scaling = scaling
        self._scaled = _readonly(scaled)

    def clear_scaling(self) -> None:
        """Drop coefficients and scaled parameters."""
        self._scaling = None
        self._scaled = None

    def bake_gaussian_parameters(self) -> None:
        """Recompute the scaled parameters from the current table and coefficients."""
        if self._scaling is None:
            raise ValueError(
                f"Model '{self.name}' has no scaling coefficients; use set_scaling()"
            )
        self._scaled = _readonly(bake_gaussian_parameters(self._states, self._scaling))

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------

    def update_states(self, new_states) -> None:
        """
        Replace the raw state table.

        Args:
            new_states: Another PoreModel, or a table accepted by as_state_array.
                Must have the same number of rows as the current table.

        If the model is scaled, the new table is rescaled with the current
        coefficients. On any error the model is left unchanged.
        """
        if isinstance(new_states, PoreModel):
            new_states = new_states.states

        table = as_state_array(new_states)
        if len(table) != len(self._states):
            raise SizeMismatchError(
                f"Replacement table has {len(table)} rows, model '{self.name}' "
                f"has {len(self._states)}",
                expected=len(self._states), found=len(table),
            )

        scaled = None
        if self._scaling is not None:
            scaled = _readonly(bake_gaussian_parameters(table, self._scaling))

        self._states = _readonly(table)
        self._scaled = scaled

    def write(self, filepath: str, model_name: Optional[str] = None) -> None:
        """Write the raw table as text; see poremodel.core.model_io.save_model."""
        from poremodel.core.model_io import save_model
        save_model(self, filepath, model_name=model_name)
