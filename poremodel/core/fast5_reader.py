"""
FAST5 reader for poremodel

Reads the per-strand pore model records written by the basecaller into
FAST5 (HDF5) read files:

- the per-kmer model table  /Analyses/<group>/BaseCalled_<strand>/Model
- its scaling attributes     drift, scale, scale_sd, shift, var, var_sd
- the model file path        /Analyses/<group>/Summary/basecall_1d_<strand> @model_file

Nothing else in the file is interpreted.
"""

import logging
from typing import List, NamedTuple, Optional, Sequence

import h5py
import numpy as np

from poremodel.core.constants import DEFAULT_BASECALL_GROUPS, STATE_FIELDS, STRAND_NAMES, resolve_strand
from poremodel.core.model import ScalingParams

logger = logging.getLogger(__name__)


class ModelEntry(NamedTuple):
    """One row of a FAST5 model table."""
    kmer: str
    level_mean: float
    level_stdv: float
    sd_mean: float
    sd_stdv: float


def _decode(value) -> str:
    if isinstance(value, (bytes, np.bytes_)):
        return value.decode('ascii')
    return str(value)


class Fast5ModelReader:
    """
    Read-only access to the model records of one FAST5 file.

    Usable as a context manager:

        with Fast5ModelReader(path) as reader:
            entries = reader.get_model(0)
    """

    def __init__(self, filepath: str,
                 basecall_groups: Sequence[str] = DEFAULT_BASECALL_GROUPS):
        self.filepath = filepath
        self.basecall_groups = tuple(basecall_groups)
        self._file: Optional[h5py.File] = h5py.File(filepath, 'r')

    def close(self) -> None:
        if self._file is not None:
            self._file.close()
            self._file = None

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc, tb):
        self.close()

    def _require_open(self) -> h5py.File:
        if self._file is None:
            raise ValueError(f"FAST5 file {self.filepath} is closed")
        return self._file

    def _find(self, relative: str) -> str:
        """Return the first /Analyses/<group>/<relative> path present in the file."""
        f = self._require_open()
        for group in self.basecall_groups:
            path = f"/Analyses/{group}/{relative}"
            if path in f:
                return path
        tried = ', '.join(f"/Analyses/{g}/{relative}" for g in self.basecall_groups)
        raise KeyError(f"{self.filepath}: none of [{tried}] found")

    def _model_path(self, strand) -> str:
        name = STRAND_NAMES[resolve_strand(strand)]
        return self._find(f"BaseCalled_{name}/Model")

    def has_model(self, strand) -> bool:
        try:
            self._model_path(strand)
        except KeyError:
            return False
        return True

    def get_model(self, strand) -> List[ModelEntry]:
        """Per-kmer model table for a strand, in file order."""
        path = self._model_path(strand)
        table = self._require_open()[path][()]
        names = table.dtype.names or ()
        missing = [f for f in ('kmer',) + STATE_FIELDS if f not in names]
        if missing:
            raise KeyError(f"{self.filepath}:{path} is missing columns: {', '.join(missing)}")

        entries = [
            ModelEntry(_decode(row['kmer']),
                       *(float(row[field]) for field in STATE_FIELDS))
            for row in table
        ]
        logger.debug(f"Read {len(entries)} model entries from {self.filepath}:{path}")
        return entries

    def get_model_parameters(self, strand) -> ScalingParams:
        """Scaling coefficients stored as attributes of the strand's model table."""
        path = self._model_path(strand)
        attrs = self._require_open()[path].attrs
        try:
            return ScalingParams.from_mapping(attrs)
        except KeyError as e:
            raise KeyError(f"{self.filepath}:{path}: {e.args[0]}") from None

    def get_model_file(self, strand) -> str:
        """Path of the model file the basecaller used for this strand."""
        name = STRAND_NAMES[resolve_strand(strand)]
        path = self._find(f"Summary/basecall_1d_{name}")
        attrs = self._require_open()[path].attrs
        if 'model_file' not in attrs:
            raise KeyError(f"{self.filepath}:{path} has no 'model_file' attribute")
        return _decode(attrs['model_file'])
