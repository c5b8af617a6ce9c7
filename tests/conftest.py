"""
Shared pytest fixtures for poremodel tests.
"""
import pytest
import numpy as np
import h5py

from poremodel.core.alphabet import DNA_ALPHABET
from poremodel.core.constants import MODEL_INSTALL_PREFIX


def make_states(n_states, seed=42):
    """Random but plausible (level_mean, level_stdv, sd_mean, sd_stdv) rows."""
    rng = np.random.default_rng(seed)
    return np.column_stack([
        rng.uniform(40.0, 120.0, n_states),
        rng.uniform(0.5, 3.0, n_states),
        rng.uniform(0.5, 2.0, n_states),
        rng.uniform(0.1, 0.6, n_states),
    ])


def write_table(path, rows, name='test_model', header=True):
    """Write (kmer, 4 floats) rows as a text model table."""
    with open(path, 'w') as f:
        if name is not None:
            f.write(f"#model_name\t{name}\n")
        if header:
            f.write("kmer\tlevel_mean\tlevel_stdv\tsd_mean\tsd_stdv\n")
        for kmer, *params in rows:
            f.write(kmer + '\t' + '\t'.join(str(p) for p in params) + '\n')
    return str(path)


def write_fast5(path, rows, scaling, model_file, strands=('template',),
                group='Basecall_2D_000'):
    """
    Build a minimal FAST5 file with per-strand model tables.

    Args:
        rows: (kmer, level_mean, level_stdv, sd_mean, sd_stdv) tuples
        scaling: Dict of the six scaling attributes
        model_file: Value of the Summary model_file attribute
    """
    k = len(rows[0][0])
    dtype = np.dtype([
        ('kmer', f'S{k}'),
        ('level_mean', np.float64),
        ('level_stdv', np.float64),
        ('sd_mean', np.float64),
        ('sd_stdv', np.float64),
        ('weight', np.float64),
    ])
    table = np.array([(kmer.encode(), *params, 1.0) for kmer, *params in rows], dtype=dtype)

    with h5py.File(path, 'w') as f:
        for strand in strands:
            dset = f.create_dataset(f'/Analyses/{group}/BaseCalled_{strand}/Model', data=table)
            for key, value in scaling.items():
                dset.attrs[key] = value
            summary = f.create_group(f'/Analyses/{group}/Summary/basecall_1d_{strand}')
            summary.attrs['model_file'] = model_file
    return str(path)


@pytest.fixture
def k2_states():
    """Raw table for k=2 over ACGT (16 states), in rank order."""
    return make_states(16)


@pytest.fixture
def k4_rows():
    """All 256 4-mers with parameters, in rank order."""
    states = make_states(256, seed=7)
    return [(kmer, *states[i]) for i, kmer in enumerate(DNA_ALPHABET.iter_kmers(4))]


@pytest.fixture
def k4_table(tmp_path, k4_rows):
    """Text table for k=4, rows shuffled."""
    rng = np.random.default_rng(3)
    order = rng.permutation(len(k4_rows))
    return write_table(tmp_path / 'k4.model', [k4_rows[i] for i in order], name='r9_k4')


@pytest.fixture
def scaling():
    return {
        'drift': 0.001,
        'scale': 1.05,
        'scale_sd': 0.9,
        'shift': -2.5,
        'var': 1.4,
        'var_sd': 1.1,
    }


@pytest.fixture
def k4_fast5(tmp_path, k4_rows, scaling):
    """FAST5 file with template and complement k=4 models."""
    return write_fast5(
        tmp_path / 'read.fast5', k4_rows, scaling,
        model_file=MODEL_INSTALL_PREFIX + 'r9/template_median68pA.model',
        strands=('template', 'complement'),
    )
