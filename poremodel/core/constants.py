"""Fixed values shared by the loaders."""

# Installation prefix of the basecaller's bundled model files. Paths recorded
# in FAST5 files under this directory are shortened before use as a name.
MODEL_INSTALL_PREFIX = '/opt/chimaera/model/'

# Strand index -> name used in FAST5 group names
STRAND_NAMES = ('template', 'complement')

# Basecall groups searched (in order) for per-strand model tables
DEFAULT_BASECALL_GROUPS = ('Basecall_2D_000', 'Basecall_1D_000')

# Raw per-kmer fields, in text-table column order
STATE_FIELDS = ('level_mean', 'level_stdv', 'sd_mean', 'sd_stdv')

# Scaling coefficients, in FAST5 attribute order
SCALING_FIELDS = ('drift', 'scale', 'scale_sd', 'shift', 'var', 'var_sd')


def resolve_strand(strand) -> int:
    """Map a strand index or name ('template'/'complement') to 0 or 1."""
    if isinstance(strand, str):
        name = strand.lower()
        if name not in STRAND_NAMES:
            raise ValueError(
                f"Unknown strand '{strand}'. Expected one of {STRAND_NAMES}"
            )
        return STRAND_NAMES.index(name)

    index = int(strand)
    if index not in (0, 1):
        raise ValueError(f"Strand index must be 0 or 1, got {strand}")
    return index
