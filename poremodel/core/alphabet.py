"""
Alphabet module for poremodel

Maps k-mers to dense integer ranks and back. Ranks follow lexicographic
order over the alphabet's symbols, so rank 0 is the k-mer made of the first
symbol repeated k times and rank N-1 the k-mer made of the last symbol.

Loaders and writers receive the alphabet as an argument; there is no
module-wide alphabet state other than the immutable DNA_ALPHABET default.
"""

from abc import ABC, abstractmethod
from typing import Dict, Iterator, Sequence

from poremodel.core.errors import UnsupportedAlphabetError


class Alphabet(ABC):
    """Interface used by the pore model loaders and writer."""

    @abstractmethod
    def size(self) -> int:
        """Number of symbols."""

    @abstractmethod
    def base(self, index: int) -> str:
        """Symbol at position ``index`` in lexicographic order."""

    @abstractmethod
    def rank(self, symbol: str) -> int:
        """Position of a single symbol."""

    def get_num_strings(self, k: int) -> int:
        """Number of distinct k-mers of length ``k``."""
        if k <= 0:
            raise UnsupportedAlphabetError(f"k-mer length must be positive, got {k}")
        return self.size() ** k

    def kmer_rank(self, kmer: str, k: int) -> int:
        """Dense rank of the first ``k`` symbols of ``kmer``."""
        if len(kmer) < k:
            raise UnsupportedAlphabetError(
                f"k-mer '{kmer}' is shorter than k={k}"
            )
        n = self.size()
        r = 0
        for symbol in kmer[:k]:
            r = r * n + self.rank(symbol)
        return r

    def unrank(self, rank: int, k: int) -> str:
        """Inverse of kmer_rank."""
        n_strings = self.get_num_strings(k)
        if not 0 <= rank < n_strings:
            raise IndexError(f"rank {rank} out of range for k={k} ({n_strings} k-mers)")
        n = self.size()
        symbols = []
        for _ in range(k):
            rank, r = divmod(rank, n)
            symbols.append(self.base(r))
        return ''.join(reversed(symbols))

    def lexicographic_next(self, kmer: str) -> str:
        """
        Next k-mer in rank order.

        The last k-mer wraps around to the first, like an odometer.
        """
        n = self.size()
        symbols = list(kmer)
        for i in range(len(symbols) - 1, -1, -1):
            r = self.rank(symbols[i])
            if r + 1 < n:
                symbols[i] = self.base(r + 1)
                return ''.join(symbols)
            symbols[i] = self.base(0)
        return ''.join(symbols)

    def iter_kmers(self, k: int) -> Iterator[str]:
        """Yield all k-mers of length ``k`` in rank order."""
        kmer = self.base(0) * k
        for _ in range(self.get_num_strings(k)):
            yield kmer
            kmer = self.lexicographic_next(kmer)


class SymbolAlphabet(Alphabet):
    """Alphabet over an explicit, ordered set of single-character symbols."""

    def __init__(self, symbols: Sequence[str], name: str = ''):
        symbols = tuple(symbols)
        if not symbols:
            raise UnsupportedAlphabetError("alphabet needs at least one symbol")
        if any(len(s) != 1 for s in symbols):
            raise UnsupportedAlphabetError(f"symbols must be single characters: {symbols}")
        if list(symbols) != sorted(set(symbols)):
            raise UnsupportedAlphabetError(
                f"symbols must be unique and sorted: {symbols}"
            )
        self._symbols = symbols
        self._lookup: Dict[str, int] = {s: i for i, s in enumerate(symbols)}
        self.name = name or ''.join(symbols)

    @property
    def symbols(self) -> tuple:
        return self._symbols

    def size(self) -> int:
        return len(self._symbols)

    def base(self, index: int) -> str:
        return self._symbols[index]

    def rank(self, symbol: str) -> int:
        try:
            return self._lookup[symbol]
        except KeyError:
            raise UnsupportedAlphabetError(
                f"symbol '{symbol}' is not in alphabet {self.name}"
            ) from None

    def __repr__(self):
        return f"{type(self).__name__}({''.join(self._symbols)!r})"


class DNAAlphabet(SymbolAlphabet):
    """The four-letter nucleotide alphabet ACGT."""

    def __init__(self):
        super().__init__('ACGT', name='DNA')


DNA_ALPHABET = DNAAlphabet()
