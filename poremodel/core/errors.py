"""
Exceptions raised while building, scaling or writing pore models.

File system failures are not wrapped: missing or unwritable files surface as
the builtin OSError subclasses (FileNotFoundError, PermissionError, ...).
"""


class PoreModelError(Exception):
    """Base class for all pore model errors."""


class ParseError(PoreModelError, ValueError):
    """A text table data line could not be split into kmer + four floats."""

    def __init__(self, message: str, filepath=None, line_no=None):
        self.filepath = filepath
        self.line_no = line_no
        if filepath is not None and line_no is not None:
            message = f"{filepath}:{line_no}: {message}"
        super().__init__(message)


class SizeMismatchError(PoreModelError, ValueError):
    """Number of rows/records differs from the number of k-mers of length k."""

    def __init__(self, message: str, expected=None, found=None):
        self.expected = expected
        self.found = found
        super().__init__(message)


class UnsupportedAlphabetError(PoreModelError, ValueError):
    """The alphabet cannot represent the requested k-mer length or symbol."""


class NumericDomainError(PoreModelError, ArithmeticError):
    """A scaled standard deviation is not strictly positive."""
