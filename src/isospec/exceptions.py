"""
Exceptions raised by isospec.

Both concrete errors also derive from ValueError, so callers that already
catch ValueError around the analysis functions keep working.

License: BSD-3-Clause
"""


class IsospecError(Exception):
    """Base class for isospec errors."""


class ShapeMismatchError(IsospecError, ValueError):
    """Two spectra that must share a shape do not."""


class UnsupportedDimensionError(IsospecError, ValueError):
    """Array rank or record dimension outside {1, 2, 3}."""


def check_dimension(dim: int) -> int:
    """Return ``dim`` unchanged, or raise if it is not 1, 2 or 3."""
    if dim not in (1, 2, 3):
        raise UnsupportedDimensionError(f"Dimension must be 1, 2, or 3, got {dim}")
    return dim
