"""
Wavenumber-space building blocks.

- Transform conventions and wavenumber grids
- Radial bin indices and bin counts
- Half-spectrum edge weights and normalization constants
"""

from .grid import (
    Convention,
    KGrid,
    as_convention,
    wavenumber_axis,
    kgrid,
    kbin,
    kmax,
)
from .weights import (
    scale_edges,
    scaled_edges,
    normalization,
)

__all__ = [
    # Grid
    "Convention",
    "KGrid",
    "as_convention",
    "wavenumber_axis",
    "kgrid",
    "kbin",
    "kmax",
    # Weights
    "scale_edges",
    "scaled_edges",
    "normalization",
]
