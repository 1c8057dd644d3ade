"""
isospec - Isotropic Structure Factors and Correlation Functions.

A Python package for reducing the discrete Fourier spectrum of a 1D, 2D or
3D scalar or vector field to angle-averaged statistics.

    Features
    --------
    - Isotropic structure factor S(k) from rfftn or fftn spectra
    - Half-spectrum edge correction and unitary normalization
    - Vector-field and cross-power (budget) spectra
    - Isotropic correlation function C(r) via cos / J0 / sinc kernels
- Correlation lengths and power-law fits

Quick Start
-----------
>>> import numpy as np
>>> from isospec import isotropic_structure_factor, correlation
>>> field = np.random.default_rng(42).standard_normal((64, 64, 64))
>>> S = isotropic_structure_factor(np.fft.rfftn(field))
>>> C = correlation(S, n=32)

License
-------
BSD-3-Clause
"""

import logging

__version__ = "0.1.0"

# Structure factor and correlation
from .analysis import (
    StructureFactor,
    AutoCorrelator,
    isotropic_structure_factor,
    budget,
    correlation,
    correlation_length,
    integral_correlation_length,
    fit_power_law,
)

# Wavenumber space
from .kspace import (
    Convention,
    kgrid,
    normalization,
)

from .exceptions import (
    IsospecError,
    ShapeMismatchError,
    UnsupportedDimensionError,
)
from .logging_config import setup_logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    # Version
    "__version__",
    # Records
    "StructureFactor",
    "AutoCorrelator",
    # Structure factor
    "isotropic_structure_factor",
    "budget",
    "fit_power_law",
    # Correlation
    "correlation",
    "correlation_length",
    "integral_correlation_length",
    # Wavenumber space
    "Convention",
    "kgrid",
    "normalization",
    # Errors
    "IsospecError",
    "ShapeMismatchError",
    "UnsupportedDimensionError",
    # Logging
    "setup_logging",
]
