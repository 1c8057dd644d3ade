"""
Isotropic spectral statistics of fields.

This module provides:

- The isotropic structure factor S(k) and co-spectrum (budget)
- The isotropic correlation function C(r) derived from S(k)
- Correlation lengths and power-law fits
"""

from .spectrum import (
    StructureFactor,
    setup,
    structure_factor_,
    budget_,
    isotropic_structure_factor,
    budget,
    fit_power_law,
)
from .autocorrelation import (
    AutoCorrelator,
    kernel,
    correlation,
    correlation_length,
    integral_correlation_length,
)

__all__ = [
    # Structure factor
    "StructureFactor",
    "setup",
    "structure_factor_",
    "budget_",
    "isotropic_structure_factor",
    "budget",
    "fit_power_law",
    # Correlation
    "AutoCorrelator",
    "kernel",
    "correlation",
    "correlation_length",
    "integral_correlation_length",
]
