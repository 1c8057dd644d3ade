"""
Isotropic correlation function from a structure factor.

Inverts a binned isotropic spectrum S(k) back to real space with the
angle-averaged Fourier kernel of the field's dimension:

    C(r) = Σ_k S(k) K_D(k r),   K_1 = cos,  K_2 = J_0,  K_3 = sin(x)/x

and normalizes so that C(0) = 1.

License: BSD-3-Clause
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

import numpy as np
from scipy.integrate import trapezoid
from scipy.special import j0

from ..exceptions import check_dimension
from .spectrum import StructureFactor

logger = logging.getLogger(__name__)


def _sinc(x: np.ndarray) -> np.ndarray:
    # numpy's sinc is the normalized sin(pi x) / (pi x)
    return np.sinc(x / np.pi)


_KERNELS = {1: np.cos, 2: j0, 3: _sinc}


def kernel(dim: int):
    """Angle-averaged Fourier kernel for a ``dim``-dimensional isotropic field."""
    return _KERNELS[check_dimension(dim)]


@dataclass(frozen=True, eq=False)
class AutoCorrelator:
    """
    Sampled isotropic correlation function C(r).

    Attributes
    ----------
    dim : int
        Dimension of the source field.
    r : ndarray
        Equally spaced separations starting at 0.
    cr : ndarray
        Correlation values aligned with ``r``.
    """

    dim: int
    r: np.ndarray
    cr: np.ndarray

    def __post_init__(self):
        if len(self.r) != len(self.cr):
            raise ValueError(
                f"r and cr must have the same length, got {len(self.r)} and {len(self.cr)}"
            )

    @classmethod
    def empty(cls, n: int, dim: int, length: float = np.pi) -> AutoCorrelator:
        """Zeroed correlator with ``n + 1`` samples on ``[0, length]``."""
        check_dimension(dim)
        if n < 1:
            raise ValueError(f"Need at least one interval, got n = {n}")
        return cls(dim=dim, r=np.linspace(0.0, length, n + 1), cr=np.zeros(n + 1))

    def freeze(self) -> AutoCorrelator:
        """Mark ``r`` and ``cr`` read-only and return self."""
        self.r.flags.writeable = False
        self.cr.flags.writeable = False
        return self


def correlation(
    S: StructureFactor,
    n: int = 128,
    normalize: bool = True,
) -> AutoCorrelator:
    """
    Compute the isotropic correlation function C(r) = <u(0) u(r)> from S(k).

    Parameters
    ----------
    S : StructureFactor
        Structure factor from :func:`isotropic_structure_factor`.
    n : int, optional
        Number of intervals in ``r``; ``n + 1`` samples span
        ``[0, S.box_length / 2]``. Keep ``n`` below the spectral resolution
        (Nyquist). Default is 128.
    normalize : bool, optional
        If True, divide by C(0) so that ``cr[0] == 1``. Default is True.

    Returns
    -------
    C : AutoCorrelator
        Read-only correlation function.

    Examples
    --------
    >>> import numpy as np
    >>> from isospec import isotropic_structure_factor, correlation
    >>> field = np.random.default_rng(0).standard_normal((64, 64))
    >>> C = correlation(isotropic_structure_factor(np.fft.rfftn(field)))
    >>> float(C.cr[0])
    1.0
    """
    K = kernel(S.dim)
    C = AutoCorrelator.empty(n, S.dim, length=S.box_length / 2)

    # One row per separation r, one column per bin k
    C.cr[:] = K(np.outer(C.r, S.k)) @ np.asarray(S.sk)

    if normalize:
        if C.cr[0] != 0:
            C.cr[:] = C.cr / C.cr[0]
        else:
            logger.warning("C(0) is zero, correlation left unnormalized")

    return C.freeze()


def correlation_length(C: AutoCorrelator, threshold: float = 0.0) -> float:
    """
    Estimate the correlation length from a correlation function.

    The correlation length is the separation at which ``C.cr`` first drops
    below ``threshold``.

    Parameters
    ----------
    C : AutoCorrelator
        Normalized correlation function (``cr[0] = 1``).
    threshold : float, optional
        Threshold value. Default is 0.0 (first zero crossing).

    Returns
    -------
    l_corr : float
        Estimated correlation length, linearly interpolated between samples.
        The end of the sampled range, ``r[-1]``, if ``cr`` never crosses the
        threshold.
    """
    r = np.asarray(C.r)
    cr = np.asarray(C.cr)

    for i, c in enumerate(cr):
        if c < threshold:
            if i > 0:
                c_prev = cr[i - 1]
                # Interpolate: find r where C(r) = threshold
                frac = (c_prev - threshold) / (c_prev - c + 1e-30)
                return float(r[i - 1] + frac * (r[i] - r[i - 1]))
            return float(r[i])

    return float(r[-1])


def integral_correlation_length(C: AutoCorrelator) -> float:
    """
    Compute the integral correlation length.

    The integral correlation length is defined as:
        L = ∫₀^∞ C(r) dr

    The integral stops at the first zero crossing to avoid issues with
    oscillating tails.

    Parameters
    ----------
    C : AutoCorrelator
        Normalized correlation function (``cr[0] = 1``).

    Returns
    -------
    L : float
        Integral correlation length.
    """
    r = np.asarray(C.r)
    cr = np.asarray(C.cr)

    n_integrate = len(cr)
    for i, c in enumerate(cr):
        if c < 0:
            n_integrate = i
            break

    return float(trapezoid(cr[:n_integrate], x=r[:n_integrate]))
