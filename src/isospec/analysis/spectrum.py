"""
Isotropic structure factor of 1D/2D/3D fields.

Reduces a discrete Fourier spectrum ``uk`` (``numpy.fft.rfftn`` or
``numpy.fft.fftn`` output) onto a 1D wavenumber axis by summing the power
|u_k|^2 of every mode into the radial bin ``round(|k|)``. A cross-power
("budget") variant sums Re(conj(u_k) v_k) instead.

Usage
-----
>>> import numpy as np
>>> from isospec import isotropic_structure_factor
>>> field = np.random.default_rng(0).standard_normal((64, 64))
>>> S = isotropic_structure_factor(np.fft.rfftn(field))
>>> S.k.shape == S.sk.shape
True

License: BSD-3-Clause
"""

from __future__ import annotations

import logging
from contextlib import nullcontext
from dataclasses import dataclass

import numpy as np

from ..exceptions import ShapeMismatchError, check_dimension
from ..kspace import Convention, KGrid, as_convention, kgrid, kmax, normalization, scaled_edges

logger = logging.getLogger(__name__)

# Edge weight applied to u_k before squaring: (sqrt(1/2))^2 = 1/2 on the power
AUTO_EDGE_FACTOR = np.sqrt(0.5)
# Edge weight applied to u_k only, so the co-power picks up 1/2 directly
CROSS_EDGE_FACTOR = 0.5


@dataclass(frozen=True, eq=False)
class StructureFactor:
    """
    Binned isotropic structure factor S(k).

    Attributes
    ----------
    dim : int
        Dimension of the source field (1, 2 or 3).
    box_length : float
        Size of the periodic domain.
    dk : float
        Wavenumber spacing, ``2 pi / box_length``.
    k : ndarray
        Bin wavenumbers, ``k[i] = dk * i``.
    sk : ndarray
        Binned (normalized) power, aligned with ``k``.
    """

    dim: int
    box_length: float
    dk: float
    k: np.ndarray
    sk: np.ndarray

    def __post_init__(self):
        if len(self.k) != len(self.sk):
            raise ValueError(
                f"k and sk must have the same length, got {len(self.k)} and {len(self.sk)}"
            )

    @classmethod
    def empty(cls, n: int, dim: int, box_length: float = 2 * np.pi) -> StructureFactor:
        """Zeroed structure factor with ``n + 1`` bins."""
        check_dimension(dim)
        if box_length <= 0:
            raise ValueError(f"box_length must be positive, got {box_length}")
        dk = 2 * np.pi / box_length
        k = dk * np.linspace(0, n, n + 1)
        return cls(dim=dim, box_length=float(box_length), dk=dk, k=k, sk=np.zeros(n + 1))

    def freeze(self) -> StructureFactor:
        """Mark ``k`` and ``sk`` read-only and return self."""
        self.k.flags.writeable = False
        self.sk.flags.writeable = False
        return self


def setup(
    shape: tuple[int, ...],
    convention: Convention | bool = Convention.REAL,
    box_length: float = 2 * np.pi,
    axis: int = -1,
) -> tuple[KGrid, float, StructureFactor]:
    """
    Prepare the wavenumber grid, normalization and an empty S(k).

    The dimension of the result is the number of axes in ``shape``.
    """
    grid = kgrid(shape, convention, axis)
    norm = normalization(shape, convention, axis)
    n = kmax(grid)
    logger.debug("Set up %d bins for shape %s, norm = %.6e", n + 1, grid.shape, norm)
    return grid, norm, StructureFactor.empty(n, grid.ndim, box_length)


def _edges(uk: np.ndarray, grid: KGrid, factor: float, preserve: bool):
    if grid.half_axis is None:
        return nullcontext(uk)
    return scaled_edges(uk, factor, grid.half_axis, restore=preserve)


def _binned(S: StructureFactor, grid: KGrid, uk: np.ndarray) -> np.ndarray:
    if uk.shape != grid.shape:
        raise ShapeMismatchError(
            f"Spectrum shape {uk.shape} does not match k-grid shape {grid.shape}"
        )
    bins = grid.bins().ravel()
    if bins.max() >= len(S.sk):
        raise ValueError(
            f"Structure factor has {len(S.sk)} bins but the grid reaches bin {bins.max()}"
        )
    return bins


def structure_factor_(
    S: StructureFactor,
    grid: KGrid,
    uk: np.ndarray,
    preserve: bool = True,
) -> StructureFactor:
    """
    Add the binned power |u_k|^2 of ``uk`` to ``S.sk`` in place.

    Normalization is left to the caller, so several components of a vector
    field can be accumulated before scaling once.

    Parameters
    ----------
    S : StructureFactor
        Accumulator, usually from :func:`setup`.
    grid : KGrid
        Wavenumber grid matching ``uk``.
    uk : ndarray
        Spectrum of one field component.
    preserve : bool, optional
        Under the real convention the zero and Nyquist planes of ``uk`` are
        scaled by ``sqrt(1/2)`` in place. If True they are restored before
        returning, otherwise ``uk`` is left scaled. Default is True.

    Returns
    -------
    S : StructureFactor
    """
    bins = _binned(S, grid, uk)
    with _edges(uk, grid, AUTO_EDGE_FACTOR, preserve) as scaled:
        power = np.abs(scaled.ravel()) ** 2
    S.sk[:] += np.bincount(bins, weights=power, minlength=len(S.sk))
    return S


def budget_(
    S: StructureFactor,
    grid: KGrid,
    uk: np.ndarray,
    vk: np.ndarray,
    norm: float,
    preserve: bool = True,
) -> StructureFactor:
    """
    Add the normalized co-power Re(conj(u_k) v_k) to ``S.sk`` in place.

    Unlike :func:`structure_factor_`, ``norm`` is applied here to the whole
    of ``S.sk``. Under the real convention only ``uk`` has its edges scaled,
    by 1/2.
    """
    if uk.shape != vk.shape:
        raise ShapeMismatchError(
            f"uk.shape = {uk.shape} should be identical to vk.shape = {vk.shape}"
        )
    bins = _binned(S, grid, uk)
    if np.may_share_memory(uk, vk):
        vk = vk.copy()
    with _edges(uk, grid, CROSS_EDGE_FACTOR, preserve) as scaled:
        copower = np.real(np.conj(scaled.ravel()) * vk.ravel())
    S.sk[:] += np.bincount(bins, weights=copower, minlength=len(S.sk))
    S.sk[:] *= norm
    return S


def isotropic_structure_factor(
    uk: np.ndarray | tuple[np.ndarray, ...],
    isreal: bool = True,
    preserve: bool = True,
    box_length: float = 2 * np.pi,
    axis: int = -1,
    verbose: bool = False,
) -> StructureFactor:
    """
    Compute the isotropic structure factor of a Fourier-transformed field.

    Parameters
    ----------
    uk : ndarray or tuple of ndarray
        Spectrum of a 1D, 2D or 3D field. A tuple of same-shaped spectra is
        treated as the components of a vector field and their powers are
        summed, e.g. ``|u_k|^2 + |v_k|^2``.
    isreal : bool, optional
        True if the field is real and ``uk = rfftn(field)``. False if
        ``uk = fftn(field)``, for complex fields or real fields transformed
        over the full range of modes (more expensive). Default is True.
    preserve : bool, optional
        If True, the input spectra are left unchanged. If False, their
        half-spectrum edge planes are left scaled. Default is True.
    box_length : float, optional
        Size of the periodic domain. Default is 2 pi.
    axis : int, optional
        Axis halved by the real transform. Default is -1 (``rfftn``).
    verbose : bool, optional
        If True, print a short summary. Default is False.

    Returns
    -------
    S : StructureFactor
        Read-only structure factor.

    Raises
    ------
    ShapeMismatchError
        If the components of a vector field differ in shape.
    UnsupportedDimensionError
        If the spectrum is not 1D, 2D or 3D.

    Notes
    -----
    With the real convention, the halved axis must come from a real signal
    of even length ``2 * (uk.shape[axis] - 1)``.
    """
    if isinstance(uk, tuple):
        if not uk:
            raise ValueError("At least one spectrum component is required")
        components = uk
    else:
        components = (uk,)
    components = tuple(c if isinstance(c, np.ndarray) else np.asarray(c) for c in components)

    shape = components[0].shape
    for c in components[1:]:
        if c.shape != shape:
            raise ShapeMismatchError(
                f"All components must share one shape, got {shape} and {c.shape}"
            )

    convention = as_convention(isreal)
    grid, norm, S = setup(shape, convention, box_length, axis)
    for c in components:
        structure_factor_(S, grid, c, preserve=preserve)
    S.sk[:] *= norm

    if verbose:
        print("Isotropic structure factor:")
        print(f"    dim = {S.dim}")
        print(f"    shape = {shape}")
        print(f"    components = {len(components)}")
        print(f"    convention = {convention.value}")
        print(f"    bins = {len(S.k)}")
        print(f"    total power = {S.sk.sum():.6e}")

    return S.freeze()


def budget(
    uk: np.ndarray,
    vk: np.ndarray,
    isreal: bool = True,
    preserve: bool = True,
    box_length: float = 2 * np.pi,
    axis: int = -1,
    verbose: bool = False,
) -> StructureFactor:
    """
    Compute the isotropic co-spectrum Re(conj(u_k) v_k) of two fields.

    Parameters are those of :func:`isotropic_structure_factor`. Only ``uk``
    is scaled in place under the real convention.

    Raises
    ------
    ShapeMismatchError
        If ``uk`` and ``vk`` differ in shape. Nothing is computed or mutated.
    """
    uk = uk if isinstance(uk, np.ndarray) else np.asarray(uk)
    vk = vk if isinstance(vk, np.ndarray) else np.asarray(vk)
    if uk.shape != vk.shape:
        raise ShapeMismatchError(
            f"uk.shape = {uk.shape} should be identical to vk.shape = {vk.shape}"
        )

    convention = as_convention(isreal)
    grid, norm, S = setup(uk.shape, convention, box_length, axis)
    budget_(S, grid, uk, vk, norm, preserve=preserve)

    if verbose:
        print("Isotropic co-spectrum:")
        print(f"    dim = {S.dim}")
        print(f"    shape = {uk.shape}")
        print(f"    convention = {convention.value}")
        print(f"    bins = {len(S.k)}")
        print(f"    total co-power = {S.sk.sum():.6e}")

    return S.freeze()


def fit_power_law(
    S: StructureFactor,
    k_min: float | None = None,
    k_max: float | None = None,
) -> tuple[float, float, float]:
    """
    Fit a power law to the structure factor: S(k) = A * k^(-β).

    Parameters
    ----------
    S : StructureFactor
        Structure factor to fit.
    k_min : float, optional
        Minimum wavenumber for fitting. Default: ``S.dk``, the first bin
        after the k = 0 (mean) bin.
    k_max : float, optional
        Maximum wavenumber for fitting. Default: largest bin.

    Returns
    -------
    A : float
        Amplitude (prefactor).
    beta : float
        Power law exponent.
    r_squared : float
        R² goodness of fit.

    Notes
    -----
    For a Kolmogorov inertial range of a 3D velocity field, β ≈ 5/3 for the
    shell-summed energy spectrum.
    """
    k = np.asarray(S.k)
    sk = np.asarray(S.sk)

    if k_min is None:
        k_min = S.dk
    if k_max is None:
        k_max = k.max()
    if k_min <= 0:
        raise ValueError(f"k_min must be positive, got {k_min}")

    # Bins no grid mode rounds into hold exactly zero
    in_range = (k >= k_min) & (k <= k_max)
    mask = in_range & (sk > 0)
    logger.debug("Power-law fit over %d of %d bins in range", mask.sum(), in_range.sum())
    k_fit = k[mask]
    sk_fit = sk[mask]

    if len(k_fit) < 2:
        raise ValueError("Not enough points for fitting")

    log_k = np.log(k_fit)
    log_sk = np.log(sk_fit)

    # log(S) = log(A) - β * log(k)
    coeffs = np.polyfit(log_k, log_sk, 1)
    beta = -coeffs[0]
    A = np.exp(coeffs[1])

    log_sk_pred = coeffs[0] * log_k + coeffs[1]
    ss_res = np.sum((log_sk - log_sk_pred) ** 2)
    ss_tot = np.sum((log_sk - np.mean(log_sk)) ** 2)
    r_squared = 1 - ss_res / ss_tot if ss_tot > 0 else 0.0

    return float(A), float(beta), float(r_squared)
