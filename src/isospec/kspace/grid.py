"""
Wavenumber grids and radial bin indices for discrete spectra.

A spectrum produced by ``numpy.fft.fftn`` (complex convention) or
``numpy.fft.rfftn`` (real convention) is paired cell by cell with a grid of
integer wavenumber vectors. The radial bin of a vector is its Euclidean
norm rounded to the nearest integer, so bin ``i`` collects the modes with
``i - 1/2 <= |k| <= i + 1/2``.

License: BSD-3-Clause
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Iterable, Iterator
from dataclasses import dataclass
from enum import Enum

import numpy as np
from numpy.fft import fftfreq, rfftfreq

from ..exceptions import check_dimension

logger = logging.getLogger(__name__)


class Convention(Enum):
    """Layout of the spectrum handed to the analysis functions."""

    REAL = "real"  # rfftn output, one axis holds non-negative frequencies only
    COMPLEX = "complex"  # fftn output, every axis holds signed frequencies

    @classmethod
    def from_flag(cls, isreal: bool) -> Convention:
        return cls.REAL if isreal else cls.COMPLEX


def as_convention(convention: Convention | bool) -> Convention:
    """Accept either a :class:`Convention` or the ``isreal`` boolean flag."""
    if isinstance(convention, Convention):
        return convention
    return Convention.from_flag(bool(convention))


def wavenumber_axis(n: int, half: bool = False) -> np.ndarray:
    """
    Integer wavenumbers along one axis of length ``n``.

    Parameters
    ----------
    n : int
        Number of spectral samples along the axis.
    half : bool, optional
        If True, the axis is the halved axis of a real-to-complex transform
        and holds ``0, 1, ..., n - 1``, i.e. ``rfftfreq`` of the original
        length ``2 * (n - 1)``, Nyquist mode included. If False, the
        canonical DFT ordering ``0, 1, ..., -2, -1`` of ``fftfreq`` is used.
        Default is False.

    Returns
    -------
    k : ndarray
        Float array of length ``n`` holding integer values.
    """
    if half:
        if n < 2:
            raise ValueError(f"A half-spectrum axis needs at least 2 samples, got {n}")
        m = 2 * (n - 1)
        return np.rint(rfftfreq(m, d=1.0 / m))
    return np.rint(fftfreq(n, d=1.0 / n))


@dataclass(frozen=True, eq=False)
class KGrid:
    """
    Cartesian product of per-axis wavenumbers, one vector per spectrum cell.

    Iteration is lazy and restartable and follows C order, so
    ``zip(grid, uk.ravel())`` pairs each vector with its amplitude.
    """

    axes: tuple[np.ndarray, ...]
    convention: Convention
    half_axis: int | None = None

    @property
    def shape(self) -> tuple[int, ...]:
        return tuple(len(a) for a in self.axes)

    @property
    def ndim(self) -> int:
        return len(self.axes)

    def __len__(self) -> int:
        return int(np.prod(self.shape))

    def __iter__(self) -> Iterator[tuple[float, ...]]:
        return itertools.product(*(a.tolist() for a in self.axes))

    def magnitude(self) -> np.ndarray:
        """|k| for every cell, with the grid's shape."""
        components = np.meshgrid(*self.axes, indexing="ij", sparse=True)
        k2 = np.zeros(self.shape)
        for kc in components:
            k2 = k2 + kc**2
        return np.sqrt(k2)

    def bins(self) -> np.ndarray:
        """Radial bin index of every cell (round half to even)."""
        return np.rint(self.magnitude()).astype(np.intp)


def kgrid(
    shape: tuple[int, ...],
    convention: Convention | bool = Convention.REAL,
    axis: int = -1,
) -> KGrid:
    """
    Build the wavenumber grid matching a spectrum of the given shape.

    Parameters
    ----------
    shape : tuple of int
        Shape of the spectrum array (1, 2 or 3 axes).
    convention : Convention or bool, optional
        ``Convention.REAL`` (or True) for ``rfftn`` output,
        ``Convention.COMPLEX`` (or False) for ``fftn`` output.
        Default is ``Convention.REAL``.
    axis : int, optional
        Halved axis under the real convention. Default is -1, the axis
        ``numpy.fft.rfftn`` halves. Ignored for the complex convention.

    Returns
    -------
    grid : KGrid
    """
    shape = tuple(int(n) for n in shape)
    ndim = check_dimension(len(shape))
    convention = as_convention(convention)

    half_axis = None
    if convention is Convention.REAL:
        if not -ndim <= axis < ndim:
            raise ValueError(f"axis {axis} is out of range for a {ndim}D spectrum")
        half_axis = axis % ndim

    axes = tuple(wavenumber_axis(n, half=(i == half_axis)) for i, n in enumerate(shape))
    logger.debug("Built %s k-grid for shape %s (half axis %s)", convention.value, shape, half_axis)
    return KGrid(axes=axes, convention=convention, half_axis=half_axis)


def kbin(k: tuple[float, ...]) -> int:
    """Radial bin index of a single wavenumber vector."""
    return int(np.rint(np.sqrt(np.sum(np.square(k)))))


def kmax(grid: KGrid | Iterable[tuple[float, ...]]) -> int:
    """
    Upper bound on the radial bin index produced by ``grid``.

    The per-axis maxima are increased by one before taking the norm because
    ``fftfreq`` stores the Nyquist mode of an even axis as ``-n/2``, so the
    positive maximum misses it by one.
    """
    if isinstance(grid, KGrid):
        top = np.array([a.max() for a in grid.axes])
    else:
        top = np.max(np.array(list(grid), dtype=float), axis=0)
    top = np.atleast_1d(top) + 1
    return int(np.rint(np.sqrt(np.sum(top**2)))) + 1
