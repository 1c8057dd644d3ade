"""
Edge weights and normalization constants for half spectra.

A real-to-complex transform stores each interior mode of the halved axis
once for the pair ``(k, -k)``, while the zero and Nyquist planes have no
partner. Binning the half spectrum directly therefore over-weights those two
planes by a factor of two relative to the interior. The functions here
rescale them in place and give the constant that turns binned power into a
normalized spectral density.

License: BSD-3-Clause
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from collections.abc import Iterator

import numpy as np

from ..exceptions import check_dimension
from .grid import Convention, as_convention

logger = logging.getLogger(__name__)


def scale_edges(uk: np.ndarray, factor: float, axis: int = -1) -> np.ndarray:
    """
    Multiply the first and last slices of ``uk`` along ``axis`` by ``factor``.

    The array is modified in place and returned.
    """
    first = [slice(None)] * uk.ndim
    last = [slice(None)] * uk.ndim
    first[axis] = 0
    last[axis] = -1
    uk[tuple(first)] *= factor
    uk[tuple(last)] *= factor
    return uk


@contextmanager
def scaled_edges(
    uk: np.ndarray,
    factor: float,
    axis: int = -1,
    restore: bool = True,
) -> Iterator[np.ndarray]:
    """
    Scale the edge slices of ``uk`` for the duration of a ``with`` block.

    On exit, including exit through an exception, the slices are multiplied
    by ``1 / factor`` unless ``restore`` is False, in which case the caller's
    array is left scaled.

    Examples
    --------
    >>> uk = np.fft.rfftn(field)
    >>> with scaled_edges(uk, np.sqrt(0.5)) as scaled:
    ...     power = np.abs(scaled) ** 2
    """
    scale_edges(uk, factor, axis)
    logger.debug("Scaled half-spectrum edges along axis %d by %g", axis, factor)
    try:
        yield uk
    finally:
        if restore:
            scale_edges(uk, 1.0 / factor, axis)


def normalization(
    shape: tuple[int, ...],
    convention: Convention | bool = Convention.REAL,
    axis: int = -1,
) -> float:
    """
    Constant converting binned |u_k|^2 into a normalized spectral density.

    Parameters
    ----------
    shape : tuple of int
        Shape of the spectrum array.
    convention : Convention or bool, optional
        Transform convention. Default is ``Convention.REAL``.
    axis : int, optional
        Halved axis under the real convention. Default is -1.

    Returns
    -------
    norm : float
        ``1 / (2 (N_axis - 1) prod(N_other))^2`` for the real convention,
        ``1 / (2 prod(N)^2)`` for the complex one.

    Notes
    -----
    ``2 (N_axis - 1)`` is the length of the real signal before the transform.
    A half spectrum with scaled edges sums to half the full-spectrum power,
    so for ``M`` real samples both conventions yield
    ``sum |u_k|^2 / (2 M^2)`` over the full spectrum.
    """
    shape = tuple(int(n) for n in shape)
    check_dimension(len(shape))
    convention = as_convention(convention)

    if convention is Convention.REAL:
        n_half = shape[axis]
        if n_half < 2:
            raise ValueError(f"A half-spectrum axis needs at least 2 samples, got {n_half}")
        rest = shape[:axis % len(shape)] + shape[axis % len(shape) + 1:]
        return 1.0 / (2 * (n_half - 1) * int(np.prod(rest))) ** 2
    return 1.0 / (2.0 * int(np.prod(shape)) ** 2)
