"""
spectral/transform.py

Row and column dispatch of the butterfly engine over a spectrum buffer.

One work-group per row (Axis.ROW) or per column (Axis.COLUMN); each group owns
one slot of a scratch arena allocated for the duration of the dispatch and
reuses it for every channel. The 2D transform is separable:

  forward_2d: rows (forward), then columns (forward)
  inverse_2d: columns (inverse), then rows (inverse)

Each inverse 1D pass divides by N, so a full 2D inverse divides by N^2.
"""

from enum import Enum

import numpy as np

from .butterfly import SCRATCH_DTYPE, ButterflyPlan, Direction, make_plan, transform
from .spectrum import SPECTRUM_DTYPE, check_spectrum


class Axis(Enum):
    ROW = "row"
    COLUMN = "column"


def allocate_scratch(groups: int, n: int) -> np.ndarray:
    """Scratch arena: slot g (row g) belongs to work-group g."""
    return np.empty((groups, n), dtype=SCRATCH_DTYPE)


def dispatch(buffer: np.ndarray, plan: ButterflyPlan, direction: Direction, axis: Axis) -> np.ndarray:
    """Run the butterfly engine over every row or every column of every channel, in place."""
    check_spectrum(buffer, plan.n)
    scratch = allocate_scratch(plan.n, plan.n)
    for channel in range(buffer.shape[0]):
        # groups along the leading axis of `plane`, samples along the last
        plane = buffer[channel] if axis is Axis.ROW else buffer[channel].T
        transform(plane, scratch, plan, direction)
        plane[...] = scratch
    return buffer


def forward_2d(buffer: np.ndarray, plan: ButterflyPlan) -> np.ndarray:
    dispatch(buffer, plan, Direction.FORWARD, Axis.ROW)
    dispatch(buffer, plan, Direction.FORWARD, Axis.COLUMN)
    return buffer


def inverse_2d(buffer: np.ndarray, plan: ButterflyPlan) -> np.ndarray:
    dispatch(buffer, plan, Direction.INVERSE, Axis.COLUMN)
    dispatch(buffer, plan, Direction.INVERSE, Axis.ROW)
    return buffer


def _prepare(data: np.ndarray):
    arr = np.asarray(data)
    if arr.ndim != 3 or arr.shape[1] != arr.shape[2]:
        raise ValueError("Expected a (channel, N, N) array.")
    plan = make_plan(arr.shape[-1])
    return np.array(arr, dtype=SPECTRUM_DTYPE), plan


def forward_transform(image: np.ndarray) -> np.ndarray:
    """Unnormalised 2D FFT of a (channel, N, N) array; returns a new complex64 array."""
    buffer, plan = _prepare(image)
    return forward_2d(buffer, plan)


def inverse_transform(spectrum: np.ndarray) -> np.ndarray:
    """2D inverse FFT (scaled by 1/N^2) of a (channel, N, N) array; returns a new complex64 array."""
    buffer, plan = _prepare(spectrum)
    return inverse_2d(buffer, plan)
