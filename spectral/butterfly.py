"""
spectral/butterfly.py

In-place mixed-radix FFT on scratch rows.

A plan is built once per resolution (make_plan) and describes:
  - the stage radices: floor(log2(N)/2) radix-4 stages, then one radix-2
    cleanup stage when log2(N) is odd (all radix-2 when RADIX == 2)
  - the digit-reversal permutation used when loading samples into scratch

transform() loads one or many length-N sequences into a caller-owned scratch
array (last axis = N, leading axes = work-groups), then runs every stage in
order. Each stage reads the complete output of the previous one, so the
result does not depend on the order in which groups are processed.
Inverse transforms are scaled by 1/N.
"""

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Tuple

import numpy as np

from .params import ConfigurationError, validate_resolution

logger = logging.getLogger(__name__)

# Butterfly decomposition baked into every plan; 4 or 2.
RADIX = 4

SCRATCH_DTYPE = np.complex64


class Direction(Enum):
    """Transform direction; the value is the sign of the twiddle angle."""

    FORWARD = -1
    INVERSE = 1

    @property
    def sign(self) -> int:
        return self.value


@dataclass(frozen=True)
class ButterflyPlan:
    n: int
    log2n: int
    radices: Tuple[int, ...]
    permutation: np.ndarray

    @property
    def num_stages(self) -> int:
        return len(self.radices)


def stage_radices(log2n: int) -> Tuple[int, ...]:
    """Radix of every stage, in execution order (smallest stride first)."""
    if RADIX == 4:
        return (4,) * (log2n // 2) + (2,) * (log2n % 2)
    if RADIX == 2:
        return (2,) * log2n
    raise ConfigurationError(f"Unsupported RADIX {RADIX}; expected 2 or 4.")


def digit_reversal(radices: Tuple[int, ...]) -> np.ndarray:
    """
    Mixed-radix digit reversal for a decimation-in-time decomposition.

    Returns perm such that sample j is loaded at scratch[perm[j]]. The last
    stage splits the sequence by j mod r_last into blocks of N / r_last, the
    stage before splits each block again, and so on. With only radix-2
    stages this is the ordinary bit reversal.
    """
    n = int(np.prod(radices, dtype=np.int64)) if radices else 1
    rem = np.arange(n, dtype=np.int64)
    perm = np.zeros(n, dtype=np.int64)
    span = n
    for r in reversed(radices):
        span //= r
        perm += (rem % r) * span
        rem //= r
    return perm


def make_plan(n) -> ButterflyPlan:
    """
    Validate N (power of two, 1..N_MAX) and precompute the stage layout.
    Raises ConfigurationError before anything is dispatched.
    """
    n = validate_resolution(n)
    log2n = n.bit_length() - 1
    radices = stage_radices(log2n)
    perm = digit_reversal(radices)
    logger.debug("butterfly plan: N=%d radix=%d stages=%s", n, RADIX, radices)
    return ButterflyPlan(n=n, log2n=log2n, radices=radices, permutation=perm)


def cis(theta: np.ndarray) -> np.ndarray:
    """Unit complex numbers (cos theta, sin theta) as complex64."""
    return (np.cos(theta) + 1j * np.sin(theta)).astype(SCRATCH_DTYPE)


def _radix2_stage(scratch: np.ndarray, stride: int, sign: int):
    n = scratch.shape[-1]
    view = scratch.reshape(scratch.shape[:-1] + (n // (2 * stride), 2, stride))
    k = np.arange(stride)
    t1 = cis(sign * 2.0 * np.pi * k / (2 * stride)) * view[..., 1, :]
    x0 = view[..., 0, :]
    view[..., 1, :] = x0 - t1
    view[..., 0, :] = x0 + t1


def _radix4_stage(scratch: np.ndarray, stride: int, sign: int):
    n = scratch.shape[-1]
    view = scratch.reshape(scratch.shape[:-1] + (n // (4 * stride), 4, stride))
    k = np.arange(stride)
    angle = sign * 2.0 * np.pi * k / (4 * stride)
    x0 = view[..., 0, :]
    t1 = cis(angle) * view[..., 1, :]
    t2 = cis(2.0 * angle) * view[..., 2, :]
    t3 = cis(3.0 * angle) * view[..., 3, :]

    a = x0 + t2
    b = x0 - t2
    c = t1 + t3
    # -i for the forward matrix, +i for the inverse
    d = (t1 - t3) * (sign * 1j)

    view[..., 0, :] = a + c
    view[..., 1, :] = b + d
    view[..., 2, :] = a - c
    view[..., 3, :] = b - d


def transform(source: np.ndarray, scratch: np.ndarray, plan: ButterflyPlan, direction: Direction) -> np.ndarray:
    """
    FFT every length-N sequence along the last axis of `source` into `scratch`.

    `scratch` is owned by the caller (one row per work-group), must be
    C-contiguous complex64 and have the same shape as `source`. It is
    overwritten and returned.
    """
    if scratch.dtype != SCRATCH_DTYPE or not scratch.flags.c_contiguous:
        raise ValueError("scratch must be a C-contiguous complex64 array.")
    if source.shape != scratch.shape:
        raise ValueError(f"source shape {source.shape} does not match scratch shape {scratch.shape}.")
    if scratch.shape[-1] != plan.n:
        raise ValueError(f"sequence length {scratch.shape[-1]} does not match plan N={plan.n}.")

    scratch[..., plan.permutation] = source

    sign = direction.sign
    stride = 1
    for radix in plan.radices:
        if radix == 4:
            _radix4_stage(scratch, stride, sign)
        else:
            _radix2_stage(scratch, stride, sign)
        stride *= radix

    if direction is Direction.INVERSE:
        scratch /= np.float32(plan.n)
    return scratch


def dft_reference(x: np.ndarray, direction: Direction = Direction.FORWARD) -> np.ndarray:
    """Direct O(N^2) DFT along the last axis (complex128), same scaling convention as transform()."""
    x = np.asarray(x, dtype=np.complex128)
    n = x.shape[-1]
    j = np.arange(n)
    w = np.exp(direction.sign * 2j * np.pi * np.outer(j, j) / n)
    out = x @ w
    if direction is Direction.INVERSE:
        out = out / n
    return out


def dft2_reference(x: np.ndarray, direction: Direction = Direction.FORWARD) -> np.ndarray:
    """Direct separable 2D DFT over the last two axes."""
    rows = dft_reference(x, direction)
    return np.swapaxes(dft_reference(np.swapaxes(rows, -1, -2), direction), -1, -2)
