"""
Spectrum buffer allocation.

A spectrum buffer is a complex64 array shaped (channel, row, col). Buffers are
either allocated per run or borrowed from a SpectrumPool; a released buffer is
zeroed before it can be handed out again, so nothing leaks from one run into
the next.
"""

import logging
from typing import Dict, List

import numpy as np

from .params import validate_resolution

logger = logging.getLogger(__name__)

CHANNELS = 3
SPECTRUM_DTYPE = np.complex64


def allocate_spectrum(n: int, channels: int = CHANNELS) -> np.ndarray:
    n = validate_resolution(n)
    return np.zeros((channels, n, n), dtype=SPECTRUM_DTYPE)


def check_spectrum(buffer: np.ndarray, n: int = None):
    """Raise ValueError unless `buffer` is a (C, N, N) complex64 array (optionally with a given N)."""
    if not isinstance(buffer, np.ndarray) or buffer.ndim != 3:
        raise ValueError("Spectrum buffer must be a 3D (channel, row, col) array.")
    if buffer.dtype != SPECTRUM_DTYPE:
        raise ValueError(f"Spectrum buffer must be complex64, got {buffer.dtype}.")
    if buffer.shape[1] != buffer.shape[2]:
        raise ValueError(f"Spectrum buffer must be square, got {buffer.shape[1]}x{buffer.shape[2]}.")
    if n is not None and buffer.shape[1] != n:
        raise ValueError(f"Spectrum buffer is {buffer.shape[1]}x{buffer.shape[2]}, expected {n}x{n}.")


class SpectrumPool:
    """Reusable spectrum buffers keyed by resolution."""

    def __init__(self, channels: int = CHANNELS):
        self.channels = channels
        self._free: Dict[int, List[np.ndarray]] = {}

    def acquire(self, n: int) -> np.ndarray:
        n = validate_resolution(n)
        free = self._free.get(n)
        if free:
            return free.pop()
        logger.debug("spectrum pool: allocating %dx%dx%d buffer", self.channels, n, n)
        return allocate_spectrum(n, self.channels)

    def release(self, buffer: np.ndarray):
        check_spectrum(buffer)
        if buffer.shape[0] != self.channels:
            raise ValueError(f"Buffer has {buffer.shape[0]} channels, pool holds {self.channels}.")
        buffer.fill(0)
        self._free.setdefault(buffer.shape[1], []).append(buffer)

    def available(self, n: int) -> int:
        return len(self._free.get(n, ()))
