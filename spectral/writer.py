"""
Read the final spectrum buffer back as display values in [0, 1].

render(buffer, show_spectrum=False):
  - image view: real part of the (inverse-transformed) buffer, clamped
  - spectrum view: fftshift-centred log(1 + 30 |v|) / log(31), clamped
"""

import warnings

import numpy as np

from .spectrum import check_spectrum

LOG_GAIN = 30.0


def fft_shift(buffer: np.ndarray) -> np.ndarray:
    """Move DC to the centre of the last two axes (wrapper)."""
    return np.fft.fftshift(buffer, axes=(-2, -1))


def log_compress(magnitude: np.ndarray) -> np.ndarray:
    return np.log1p(LOG_GAIN * magnitude) / np.log1p(LOG_GAIN)


def render(
    buffer: np.ndarray,
    show_spectrum: bool = False,
    imag_tol: float = 1e-3,
    suppress_warning: bool = True,
) -> np.ndarray:
    """
    Produce an (N, N, C) float32 image in [0, 1].
    Warns (RuntimeWarning) about imaginary residue above imag_tol in image view
    unless suppress_warning is set; the imaginary part is discarded either way.
    """
    check_spectrum(buffer)
    if show_spectrum:
        values = log_compress(np.abs(fft_shift(buffer)))
    else:
        if not suppress_warning and buffer.size:
            imag_max = float(np.max(np.abs(buffer.imag)))
            if imag_max > imag_tol:
                warnings.warn(
                    f"Inverse transform left a non-negligible imaginary component (max abs = {imag_max}). "
                    "Displaying the real part only.",
                    RuntimeWarning,
                )
        values = buffer.real
    return np.clip(np.moveaxis(values, 0, -1), 0.0, 1.0).astype(np.float32)
