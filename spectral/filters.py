"""
spectral/filters.py

Frequency-domain transfer functions, evaluated in storage order.

Every bin (x, y) of an N x N spectrum is given its fftshift-centred frequency
(fx, fy) and f = |(fx, fy)| / (N/2). The selected transfer function yields a
real scale per bin which multiplies every channel in place:
  - low-pass:    Butterworth, order 7, cutoff 0.5 * max(1 - strength, 0.01)
  - high-pass:   Butterworth, order 7, cutoff 0.1 + 0.3 * strength, f floored at 0.001
  - band-pass:   Gaussian ring centred at radius / 2pi
  - directional: angular Gaussian in sin(atan2(fy, fx) - direction)
"""

import numpy as np
from typing import Callable, Optional, Tuple, Union

from .params import FilterParameters, FilterType
from .spectrum import check_spectrum

BUTTERWORTH_ORDER = 7
# Floor for f in the high-pass denominator and for the strength complements.
F_FLOOR = 0.001
STRENGTH_FLOOR = 0.01
TAU = 2.0 * np.pi


# --- Frequency grids (storage order, fftshift-centred values) ---
def centered_frequencies(n: int, dtype=np.float64) -> Tuple[np.ndarray, np.ndarray]:
    """
    Signed frequency of every storage index, as (fx, fy) grids of shape (n, n).
    fx = ((x + N/2) mod N) - N/2 along columns, fy likewise along rows.
    The grids stay in storage (unshifted) order: fx[y, x] is the frequency
    stored at column x, so masks built from them multiply the buffer directly.
    """
    half = n // 2
    idx = np.arange(n)
    f = ((idx + half) % n - half).astype(dtype)
    fy, fx = np.meshgrid(f, f, indexing="ij")
    return fx, fy


def normalized_radius(n: int, dtype=np.float64) -> np.ndarray:
    """|(fx, fy)| / (N/2): 0 at DC, 1.0 at the Nyquist edge of each axis."""
    fx, fy = centered_frequencies(n, dtype=dtype)
    return np.hypot(fx, fy) / (n / 2.0)


def _complement(strength: float) -> float:
    return max(1.0 - float(strength), STRENGTH_FLOOR)


# --- Transfer functions ---
def lowpass_transfer(n: int, strength: float, order: int = BUTTERWORTH_ORDER) -> np.ndarray:
    """
    Butterworth low-pass: 1 / (1 + (f/cutoff)^(2*order)), cutoff = 0.5 * max(1 - strength, 0.01).
    Higher strength means a smaller cutoff (stronger blur).
    """
    cutoff = 0.5 * _complement(strength)
    f = normalized_radius(n)
    with np.errstate(over="ignore"):
        scale = 1.0 / (1.0 + (f / cutoff) ** (2 * order))
    return np.nan_to_num(scale, nan=0.0, posinf=0.0, neginf=0.0)


def highpass_transfer(n: int, strength: float, order: int = BUTTERWORTH_ORDER) -> np.ndarray:
    """Butterworth high-pass: 1 / (1 + (cutoff / max(f, 0.001))^(2*order)), cutoff = 0.1 + 0.3 * strength."""
    cutoff = 0.1 + 0.3 * float(strength)
    f = np.maximum(normalized_radius(n), F_FLOOR)
    with np.errstate(over="ignore"):
        scale = 1.0 / (1.0 + (cutoff / f) ** (2 * order))
    return np.nan_to_num(scale, nan=0.0, posinf=0.0, neginf=0.0)


def bandpass_center(radius: float) -> float:
    """Band centre in normalised frequency; the radius is an angle-like 0..2pi control."""
    return float(radius) / TAU


def bandpass_transfer(n: int, strength: float, radius: float) -> np.ndarray:
    """Gaussian ring: exp(-((f - center) / bandwidth)^2), bandwidth = 0.05 + 0.2 * max(1 - strength, 0.01)."""
    center = bandpass_center(radius)
    bandwidth = 0.05 + 0.2 * _complement(strength)
    f = normalized_radius(n)
    return np.exp(-(((f - center) / bandwidth) ** 2))


def directional_transfer(n: int, strength: float, direction: float) -> np.ndarray:
    """
    Angular Gaussian: exp(-(sin(angle - direction) / width)^2), angle = atan2(fy, fx),
    width = 0.1 + 1.0 * max(1 - strength, 0.01).
    sin() makes the response symmetric under angle + pi, so conjugate bins get equal weight.
    """
    width = 0.1 + 1.0 * _complement(strength)
    fx, fy = centered_frequencies(n)
    angle = np.arctan2(fy, fx)
    return np.exp(-((np.sin(angle - float(direction)) / width) ** 2))


# --- Convenience builder ---
def build_transfer_function(params: FilterParameters, n: Optional[int] = None) -> np.ndarray:
    """
    Real (n, n) float32 scale in storage order for the filter selected by `params`.
    n defaults to params.resolution.
    """
    n = params.resolution if n is None else int(n)
    ft = params.filter_type
    if ft is FilterType.LOW_PASS:
        scale = lowpass_transfer(n, params.strength)
    elif ft is FilterType.HIGH_PASS:
        scale = highpass_transfer(n, params.strength)
    elif ft is FilterType.BAND_PASS:
        scale = bandpass_transfer(n, params.strength, params.radius)
    elif ft is FilterType.DIRECTIONAL:
        scale = directional_transfer(n, params.strength, params.direction)
    else:
        raise ValueError(f"Unknown filter type {ft!r}.")
    return scale.astype(np.float32)


def passthrough_transfer(params: FilterParameters, n: Optional[int] = None) -> np.ndarray:
    """Scale of 1 everywhere; same call signature as build_transfer_function."""
    n = params.resolution if n is None else int(n)
    return np.ones((n, n), dtype=np.float32)


MaskBuilder = Callable[[FilterParameters, int], np.ndarray]


def apply_filter(
    buffer: np.ndarray,
    params_or_scale: Union[FilterParameters, np.ndarray],
    mask_builder: Optional[MaskBuilder] = None,
) -> np.ndarray:
    """
    Multiply every channel of `buffer` by a real scale, in place.

    params_or_scale may be a precomputed (N, N) scale array or FilterParameters;
    in the latter case the scale comes from mask_builder (default:
    build_transfer_function).
    """
    check_spectrum(buffer)
    n = buffer.shape[-1]
    if isinstance(params_or_scale, FilterParameters):
        builder = mask_builder or build_transfer_function
        scale = builder(params_or_scale, n)
    else:
        scale = params_or_scale
    scale = np.asarray(scale)
    if scale.shape != (n, n):
        raise ValueError("Transfer function shape does not match spectrum shape.")
    if np.iscomplexobj(scale):
        raise ValueError("Transfer function must be real-valued.")
    buffer *= scale.astype(np.float32)[None, :, :]
    return buffer
