"""
spectral/loader.py

Turn a host image into the initial spectrum buffer.

- sample_image(image, n): bilinear, clamp-to-edge sampling of an image of any
  size at the N x N texel centres ((x + 0.5) / N, (y + 0.5) / N), returning
  an (N, N, 3) float32 array in the image's normalised range.
- load_spectrum(samples, buffer): Spectrum[c][y][x] = (sample[y, x, c], 0).
"""

import numpy as np

from .params import validate_resolution
from .spectrum import check_spectrum


def to_unit_float(image: np.ndarray) -> np.ndarray:
    """Integer images are divided by their dtype maximum; floats are kept as-is."""
    arr = np.asarray(image)
    if np.iscomplexobj(arr):
        raise ValueError("Complex-valued images are not supported.")
    if arr.dtype == np.bool_:
        return arr.astype(np.float32)
    if np.issubdtype(arr.dtype, np.integer):
        info = np.iinfo(arr.dtype)
        return arr.astype(np.float32) / float(info.max)
    return arr.astype(np.float32)


def as_rgb(arr: np.ndarray) -> np.ndarray:
    """HxW, HxWx1, HxWx2 (gray+alpha), HxWx3 or HxWx4 -> HxWx3."""
    if arr.ndim == 2:
        return np.repeat(arr[:, :, None], 3, axis=2)
    if arr.ndim == 3:
        c = arr.shape[2]
        if c in (1, 2):
            return np.repeat(arr[:, :, :1], 3, axis=2)
        if c in (3, 4):
            return arr[:, :, :3]
    raise ValueError(f"Expected an HxW or HxWxC image (C in 1..4), got shape {arr.shape}.")


def _axis_taps(size: int, n: int):
    # texel-centre coordinates mapped into source texel space
    coords = (np.arange(n) + 0.5) / n * size - 0.5
    lo = np.floor(coords)
    frac = (coords - lo).astype(np.float32)
    lo = lo.astype(np.int64)
    i0 = np.clip(lo, 0, size - 1)
    i1 = np.clip(lo + 1, 0, size - 1)
    return i0, i1, frac


def sample_image(image: np.ndarray, n: int) -> np.ndarray:
    n = validate_resolution(n)
    rgb = as_rgb(to_unit_float(image))
    h, w = rgb.shape[:2]
    if h == 0 or w == 0:
        raise ValueError("Cannot sample an empty image.")

    y0, y1, wy = _axis_taps(h, n)
    x0, x1, wx = _axis_taps(w, n)
    wx = wx[None, :, None]
    wy = wy[:, None, None]

    top = rgb[y0][:, x0] * (1.0 - wx) + rgb[y0][:, x1] * wx
    bottom = rgb[y1][:, x0] * (1.0 - wx) + rgb[y1][:, x1] * wx
    return (top * (1.0 - wy) + bottom * wy).astype(np.float32)


def load_spectrum(samples: np.ndarray, buffer: np.ndarray) -> np.ndarray:
    check_spectrum(buffer)
    channels, n = buffer.shape[0], buffer.shape[1]
    if samples.shape != (n, n, channels):
        raise ValueError(f"Samples shape {samples.shape} does not match buffer ({n}, {n}, {channels}).")
    buffer[...] = np.moveaxis(samples, -1, 0)
    return buffer
