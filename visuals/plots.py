"""
visuals/plots.py

Plotting utilities for spectra, transfer functions and before/after comparisons.

APIs:
- plot_magnitude_spectrum(buffer, out_path=None, channel=None)
- plot_transfer_function(scale, out_path=None)
- compare_and_save(original, filtered, out_path=None, titles=None)
- plot_channel_breakdown(image, out_dir=None, base_name='channel', ext='png')

Notes:
- Spectrum and transfer-function images are written as raw PNGs with Pillow
  (no Matplotlib); comparisons and channel breakdowns use Matplotlib.
- If out_path is None, functions return the prepared array or the Matplotlib
  Figure instead of writing a file.
"""

from typing import Optional, Sequence, Tuple
import os
import numpy as np
import matplotlib.pyplot as plt
from PIL import Image
from spectral.writer import fft_shift, log_compress


# Helper to ensure outdir exists
def _ensure_outdir(out_path: Optional[str]):
    if out_path is None:
        return None
    d = os.path.dirname(out_path)
    if d:
        os.makedirs(d, exist_ok=True)
    return out_path


def _save_raw_array_image(out_path: Optional[str], arr: np.ndarray, normalize: bool = True):
    """
    Save a numeric array as a raw image (PNG). No Matplotlib involved.
    - arr can be 2D (scalar) or 3D (H,W,3).
    - normalize: stretch min..max to 0..255; otherwise values are taken as [0, 1].
    """
    if out_path is None:
        return None

    _ensure_outdir(out_path)
    a = np.array(arr, dtype=np.float64)

    if normalize:
        amin = float(np.nanmin(a))
        amax = float(np.nanmax(a))
        if np.isfinite(amin) and np.isfinite(amax) and amax > amin:
            a = (a - amin) / (amax - amin)
        else:
            a = np.zeros_like(a)

    a = np.squeeze(a)
    if not (a.ndim == 2 or (a.ndim == 3 and a.shape[2] == 3)):
        raise ValueError(f"Cannot save array of shape {arr.shape} as an image.")
    img = Image.fromarray(np.rint(np.clip(a, 0.0, 1.0) * 255.0).astype(np.uint8))
    img.save(out_path)
    return out_path


def _save_or_return(fig: plt.Figure, out_path: Optional[str], dpi: int = 100):
    if out_path is not None:
        _ensure_outdir(out_path)
        fig.savefig(out_path, dpi=dpi, bbox_inches="tight", pad_inches=0.05)
        plt.close(fig)
        return out_path
    return fig


def plot_magnitude_spectrum(
    buffer: np.ndarray,
    out_path: Optional[str] = None,
    channel: Optional[int] = None,
):
    """
    Log-compressed, DC-centred magnitude of a (C, N, N) spectrum buffer.
    channel=None renders all channels as RGB; an int renders that channel in grayscale.
    Returns out_path, or the [0, 1] array when out_path is None.
    """
    mag = log_compress(np.abs(fft_shift(buffer)))
    if channel is None:
        disp = np.moveaxis(mag, 0, -1)
    else:
        disp = mag[channel]
    disp = np.clip(disp, 0.0, 1.0)
    if out_path is not None:
        return _save_raw_array_image(out_path, disp, normalize=False)
    return disp


def plot_transfer_function(scale: np.ndarray, out_path: Optional[str] = None):
    """
    Filter scale (storage order) shown DC-centred, grayscale.
    Returns out_path, or the centred [0, 1] array when out_path is None.
    """
    centred = np.clip(np.fft.fftshift(np.asarray(scale, dtype=np.float64)), 0.0, 1.0)
    if out_path is not None:
        return _save_raw_array_image(out_path, centred, normalize=False)
    return centred


def _show(ax, img: np.ndarray, title: str):
    if img.ndim == 2:
        ax.imshow(img, cmap="gray", interpolation="nearest", vmin=0.0, vmax=1.0)
    else:
        ax.imshow(np.clip(img, 0.0, 1.0), interpolation="nearest")
    ax.set_title(title)
    ax.axis("off")


def compare_and_save(
    original: np.ndarray,
    filtered: np.ndarray,
    out_path: Optional[str] = None,
    titles: Optional[Sequence[str]] = None,
):
    """
    Original (left) | Filtered (right), both as [0, 1] float images
    (integer originals are scaled by their dtype maximum).
    """
    titles = list(titles) if titles else ["Original", "Filtered"]
    if np.issubdtype(np.asarray(original).dtype, np.integer):
        original = np.asarray(original, dtype=np.float64) / float(np.iinfo(np.asarray(original).dtype).max)

    fig, axs = plt.subplots(1, 2, figsize=(12, 6))
    _show(axs[0], np.asarray(original), titles[0])
    _show(axs[1], np.asarray(filtered), titles[1])
    return _save_or_return(fig, out_path, dpi=200)


def plot_channel_breakdown(
    image: np.ndarray,
    out_dir: Optional[str] = None,
    base_name: str = "channel",
    ext: str = "png",
) -> Tuple[Optional[str], list]:
    """
    Save each channel of an (H, W, 3) image to out_dir with deterministic names.
    Returns (last_saved_path_or_None, list_of_paths); figures instead of paths when out_dir is None.
    """
    channels = [image[..., i] for i in range(image.shape[-1])]
    paths = []
    if out_dir is not None:
        os.makedirs(out_dir, exist_ok=True)
    for i, ch in enumerate(channels):
        fig, ax = plt.subplots(figsize=(4, 4))
        _show(ax, ch, f"{base_name} {i}")
        if out_dir is None:
            paths.append(fig)
            continue
        p = os.path.join(out_dir, f"{base_name}_{i}.{ext}")
        paths.append(_save_or_return(fig, p))
    if out_dir is None:
        return None, paths
    return paths[-1] if paths else None, paths
