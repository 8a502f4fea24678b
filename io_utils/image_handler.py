# io/image_handler.py
"""
Image read/write helpers using Pillow.

Functions:
- read_image(path) -> (numpy array (H x W) or (H x W x 3), meta), dtype preserved
- save_image(path, array) -> writes image; float arrays are display values in [0, 1]
- detect_is_color(array) -> bool
"""

from PIL import Image
import pillow_avif  # noqa: F401  (registers the AVIF codec with Pillow)
import numpy as np
from typing import Tuple


def read_image(path: str) -> Tuple[np.ndarray, dict]:
    """
    Read an image from `path` and return (array, meta).
    - Returns RGB arrays of shape (H,W,3) or grayscale (H,W).
    - Meta contains mode and size. If image has alpha, meta includes 'has_alpha' and meta['alpha'] as a separate array.
    """
    img = Image.open(path)
    mode = img.mode
    if mode in ("RGBA", "LA") or ("transparency" in img.info):
        img = img.convert("RGBA")
        arr = np.asarray(img)
        meta = {"mode": "RGBA", "size": img.size, "has_alpha": True, "alpha": arr[..., 3]}
        return arr[..., :3], meta
    if mode.startswith("RGB") or mode in ("P", "CMYK", "YCbCr") or path.lower().endswith(".avif"):
        img = img.convert("RGB")
        meta = {"mode": "RGB", "size": img.size, "has_alpha": False}
        return np.asarray(img), meta
    if mode in ("I;16", "I;16B", "I;16L"):
        # keep 16-bit depth; the loader normalises by the dtype maximum
        arr = np.asarray(img).astype(np.uint16)
        meta = {"mode": mode, "size": img.size, "has_alpha": False}
        return arr, meta
    img = img.convert("L")
    meta = {"mode": "L", "size": img.size, "has_alpha": False}
    return np.asarray(img), meta


def to_uint8(array: np.ndarray) -> np.ndarray:
    """Float display values in [0, 1] -> uint8 0..255; integer arrays are clipped and cast."""
    if np.issubdtype(array.dtype, np.floating):
        return np.rint(np.clip(array, 0.0, 1.0) * 255.0).astype(np.uint8)
    return np.clip(array, 0, 255).astype(np.uint8)


def save_image(path: str, array: np.ndarray):
    """
    Save an image array to `path`. Accepts HxW (grayscale) or HxWx3 (RGB).
    Float arrays are treated as display values in [0, 1].
    """
    if not (array.ndim == 2 or (array.ndim == 3 and array.shape[2] == 3)):
        raise ValueError("save_image expects HxW or HxWx3 array.")

    # uint8 HxW -> "L", uint8 HxWx3 -> "RGB"
    img = Image.fromarray(to_uint8(array))
    img.save(path)
    return path


def detect_is_color(array: np.ndarray) -> bool:
    return array.ndim == 3 and array.shape[2] == 3
