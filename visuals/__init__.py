# visuals/__init__.py
"""
Visual helpers for the spectral filter engine.
Provides plotting and export utilities used by the scripts.
"""
from .plots import (
    plot_magnitude_spectrum,
    plot_transfer_function,
    compare_and_save,
    plot_channel_breakdown,
)
__all__ = [
    "plot_magnitude_spectrum",
    "plot_transfer_function",
    "compare_and_save",
    "plot_channel_breakdown",
]
