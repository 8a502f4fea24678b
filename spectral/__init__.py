"""
Spectral filtering engine: 2D mixed-radix FFT, frequency-domain filters and
display read-back.
"""
__all__ = [
    "params",
    "spectrum",
    "butterfly",
    "transform",
    "filters",
    "loader",
    "writer",
    "passes",
    "pipeline",
]
