"""
spectral/pipeline.py

One complete spectral filtering run:
  1) initialize_data     sample the image into the spectrum buffer (imag = 0)
  2) fft_horizontal      forward FFT of every row
  3) fft_vertical        forward FFT of every column
  4) modify_frequencies  multiply every bin by the selected transfer function
  5) ifft_vertical       inverse FFT of every column
  6) ifft_horizontal     inverse FFT of every row
  7) main_image          render display values in [0, 1]

Parameters and resolution are validated when the pipeline is constructed, so
an invalid configuration fails before any buffer is touched. Each pass runs to
completion before the next one starts.

API:
- SpectralPipeline(params, mask_builder=None, pool=None, warn_imaginary=False).run(image, return_intermediates=False)
- process_image(image, params=None, **kwargs)

mask_builder may be any callable(params, n) -> (n, n) real scale in storage
order (e.g. spectral.filters.passthrough_transfer); None selects
spectral.filters.build_transfer_function.

With show_spectrum set, main_image renders the filtered spectrum captured
after modify_frequencies; the inverse passes still run.

A custom `passes` sequence is accepted only when it names the same passes in
the same order; anything else is a ConfigurationError at construction.
warn_imaginary=True makes main_image warn (RuntimeWarning) when the inverse
transform leaves an imaginary residue above the writer's tolerance.
"""

import logging
from dataclasses import dataclass
from typing import Any, Dict, Mapping, Optional, Tuple, Union

import numpy as np

from .butterfly import Direction, make_plan
from .filters import MaskBuilder, apply_filter, build_transfer_function
from .loader import load_spectrum, sample_image
from .params import ConfigurationError, FilterParameters
from .passes import PASS_SEQUENCE, pass_names, validate_pass_order
from .spectrum import SpectrumPool, allocate_spectrum
from .transform import Axis, dispatch
from .writer import render

logger = logging.getLogger(__name__)


@dataclass
class PipelineResult:
    output: np.ndarray
    spectrum: Optional[np.ndarray]
    passes: Tuple[str, ...]


@dataclass
class _RunState:
    image: np.ndarray
    buffer: np.ndarray
    spectrum: Optional[np.ndarray] = None
    output: Optional[np.ndarray] = None


class SpectralPipeline:
    def __init__(
        self,
        params: Union[FilterParameters, Mapping[str, Any], None] = None,
        *,
        mask_builder: Optional[MaskBuilder] = None,
        pool: Optional[SpectrumPool] = None,
        passes=PASS_SEQUENCE,
        warn_imaginary: bool = False,
    ):
        if params is None:
            params = FilterParameters()
        elif isinstance(params, Mapping):
            params = FilterParameters.from_mapping(params)
        elif not isinstance(params, FilterParameters):
            raise ConfigurationError(f"Expected FilterParameters or a mapping, got {type(params).__name__}.")
        if mask_builder is not None and not callable(mask_builder):
            raise ConfigurationError("mask_builder must be callable(params, n).")

        self.params = params
        self.plan = make_plan(params.resolution)
        self.mask_builder = mask_builder or build_transfer_function
        self.pool = pool
        self.warn_imaginary = bool(warn_imaginary)

        self._handlers = {
            "initialize_data": self._initialize_data,
            "fft_horizontal": self._fft_horizontal,
            "fft_vertical": self._fft_vertical,
            "modify_frequencies": self._modify_frequencies,
            "ifft_vertical": self._ifft_vertical,
            "ifft_horizontal": self._ifft_horizontal,
            "main_image": self._main_image,
        }
        self.passes = validate_pass_order(passes)
        unknown = [p.name for p in self.passes if p.name not in self._handlers]
        if unknown:
            raise ConfigurationError(f"Unknown pass(es): {', '.join(unknown)}.")
        if pass_names(self.passes) != pass_names(PASS_SEQUENCE):
            expected = " -> ".join(pass_names(PASS_SEQUENCE))
            got = " -> ".join(pass_names(self.passes))
            raise ConfigurationError(f"Passes must run exactly as {expected}; got {got}.")

        logger.debug("pipeline ready: %s", params)

    @property
    def resolution(self) -> int:
        return self.plan.n

    # --- passes ---
    def _initialize_data(self, state: _RunState):
        load_spectrum(sample_image(state.image, self.plan.n), state.buffer)

    def _fft_horizontal(self, state: _RunState):
        dispatch(state.buffer, self.plan, Direction.FORWARD, Axis.ROW)

    def _fft_vertical(self, state: _RunState):
        dispatch(state.buffer, self.plan, Direction.FORWARD, Axis.COLUMN)

    def _modify_frequencies(self, state: _RunState):
        apply_filter(state.buffer, self.params, mask_builder=self.mask_builder)
        if self.params.show_spectrum:
            state.spectrum = state.buffer.copy()

    def _ifft_vertical(self, state: _RunState):
        dispatch(state.buffer, self.plan, Direction.INVERSE, Axis.COLUMN)

    def _ifft_horizontal(self, state: _RunState):
        dispatch(state.buffer, self.plan, Direction.INVERSE, Axis.ROW)

    def _main_image(self, state: _RunState):
        if self.params.show_spectrum and state.spectrum is not None:
            state.output = render(state.spectrum, show_spectrum=True)
        else:
            state.output = render(state.buffer, show_spectrum=False, suppress_warning=not self.warn_imaginary)

    # --- driver ---
    def run(self, image: np.ndarray, *, return_intermediates: bool = False):
        """
        Run every pass on `image` (any HxW / HxWxC array; resampled to N x N).

        Returns a PipelineResult, or (PipelineResult, intermediates) when
        return_intermediates=True; intermediates maps each pass name (except
        main_image) to a copy of the spectrum buffer after that pass.
        """
        n = self.plan.n
        buffer = self.pool.acquire(n) if self.pool is not None else allocate_spectrum(n)
        state = _RunState(image=np.asarray(image), buffer=buffer)
        intermediates: Dict[str, np.ndarray] = {}
        executed = []
        try:
            for desc in self.passes:
                logger.debug("pass %s (N=%d)", desc.name, n)
                self._handlers[desc.name](state)
                executed.append(desc.name)
                if return_intermediates and desc.name != "main_image":
                    intermediates[desc.name] = state.buffer.copy()
        finally:
            if self.pool is not None:
                self.pool.release(buffer)

        result = PipelineResult(output=state.output, spectrum=state.spectrum, passes=tuple(executed))
        if return_intermediates:
            return result, intermediates
        return result


def process_image(
    image: np.ndarray,
    params: Union[FilterParameters, Mapping[str, Any], None] = None,
    **kwargs,
) -> np.ndarray:
    """One-shot run; returns the (N, N, 3) display image."""
    return SpectralPipeline(params, **kwargs).run(image).output
