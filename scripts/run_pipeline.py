"""
Run the spectral filter pipeline on one image.

Usage (from project root):
python -m scripts.run_pipeline input.png output.png --filter lowpass --strength 0.6 --resolution 512
python -m scripts.run_pipeline input.png spectrum.png --show-spectrum --plots results/plots
python -m scripts.run_pipeline input.png output.png --params results/run/parameters.txt
"""

import argparse
import logging
import os
import sys
import time

from io_utils.image_handler import read_image, save_image, detect_is_color
from io_utils.file_utils import load_parameters_txt, save_parameters_txt
from spectral.filters import build_transfer_function
from spectral.params import ConfigurationError, FilterParameters
from spectral.pipeline import SpectralPipeline
from visuals.plots import plot_magnitude_spectrum, plot_transfer_function, compare_and_save


def build_parser() -> argparse.ArgumentParser:
    defaults = FilterParameters()
    parser = argparse.ArgumentParser(description="Frequency-domain image filtering (FFT -> filter -> inverse FFT)")
    parser.add_argument("input", type=str, help="Input image file")
    parser.add_argument("output", type=str, help="Output PNG file")
    parser.add_argument("--params", type=str, default=None, help="parameters.txt to start from (flags override it)")
    parser.add_argument("--filter", dest="filter_type", type=str, default=None,
                        help="lowpass | highpass | bandpass | directional (or 0..3)")
    parser.add_argument("--strength", type=float, default=None, help=f"Filter strength in [0, 1] (default {defaults.strength})")
    parser.add_argument("--direction", type=float, default=None, help="Directional filter angle, radians")
    parser.add_argument("--radius", type=float, default=None, help="Band-pass centre control, 0..2pi")
    parser.add_argument("--resolution", type=int, default=None, help=f"Transform size N, power of two <= 2048 (default {defaults.resolution})")
    parser.add_argument("--show-spectrum", action="store_true", help="Write the filtered spectrum instead of the image")
    parser.add_argument("--plots", type=str, default=None, help="Directory for spectrum / transfer function / comparison plots")
    parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    return parser


def resolve_parameters(args) -> FilterParameters:
    values = load_parameters_txt(args.params) if args.params else {}
    for key in ("filter_type", "strength", "direction", "radius", "resolution"):
        value = getattr(args, key)
        if value is not None:
            values[key] = value
    if args.show_spectrum:
        values["show_spectrum"] = True
    return FilterParameters.from_mapping(values)


def main(argv=None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        params = resolve_parameters(args)
        pipeline = SpectralPipeline(params)
    except ConfigurationError as e:
        print(f"Invalid configuration: {e}", file=sys.stderr)
        return 2

    arr, _meta = read_image(args.input)
    print(f"Loaded: {args.input} shape={arr.shape} dtype={arr.dtype} ({'Color' if detect_is_color(arr) else 'Grayscale'})")

    t0 = time.perf_counter()
    result, inter = pipeline.run(arr, return_intermediates=True)
    elapsed = time.perf_counter() - t0

    save_image(args.output, result.output)
    print(f"Saved: {args.output} ({params.filter_type.name.lower()}, N={params.resolution}, {elapsed:.2f}s)")

    if args.plots:
        os.makedirs(args.plots, exist_ok=True)
        plot_magnitude_spectrum(inter["fft_vertical"], out_path=os.path.join(args.plots, "spectrum.png"))
        plot_magnitude_spectrum(inter["modify_frequencies"], out_path=os.path.join(args.plots, "spectrum_filtered.png"))
        plot_transfer_function(build_transfer_function(params), out_path=os.path.join(args.plots, "transfer.png"))
        compare_and_save(arr, result.output, out_path=os.path.join(args.plots, "compare.png"))
        save_parameters_txt(args.plots, {**params.as_dict(), "input": args.input})
        print(f"Plots written to: {args.plots}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
