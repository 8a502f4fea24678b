"""
Batch-run demo across multiple images and all four filter types.

Saves per-image outputs and a CSV log with diagnostics:
- input_path, filter_type, out_path, spectrum_path, transfer_path,
  max_imag_after_inverse, output_mean, output_std

Usage (from project root):
python -m scripts.batch_demo

Edit the IMAGES list below to point to your files if needed.
"""

import os
import csv
from datetime import datetime
import numpy as np

from io_utils.image_handler import read_image, save_image
from io_utils.file_utils import make_result_filename, save_parameters_txt, zip_results
from spectral.filters import build_transfer_function
from spectral.params import FilterParameters, FilterType
from spectral.pipeline import SpectralPipeline
from spectral.spectrum import SpectrumPool
from visuals.plots import plot_magnitude_spectrum, plot_transfer_function, compare_and_save

# CONFIG: list image paths you want to test (edit as needed)
IMAGES = [
    "data/Checkerboard_1.tif",
    "data/Checkerboard_2.jpg",
]

# pipeline params
RESOLUTION = 512
STRENGTH = 0.6
DIRECTION = 0.0
RADIUS = 3.0

timestamp = datetime.now().strftime("%Y%m%dT%H%M%S")
OUTDIR = os.path.join("results", f"batch_demo_{timestamp}")

csv_fields = [
    "input_path", "filter_type", "out_path", "spectrum_path", "transfer_path",
    "max_imag_after_inverse", "output_mean", "output_std", "strength", "resolution",
]


def process_one_image(img_path, filter_type, pool):
    arr, _meta = read_image(img_path)
    base = os.path.splitext(os.path.basename(img_path))[0]
    run_dir = os.path.join(OUTDIR, base)
    name = filter_type.name.lower()

    params = FilterParameters(
        filter_type=filter_type,
        strength=STRENGTH,
        direction=DIRECTION,
        radius=RADIUS,
        resolution=RESOLUTION,
    )
    result, inter = SpectralPipeline(params, pool=pool).run(arr, return_intermediates=True)
    max_imag = float(np.max(np.abs(inter["ifft_horizontal"].imag)))

    out_path = make_result_filename("spectral", img_path, name, STRENGTH, RESOLUTION, "filtered", outdir=run_dir)
    save_image(out_path, result.output)

    spectrum_path = os.path.join(run_dir, f"{name}_spectrum.png")
    transfer_path = os.path.join(run_dir, f"{name}_transfer.png")
    plot_magnitude_spectrum(inter["modify_frequencies"], out_path=spectrum_path)
    plot_transfer_function(build_transfer_function(params), out_path=transfer_path)
    compare_and_save(arr, result.output, out_path=os.path.join(run_dir, f"{name}_compare.png"))

    return {
        "input_path": img_path,
        "filter_type": name,
        "out_path": out_path,
        "spectrum_path": spectrum_path,
        "transfer_path": transfer_path,
        "max_imag_after_inverse": max_imag,
        "output_mean": float(result.output.mean()),
        "output_std": float(result.output.std()),
        "strength": STRENGTH,
        "resolution": RESOLUTION,
    }


def main():
    os.makedirs(OUTDIR, exist_ok=True)
    csv_path = os.path.join(OUTDIR, "results.csv")
    pool = SpectrumPool()
    with open(csv_path, "w", newline="", encoding="utf-8") as csvf:
        writer = csv.DictWriter(csvf, fieldnames=csv_fields)
        writer.writeheader()

        for img in IMAGES:
            if not os.path.exists(img):
                print("Skipping missing:", img)
                continue
            for filter_type in FilterType:
                print("Processing:", img, filter_type.name.lower())
                rec = process_one_image(img, filter_type, pool)
                writer.writerow(rec)
                csvf.flush()
                print(" -> done. max_imag_after_inverse:", rec["max_imag_after_inverse"])

    save_parameters_txt(OUTDIR, {
        "strength": STRENGTH, "direction": DIRECTION, "radius": RADIUS, "resolution": RESOLUTION,
    })
    zip_path = zip_results(OUTDIR, os.path.join(OUTDIR, "results.zip"))
    print("Batch done. Results in:", OUTDIR, "CSV:", csv_path, "ZIP:", zip_path)


if __name__ == "__main__":
    main()
