import os
import numpy as np
from io_utils.image_handler import read_image, save_image
from scripts.run_pipeline import main


def test_cli_writes_output_and_plots(tmp_path):
    src = tmp_path / "in.png"
    save_image(str(src), (np.random.rand(40, 30, 3) * 255).astype(np.uint8))
    out = tmp_path / "out.png"
    plots = tmp_path / "plots"
    rc = main([str(src), str(out), "--filter", "lowpass", "--strength", "0.5",
               "--resolution", "32", "--plots", str(plots)])
    assert rc == 0
    arr, meta = read_image(str(out))
    assert arr.shape == (32, 32, 3)
    for name in ("spectrum.png", "spectrum_filtered.png", "transfer.png", "compare.png", "parameters.txt"):
        assert os.path.exists(plots / name)


def test_cli_reads_parameters_file(tmp_path):
    src = tmp_path / "in.png"
    save_image(str(src), np.full((8, 8), 128, dtype=np.uint8))
    params = tmp_path / "parameters.txt"
    params.write_text("filter_type: highpass\nstrength: 0.2\nresolution: 8\n", encoding="utf-8")
    out = tmp_path / "out.png"
    assert main([str(src), str(out), "--params", str(params)]) == 0
    arr, _ = read_image(str(out))
    assert arr.shape == (8, 8, 3)
    assert arr.max() <= 1  # constant image, DC removed


def test_cli_rejects_bad_resolution(tmp_path, capsys):
    rc = main([str(tmp_path / "missing.png"), str(tmp_path / "o.png"), "--resolution", "300"])
    assert rc == 2
    assert "power of two" in capsys.readouterr().err
