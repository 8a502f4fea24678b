import warnings
import numpy as np
import pytest
from spectral.filters import passthrough_transfer
from spectral.params import ConfigurationError, FilterParameters, FilterType
from spectral.passes import PASS_SEQUENCE, PassDescription, pass_names
from spectral.pipeline import SpectralPipeline, process_image
from spectral.spectrum import SpectrumPool
from spectral.writer import render


def _noise(n, seed=0):
    return np.random.default_rng(seed).random((n, n, 3)).astype(np.float32)


def test_passthrough_reproduces_input():
    img = _noise(64)
    params = FilterParameters(resolution=64)
    out = SpectralPipeline(params, mask_builder=passthrough_transfer).run(img).output
    assert out.shape == img.shape
    assert np.allclose(out, img, atol=1e-4)


def test_runs_every_pass_in_order():
    result = SpectralPipeline(FilterParameters(resolution=8)).run(_noise(8))
    assert result.passes == pass_names()
    assert result.spectrum is None


def test_maximal_lowpass_blurs_to_mean():
    img = _noise(64, seed=1)
    params = FilterParameters(filter_type=FilterType.LOW_PASS, strength=1.0, resolution=64)
    out = process_image(img, params)
    assert np.allclose(out.mean(axis=(0, 1)), img.mean(axis=(0, 1)), atol=1e-3)
    assert np.all(out.var(axis=(0, 1)) < 1e-3 * img.var(axis=(0, 1)))


def test_weak_lowpass_still_reduces_variance():
    img = _noise(64, seed=2)
    params = FilterParameters(filter_type="lowpass", strength=0.0, resolution=64)
    out = process_image(img, params)
    assert out.var() < 0.5 * img.var()


def test_highpass_removes_constant_image():
    img = np.full((32, 32, 3), 0.7, dtype=np.float32)
    out = process_image(img, FilterParameters(filter_type="highpass", strength=0.3, resolution=32))
    assert np.allclose(out, 0.0, atol=1e-4)


def test_directional_filter_suppresses_vertical_axis():
    n = 64
    y, x = np.mgrid[0:n, 0:n]
    vertical_stripes = 0.25 * np.cos(2 * np.pi * 8 * x / n)    # energy on the fx axis
    horizontal_stripes = 0.25 * np.cos(2 * np.pi * 8 * y / n)  # energy on the fy axis
    img = np.repeat((0.5 + vertical_stripes + horizontal_stripes)[:, :, None], 3, axis=2)

    params = FilterParameters(filter_type=FilterType.DIRECTIONAL, strength=1.0, direction=0.0, resolution=n)
    result, inter = SpectralPipeline(params).run(img, return_intermediates=True)
    before = np.abs(inter["fft_vertical"].astype(np.complex128)) ** 2
    after = np.abs(inter["modify_frequencies"].astype(np.complex128)) ** 2

    h_bins = (slice(None), 0, [8, n - 8])
    v_bins = (slice(None), [8, n - 8], 0)
    assert before[v_bins].sum() > 1.0
    assert after[h_bins].sum() > 0.99 * before[h_bins].sum()
    assert after[v_bins].sum() < 0.1 * before[v_bins].sum()

    # horizontal stripes are gone from the reconstructed image
    expected = np.clip(0.5 + vertical_stripes, 0, 1)
    assert np.allclose(result.output[..., 0], expected, atol=1e-3)


def test_dc_of_forward_pass_equals_sum():
    img = _noise(32, seed=3)
    _, inter = SpectralPipeline(FilterParameters(resolution=32)).run(img, return_intermediates=True)
    F = inter["fft_vertical"]
    assert np.allclose(F[:, 0, 0].real, img.astype(np.float64).sum(axis=(0, 1)), rtol=1e-5)
    assert set(inter) == set(pass_names()) - {"main_image"}


def test_show_spectrum_renders_filtered_spectrum():
    img = np.full((16, 16, 3), 0.5, dtype=np.float32)
    params = FilterParameters(filter_type="lowpass", strength=0.0, show_spectrum=True, resolution=16)
    result = SpectralPipeline(params).run(img)
    assert result.spectrum is not None
    assert np.allclose(result.output, render(result.spectrum, show_spectrum=True))
    assert np.allclose(result.output[8, 8], 1.0)
    mask = np.ones((16, 16), dtype=bool)
    mask[8, 8] = False
    assert np.allclose(result.output[mask], 0.0, atol=1e-4)


def test_resamples_any_image_size():
    img = (np.random.rand(100, 80, 3) * 255).astype(np.uint8)
    out = process_image(img, FilterParameters(resolution=32))
    assert out.shape == (32, 32, 3)
    assert out.min() >= 0.0 and out.max() <= 1.0


def test_color_channels_independent():
    img = np.zeros((32, 32, 3), dtype=np.float32)
    img[..., 0] = np.random.rand(32, 32)
    out = process_image(img, FilterParameters(filter_type="bandpass", radius=2.0, resolution=32))
    assert np.allclose(out[..., 1], 0.0)
    assert np.allclose(out[..., 2], 0.0)


def test_pool_buffers_are_reused_and_reset():
    pool = SpectrumPool()
    pipe = SpectralPipeline(FilterParameters(resolution=16), pool=pool)
    pipe.run(_noise(16))
    assert pool.available(16) == 1
    buf = pool.acquire(16)
    assert np.all(buf == 0)
    pool.release(buf)
    pipe.run(_noise(16, seed=5))
    assert pool.available(16) == 1


def test_deterministic():
    img = _noise(32, seed=9)
    params = FilterParameters(filter_type="directional", direction=0.7, resolution=32)
    a = process_image(img, params)
    b = process_image(img, params)
    assert np.array_equal(a, b)


def test_configuration_fails_before_running():
    with pytest.raises(ConfigurationError):
        SpectralPipeline({"resolution": 1000})
    with pytest.raises(ConfigurationError):
        SpectralPipeline(FilterParameters(resolution=8), passes=PASS_SEQUENCE[:-1])
    with pytest.raises(ConfigurationError):
        SpectralPipeline(FilterParameters(resolution=8), passes=PASS_SEQUENCE + (PassDescription("bloom", ("main_image",)),))
    with pytest.raises(ConfigurationError):
        SpectralPipeline("lowpass")


def test_pass_sequence_must_match_contract():
    by_name = {p.name: p for p in PASS_SEQUENCE}
    partial = tuple(by_name[name] for name in
                    ("initialize_data", "fft_horizontal", "modify_frequencies", "ifft_horizontal", "main_image"))
    params = FilterParameters(filter_type="lowpass", strength=1.0, resolution=16)
    with pytest.raises(ConfigurationError):
        SpectralPipeline(params, passes=partial)

    # inverse order swapped, dependencies rewired so only the ordering is wrong
    reordered = PASS_SEQUENCE[:4] + (
        PassDescription("ifft_horizontal", ("modify_frequencies",)),
        PassDescription("ifft_vertical", ("ifft_horizontal",)),
        PassDescription("main_image", ("ifft_vertical",)),
    )
    with pytest.raises(ConfigurationError):
        SpectralPipeline(params, passes=reordered)

    spectrum_only = (by_name["initialize_data"], PassDescription("main_image", ("initialize_data",)))
    with pytest.raises(ConfigurationError):
        SpectralPipeline(params.with_changes(show_spectrum=True), passes=spectrum_only)

    # an equivalent sequence built from fresh descriptions is fine
    rebuilt = tuple(PassDescription(p.name, p.inputs) for p in PASS_SEQUENCE)
    assert SpectralPipeline(params, passes=rebuilt).run(_noise(16)).passes == pass_names()


def _single_bin(params, n):
    scale = np.zeros((n, n), dtype=np.float32)
    scale[0, 1] = 1.0  # keeps kx=1 without its conjugate kx=-1
    return scale


def test_warn_imaginary_reports_residue():
    ramp = np.tile(np.arange(8, dtype=np.float32) / 7.0, (8, 1))
    img = np.stack([ramp] * 3, axis=-1)
    params = FilterParameters(resolution=8)

    with pytest.warns(RuntimeWarning):
        SpectralPipeline(params, mask_builder=_single_bin, warn_imaginary=True).run(img)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        SpectralPipeline(params, mask_builder=_single_bin).run(img)
    assert not [w for w in caught if issubclass(w.category, RuntimeWarning)]


def test_warn_imaginary_quiet_for_real_result():
    with warnings.catch_warnings():
        warnings.simplefilter("error", RuntimeWarning)
        out = SpectralPipeline(FilterParameters(resolution=16), warn_imaginary=True).run(_noise(16)).output
    assert out.shape == (16, 16, 3)
