import numpy as np
import pytest
from spectral import butterfly
from spectral.butterfly import (
    Direction, make_plan, stage_radices, digit_reversal, transform, dft_reference, cis
)
from spectral.params import ConfigurationError

SIZES = [2 ** k for k in range(12)]  # 1 .. 2048


def _fft(x, plan, direction=Direction.FORWARD):
    scratch = np.empty((1, plan.n), dtype=np.complex64)
    return transform(np.asarray(x)[None, :], scratch, plan, direction)[0]


def test_stage_radices_mixed():
    assert stage_radices(0) == ()
    assert stage_radices(1) == (2,)
    assert stage_radices(2) == (4,)
    assert stage_radices(3) == (4, 2)
    assert stage_radices(11) == (4, 4, 4, 4, 4, 2)


def test_plan_validation():
    for bad in (0, 3, 12, 4096, -8):
        with pytest.raises(ConfigurationError):
            make_plan(bad)
    plan = make_plan(1024)
    assert plan.log2n == 10
    assert plan.num_stages == 5


def test_bit_reversal_for_radix2():
    perm = digit_reversal((2, 2, 2))
    assert perm.tolist() == [0, 4, 2, 6, 1, 5, 3, 7]


def test_digit_reversal_is_permutation():
    for n in SIZES:
        perm = make_plan(n).permutation
        assert sorted(perm.tolist()) == list(range(n))


def test_cis_unit_magnitude():
    theta = np.linspace(-np.pi, np.pi, 17)
    w = cis(theta)
    assert w.dtype == np.complex64
    assert np.allclose(np.abs(w), 1.0, atol=1e-6)
    assert np.allclose(w, np.exp(1j * theta), atol=1e-6)


@pytest.mark.parametrize("n", SIZES[:11])
def test_forward_matches_direct_dft(n):
    rng = np.random.default_rng(n)
    x = (rng.random(n) + 1j * rng.random(n)).astype(np.complex64)
    got = _fft(x, make_plan(n))
    ref = dft_reference(x)
    assert np.allclose(got, ref, rtol=1e-4, atol=1e-4 * max(1.0, np.sqrt(n)))


def test_forward_2048_matches_numpy():
    rng = np.random.default_rng(7)
    x = rng.random(2048).astype(np.complex64)
    got = _fft(x, make_plan(2048))
    assert np.allclose(got, np.fft.fft(x.astype(np.complex128)), rtol=1e-4, atol=5e-3)


@pytest.mark.parametrize("n", SIZES)
def test_inverse_undoes_forward(n):
    rng = np.random.default_rng(100 + n)
    x = rng.random(n).astype(np.complex64)
    plan = make_plan(n)
    back = _fft(_fft(x, plan), plan, Direction.INVERSE)
    assert np.allclose(back, x, atol=1e-4)


def test_inverse_is_scaled_by_n():
    plan = make_plan(16)
    out = _fft(np.ones(16, dtype=np.complex64), plan, Direction.INVERSE)
    expected = np.zeros(16)
    expected[0] = 1.0
    assert np.allclose(out, expected, atol=1e-6)


def test_batched_groups_are_independent():
    rng = np.random.default_rng(3)
    plan = make_plan(32)
    rows = rng.random((5, 32)).astype(np.complex64)
    scratch = np.empty((5, 32), dtype=np.complex64)
    batched = transform(rows, scratch, plan, Direction.FORWARD).copy()
    for g in range(5):
        assert np.allclose(batched[g], _fft(rows[g], plan), atol=1e-5)


def test_radix2_configuration(monkeypatch):
    monkeypatch.setattr(butterfly, "RADIX", 2)
    plan = make_plan(64)
    assert plan.radices == (2,) * 6
    x = np.random.rand(64).astype(np.complex64)
    assert np.allclose(_fft(x, plan), dft_reference(x), rtol=1e-4, atol=1e-3)


def test_unsupported_radix(monkeypatch):
    monkeypatch.setattr(butterfly, "RADIX", 8)
    with pytest.raises(ConfigurationError):
        make_plan(64)


def test_scratch_validation():
    plan = make_plan(8)
    x = np.zeros((1, 8), dtype=np.complex64)
    with pytest.raises(ValueError):
        transform(x, np.zeros((1, 8), dtype=np.complex128), plan, Direction.FORWARD)
    with pytest.raises(ValueError):
        transform(x, np.zeros((1, 16), dtype=np.complex64), plan, Direction.FORWARD)
    with pytest.raises(ValueError):
        transform(np.zeros((1, 16)), np.zeros((1, 16), dtype=np.complex64), plan, Direction.FORWARD)
