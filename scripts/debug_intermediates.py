import numpy as np
from spectral.butterfly import Direction, dft_reference, make_plan, transform
from spectral.filters import passthrough_transfer
from spectral.params import N_MAX, FilterParameters
from spectral.pipeline import SpectralPipeline

# --- Config ---
N = 64
SEED = 0

rng = np.random.default_rng(SEED)

# --- Butterfly engine vs direct DFT for every supported size ---
print("\n=== BUTTERFLY vs DIRECT DFT ===")
n = 1
while n <= min(N_MAX, 512):
    plan = make_plan(n)
    x = (rng.random(n) + 1j * rng.random(n)).astype(np.complex64)
    scratch = np.empty((1, n), dtype=np.complex64)
    got = transform(x[None, :], scratch, plan, Direction.FORWARD)[0]
    err = float(np.max(np.abs(got - dft_reference(x)))) / max(n, 1)
    print(f"N={n:5d} stages={plan.radices} max rel err={err:.2e}")
    n *= 2

# --- Full pipeline with pass-through filter ---
img = rng.random((N, N, 3)).astype(np.float32)
params = FilterParameters(resolution=N)
result, inter = SpectralPipeline(params, mask_builder=passthrough_transfer).run(img, return_intermediates=True)

print("\n=== DEBUG INTERMEDIATES ===")
print(f"max imag after inverse: {np.max(np.abs(inter['ifft_horizontal'].imag)):.3e}")
print(f"max reconstruction error: {np.max(np.abs(result.output - img)):.3e}")

F = inter["fft_vertical"]
i_idx = (-np.arange(N)) % N
conj_pair = np.conj(F[:, i_idx[:, None], i_idx[None, :]])
print("Spectrum Hermitian symmetry?", np.allclose(F, conj_pair, atol=1e-2))
print("DC == channel sums?", np.allclose(F[:, 0, 0].real, img.sum(axis=(0, 1)), rtol=1e-4))
print("============================\n")
