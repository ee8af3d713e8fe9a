#!/usr/bin/env python3
"""Compare two loopfield_jax outputs (e.g. NumPy vs. batched JAX tracing, Euler vs. RK4)."""
import sys
import numpy as np

from loopfield_jax.io_output import read_output_nc

SCALARS = ["current", "loop_radius", "b_center", "n_segments", "line_count"]

def main(a, b):
    A = read_output_nc(a); B = read_output_nc(b)
    for k in SCALARS:
        va, vb = getattr(A, k), getattr(B, k)
        print(f"{k}: {va!r} vs {vb!r}" + ("" if va == vb else "  <-- differs"))
    if len(A.paths) != len(B.paths):
        print(f"n_lines: {len(A.paths)} vs {len(B.paths)}")
    for j, (pa, pb) in enumerate(zip(A.paths, B.paths)):
        n = min(pa.shape[0], pb.shape[0])
        d = np.max(np.abs(pa[:n] - pb[:n])) if n else 0.0
        print(f"line {j}: npoints {pa.shape[0]} vs {pb.shape[0]}  max|Δ|={d:.6e}")
    if A.grid is not None and B.grid is not None and A.grid.modB.shape == B.grid.modB.shape:
        da = np.max(np.abs(A.grid.modB - B.grid.modB))
        rel = da / (np.max(np.abs(A.grid.modB)) + 1e-300)
        print(f"grid_modB: max|Δ|={da:.6e}  rel={rel:.6e}")

if __name__ == "__main__":
    if len(sys.argv) != 3:
        print("Usage: compare_nc.py loopfield_out.a.nc loopfield_out.b.nc")
        raise SystemExit(2)
    main(sys.argv[1], sys.argv[2])
