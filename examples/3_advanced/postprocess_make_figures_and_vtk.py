#!/usr/bin/env python3
"""Postprocess a loopfield_jax run into figures + ParaView files.

It:
1) (optionally) runs `loopfield_jax` on a `loopfield_in.*` input file
2) reads the resulting `loopfield_out.*.nc`
3) produces:
   - the field-line cross-section over the |B| heat map
   - the on-axis profile (closed form vs. Biot-Savart sum)
   - the field-line convergence vs. the number of loop segments
   - VTK `.vtp`/`.vts` files for ParaView (field lines, |B| grid)
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path

import numpy as np

from loopfield_jax.biot_savart import field_at
from loopfield_jax.constants import r_eps
from loopfield_jax.fieldlines import FieldLineSet, FieldLineSetKey
from loopfield_jax.io_output import read_output_nc
from loopfield_jax.loop import Loop
from loopfield_jax.plotting import plot_axial_profile, plot_field_lines, setup_matplotlib
from loopfield_jax.vtk_io import write_field_grid_vts, write_fieldlines_vtp


def main():
    parser = argparse.ArgumentParser()
    parser.add_argument("--input", type=str, required=True, help="Path to loopfield_in.*")
    parser.add_argument("--run", action="store_true", help="Run loopfield_jax first (otherwise reuse existing output).")
    parser.add_argument("--platform", type=str, default="cpu", choices=["cpu", "gpu"])
    parser.add_argument("--out_dir", type=str, default=None, help="Output directory (default: next to the input).")
    parser.add_argument("--no_figures", action="store_true", help="Skip writing matplotlib figures.")
    parser.add_argument("--no_vtk", action="store_true", help="Skip writing ParaView VTK files.")
    args = parser.parse_args()

    input_path = Path(args.input).resolve()
    if not input_path.name.startswith("loopfield_in."):
        raise SystemExit("Input must be named loopfield_in.*")
    ext = input_path.name[len("loopfield_in."):]
    out_nc = input_path.with_name(f"loopfield_out.{ext}.nc")
    out_dir = Path(args.out_dir).resolve() if args.out_dir else input_path.parent / f"figures_{ext}"
    out_dir.mkdir(parents=True, exist_ok=True)

    if args.run or not out_nc.exists():
        cmd = [sys.executable, "-m", "loopfield_jax.cli", "--platform", args.platform, str(input_path)]
        print("[postprocess] running:", " ".join(cmd))
        subprocess.run(cmd, check=True)

    out = read_output_nc(str(out_nc))
    loop = Loop(radius=out.loop_radius, current=out.current)
    lines = FieldLineSet(
        key=FieldLineSetKey.for_loop(loop, out.line_count),
        paths=tuple(out.paths),
    )
    print(f"[postprocess] {len(lines)} field lines, B(center) = {out.b_center:.4e} T")

    # Field on the wire plane just inside and outside the loop: Bz flips sign across the wire.
    for frac in (0.9, 1.1):
        Br, Bz = field_at(loop, frac * loop.radius + r_eps, 0.0, n_segments=out.n_segments)
        print(f"[postprocess] r = {frac:.1f} R: Br = {Br:+.3e} T, Bz = {Bz:+.3e} T")

    if not args.no_figures:
        plt = setup_matplotlib()

        fig, _ax = plot_field_lines(loop, lines, grid=out.grid)
        fig.tight_layout()
        fig.savefig(out_dir / "fieldlines.png")
        plt.close(fig)

        fig, _ax = plot_axial_profile(loop, n_segments=out.n_segments)
        fig.tight_layout()
        fig.savefig(out_dir / "axial_profile.png")
        plt.close(fig)

        # Relative error of the segment sum at the center vs. N.
        ns = np.array([8, 16, 32, 64, 120, 256])
        b0 = out.b_center
        err = []
        for n in ns:
            _Br, Bz = field_at(loop, r_eps, 0.0, n_segments=int(n))
            err.append(abs(Bz - b0) / abs(b0) if b0 != 0.0 else 0.0)
        fig, ax = plt.subplots(figsize=(5.5, 4.0))
        ax.loglog(ns, np.maximum(err, 1e-18), "o-")
        ax.set_xlabel("number of segments N")
        ax.set_ylabel("|B_num - B_exact| / B_exact at center")
        fig.tight_layout()
        fig.savefig(out_dir / "segment_convergence.png")
        plt.close(fig)
        print(f"[postprocess] wrote figures to {out_dir}")

    if not args.no_vtk:
        write_fieldlines_vtp(out_dir / "fieldlines.vtp", lines)
        if out.grid is not None:
            write_field_grid_vts(out_dir / "field_grid.vts", out.grid)
        print(f"[postprocess] wrote VTK files to {out_dir}")


if __name__ == "__main__":
    main()
