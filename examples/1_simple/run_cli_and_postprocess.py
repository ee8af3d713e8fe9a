#!/usr/bin/env python3
"""End-to-end example runner (CLI + optional figures/VTK).

Runs the CLI on `loopfield_in.default` (produces loopfield_out.default.{nc,log}).
Add --postprocess to also write figures and ParaView files from the netCDF output.
"""

from __future__ import annotations

import argparse
import subprocess
import sys
from pathlib import Path


def main() -> None:
    default_input = Path(__file__).with_name("loopfield_in.default")

    parser = argparse.ArgumentParser()
    parser.add_argument("--input", type=str, default=str(default_input), help="Path to loopfield_in.*")
    parser.add_argument("--platform", type=str, default="cpu", choices=["cpu", "gpu"])
    parser.add_argument("--postprocess", action="store_true", help="Also write figures/VTK using the shared postprocess script.")
    parser.add_argument("--no_figures", action="store_true", help="Skip writing matplotlib figures (postprocess only).")
    parser.add_argument("--no_vtk", action="store_true", help="Skip writing ParaView VTK files (postprocess only).")
    args = parser.parse_args()

    input_path = Path(args.input).resolve()
    if not input_path.name.startswith("loopfield_in."):
        raise SystemExit("Input must be named loopfield_in.*")

    project_root = Path(__file__).resolve().parents[2]
    cmd = [sys.executable, "-m", "loopfield_jax.cli", "--platform", args.platform, "--verbose", str(input_path)]
    print("[examples/1_simple] running:", " ".join(cmd))
    subprocess.run(cmd, cwd=str(project_root), check=True)

    if not args.postprocess:
        return

    post = project_root / "examples" / "3_advanced" / "postprocess_make_figures_and_vtk.py"
    cmd = [sys.executable, str(post), "--input", str(input_path)]
    if args.no_figures:
        cmd.append("--no_figures")
    if args.no_vtk:
        cmd.append("--no_vtk")
    print("[examples/1_simple] postprocess:", " ".join(cmd))
    subprocess.run(cmd, cwd=str(project_root), check=True)


if __name__ == "__main__":
    main()
