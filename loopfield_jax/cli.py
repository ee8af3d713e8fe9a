from __future__ import annotations
import argparse
import os


def main():
    parser = argparse.ArgumentParser(description="loopfield_jax: magnetic field and field lines of a circular current loop")
    parser.add_argument("input", type=str, help="Input namelist file (must be loopfield_in.*)")
    parser.add_argument("--platform", type=str, default=None, choices=["cpu", "gpu"],
                        help="Force JAX platform (must be set before JAX is imported)")
    parser.add_argument("--no_jit", action="store_true", help="Disable jit (useful for debugging)")
    parser.add_argument("--x32", action="store_true", help="Force float32 (disables x64)")
    parser.add_argument("--verbose", action="store_true", help="Print extra diagnostics.")
    args = parser.parse_args()

    # Must be set before importing jax:
    if args.platform:
        os.environ["JAX_PLATFORM_NAME"] = args.platform
    if not args.x32:
        os.environ.setdefault("JAX_ENABLE_X64", "True")

    base = os.path.basename(args.input)
    if not base.startswith("loopfield_in."):
        raise SystemExit("Input file must be named loopfield_in.XXX for some extension XXX")

    from .run import run_loopfield

    try:
        res = run_loopfield(args.input, verbose=args.verbose, no_jit=args.no_jit, x32=args.x32)
    except (ValueError, FileNotFoundError) as e:
        raise SystemExit(f"[loopfield_jax] error: {e}") from e

    print(f"[loopfield_jax] B(center) = {res.b_center:.6e} T  field lines = {res.n_lines}")
    print(f"[loopfield_jax] summary: {res.output_log}")
    for p in res.extra_outputs:
        print(f"[loopfield_jax] wrote: {p}")


if __name__ == "__main__":
    main()
