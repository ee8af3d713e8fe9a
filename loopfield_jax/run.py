from __future__ import annotations

from dataclasses import dataclass
import os
import time as _time

from .config import config_from_inputs
from .utils import parse_namelist, resolve_existing_path
from .verbose import RunLog


@dataclass(frozen=True)
class RunResult:
    input_path: str
    output_nc: str
    output_log: str
    n_lines: int
    b_center: float
    extra_outputs: tuple[str, ...] = ()


def run_loopfield(
    input_path: str,
    *,
    verbose: bool = False,
    no_jit: bool = False,
    x32: bool = False,
) -> RunResult:
    """Run loopfield_jax on a namelist file, writing outputs next to the input file.

    Outputs for `loopfield_in.XXX`:
      - `loopfield_out.XXX.nc`  field lines (+ |B| grid when show_strength >= 0.5)
      - `loopfield_out.XXX.log` human-readable summary
      - optional `.vtp`/`.vts` (write_vtk) and `.png` (write_figures)

    This is the programmatic entrypoint used by tests/examples; the CLI wraps it.
    """
    # Import JAX lazily so callers can configure env vars first.
    import jax

    if not x32:
        jax.config.update("jax_enable_x64", True)
        os.environ.setdefault("JAX_ENABLE_X64", "True")
    if no_jit:
        jax.config.update("jax_disable_jit", True)

    from .biot_savart import field_magnitude_grid
    from .biot_savart_jax import field_magnitude_grid_jax
    from .fieldlines import build_field_line_set, seed_radii
    from .fieldlines_jax import build_field_line_set_jax
    from .io_output import write_output_nc
    from .loop import center_field, describe_state

    input_path = resolve_existing_path(input_path)
    input_path_abs = os.path.abspath(input_path)
    input_dir = os.path.dirname(input_path_abs) or "."
    base = os.path.basename(input_path_abs)
    if not base.startswith("loopfield_in."):
        raise ValueError("Input file must be named loopfield_in.XXX for some extension XXX")
    ext = base[len("loopfield_in."):]

    log = RunLog(enabled=verbose)
    t_start = _time.perf_counter()
    log.header(input_path_abs)

    cfg = config_from_inputs(parse_namelist(input_path_abs))
    loop = cfg.loop
    b0 = center_field(loop)
    log.loop_block(loop, line_count=cfg.num_field_lines, n_segments=cfg.n_segments, integrator=cfg.integrator)
    log.center_field(b0)

    log.phase("tracing field lines" + (" (JAX, batched)" if cfg.use_jax else ""))
    t0 = _time.perf_counter()
    if cfg.use_jax:
        lines = build_field_line_set_jax(
            loop,
            cfg.num_field_lines,
            max_steps=cfg.max_steps,
            ds_fraction=cfg.ds_fraction,
            n_segments=cfg.n_segments,
        )
    else:
        lines = build_field_line_set(
            loop,
            cfg.num_field_lines,
            max_steps=cfg.max_steps,
            ds_fraction=cfg.ds_fraction,
            method=cfg.integrator,
            n_segments=cfg.n_segments,
        )
    log.phase_done(_time.perf_counter() - t0)
    n_seeds = int(seed_radii(loop, cfg.num_field_lines).size) if loop.current != 0.0 else 0
    log.lines_summary(len(lines), n_seeds, [int(p.shape[0]) for p in lines.paths])

    grid = None
    if cfg.sample_grid:
        log.phase(f"sampling |B| on a {cfg.grid_nr}x{cfg.grid_nz} grid")
        t0 = _time.perf_counter()
        sampler = field_magnitude_grid_jax if cfg.use_jax else field_magnitude_grid
        grid = sampler(loop, nr=cfg.grid_nr, nz=cfg.grid_nz, n_segments=cfg.n_segments)
        log.phase_done(_time.perf_counter() - t0)

    out_nc = os.path.join(input_dir, f"loopfield_out.{ext}.nc")
    write_output_nc(out_nc, loop, lines, n_segments=cfg.n_segments, grid=grid)
    print(f"[loopfield_jax] wrote: {out_nc}")

    extra: list[str] = []
    if cfg.write_vtk:
        from .vtk_io import write_field_grid_vts, write_fieldlines_vtp

        vtp = os.path.join(input_dir, f"loopfield_fieldlines.{ext}.vtp")
        write_fieldlines_vtp(vtp, lines)
        extra.append(vtp)
        if grid is not None:
            vts = os.path.join(input_dir, f"loopfield_grid.{ext}.vts")
            write_field_grid_vts(vts, grid)
            extra.append(vts)
    if cfg.write_figures:
        from .plotting import save_field_line_figure

        png = os.path.join(input_dir, f"loopfield_fieldlines.{ext}.png")
        save_field_line_figure(png, loop, lines, grid=grid)
        extra.append(png)
    for p in extra:
        log.p(f"wrote: {p}")

    # Also write a small human-readable summary log next to the netCDF file.
    summary_path = out_nc[: -len(".nc")] + ".log"
    try:
        with open(summary_path, "w", encoding="utf-8") as f:
            f.write(f"input={input_path_abs}\n")
            f.write(f"current={loop.current:.6e}\n")
            f.write(f"loop_radius={loop.radius:.6e}\n")
            f.write(f"b_center={b0:.6e}\n")
            f.write(f"n_lines={len(lines)}\n")
            f.write("j npoints r_start z_start r_end z_end\n")
            for j, p in enumerate(lines.paths):
                f.write(f"{j} {p.shape[0]} {p[0, 0]:.6e} {p[0, 1]:.6e} {p[-1, 0]:.6e} {p[-1, 1]:.6e}\n")
            f.write(describe_state(loop) + "\n")
    except OSError as e:
        print(f"[loopfield_jax] WARNING: could not write summary log: {e}")

    log.complete(sec=_time.perf_counter() - t_start, out_nc_basename=os.path.basename(out_nc))
    return RunResult(
        input_path=input_path_abs,
        output_nc=out_nc,
        output_log=summary_path,
        n_lines=len(lines),
        b_center=b0,
        extra_outputs=tuple(extra),
    )
