from __future__ import annotations

from dataclasses import dataclass, fields
from typing import Any

import numpy as np

from .loop import Loop


@dataclass(frozen=True)
class RunConfig:
    """Settings read from a `&loopfield_nml` namelist (see examples/1_simple/loopfield_in.default)."""

    current: float = 5.0  # [A]
    loop_radius_cm: float = 10.0
    num_field_lines: int = 12
    show_strength: float = 1.0  # >= 0.5 samples the |B| grid
    n_segments: int = 120
    max_steps: int = 600
    ds_fraction: float = 0.04
    integrator: str = "euler"
    grid_nr: int = 61
    grid_nz: int = 81
    write_vtk: bool = False
    write_figures: bool = False
    use_jax: bool = False  # batched JAX tracing and grid sampling (Euler only)

    @property
    def loop(self) -> Loop:
        return Loop(radius=self.loop_radius_cm / 100.0, current=self.current)

    @property
    def sample_grid(self) -> bool:
        return self.show_strength >= 0.5


def config_from_inputs(inputs: dict[str, Any]) -> RunConfig:
    """Build a :class:`RunConfig` from parsed namelist values, rejecting unknown keys."""
    known = {f.name: f for f in fields(RunConfig)}
    unknown = sorted(set(inputs) - set(known))
    if unknown:
        raise ValueError(f"Unknown loopfield_nml keys: {unknown}")

    kw: dict[str, Any] = {}
    for k, v in inputs.items():
        default = known[k].default
        if isinstance(default, bool):
            if not isinstance(v, bool):
                raise ValueError(f"{k} must be a logical (.true./.false.), got {v!r}")
            kw[k] = v
        elif isinstance(default, int):
            if isinstance(v, bool) or not np.isfinite(float(v)) or float(v) != int(v):
                raise ValueError(f"{k} must be an integer, got {v!r}")
            kw[k] = int(v)
        elif isinstance(default, float):
            if isinstance(v, bool) or not np.isfinite(float(v)):
                raise ValueError(f"{k} must be a finite number, got {v!r}")
            kw[k] = float(v)
        else:
            kw[k] = str(v).strip().lower()

    cfg = RunConfig(**kw)
    if cfg.num_field_lines < 0:
        raise ValueError("num_field_lines must be non-negative")
    if cfg.integrator not in ("euler", "rk4"):
        raise ValueError(f"integrator must be 'euler' or 'rk4', got {cfg.integrator!r}")
    if cfg.use_jax and cfg.integrator != "euler":
        raise ValueError("use_jax supports only integrator = 'euler'")
    if not (0.02 <= cfg.ds_fraction <= 0.05):
        raise ValueError(f"ds_fraction must lie in [0.02, 0.05], got {cfg.ds_fraction}")
    if cfg.max_steps < 1:
        raise ValueError("max_steps must be >= 1")
    # Raises for a non-positive radius.
    _ = cfg.loop
    return cfg
