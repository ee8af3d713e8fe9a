from __future__ import annotations

from dataclasses import dataclass
from typing import Iterator

import numpy as np

from .biot_savart import field_at
from .constants import b_min, domain_r, domain_z, r_eps
from .loop import Loop

# Paths with fewer points than this are dropped from a field-line set.
MIN_PATH_POINTS = 11

# Seeds start just above (forward trace) and below (backward trace) the loop plane [m],
# capped at 1% of the radius for small loops.
SEED_Z_OFFSET = 1e-3

DS_FRACTION_MIN = 0.02
DS_FRACTION_MAX = 0.05


@dataclass(frozen=True)
class FieldLineSetKey:
    current: float
    radius: float
    line_count: int

    @classmethod
    def for_loop(cls, loop: Loop, line_count: int) -> "FieldLineSetKey":
        return cls(current=loop.current, radius=loop.radius, line_count=int(line_count))


@dataclass(frozen=True)
class FieldLineSet:
    """Field lines of one loop configuration.

    Attributes:
      key:   (current, radius, line_count) the set was built from
      paths: tuple of read-only (n,2) arrays of (r, z) points
    """

    key: FieldLineSetKey
    paths: tuple[np.ndarray, ...]

    def __len__(self) -> int:
        return len(self.paths)

    def __iter__(self) -> Iterator[np.ndarray]:
        return iter(self.paths)

    def __getitem__(self, i: int) -> np.ndarray:
        return self.paths[i]


def _frozen(a: np.ndarray) -> np.ndarray:
    a.setflags(write=False)
    return a


def seed_z_offset(loop: Loop) -> float:
    return min(SEED_Z_OFFSET, 0.01 * loop.radius)


def in_domain(loop: Loop, r: float, z: float) -> bool:
    R = loop.radius
    return abs(r) <= domain_r * R and abs(z) <= domain_z * R


def check_step(loop: Loop, ds: float) -> None:
    R = loop.radius
    lo = DS_FRACTION_MIN * R * (1.0 - 1e-12)
    hi = DS_FRACTION_MAX * R * (1.0 + 1e-12)
    if not (lo <= abs(ds) <= hi):
        raise ValueError(
            f"|ds| must lie in [{DS_FRACTION_MIN}R, {DS_FRACTION_MAX}R] = [{DS_FRACTION_MIN * R:.3e}, "
            f"{DS_FRACTION_MAX * R:.3e}], got {ds:.3e}"
        )


def trace_line(
    loop: Loop,
    start_r: float,
    start_z: float,
    max_steps: int,
    ds: float,
    *,
    method: str = "euler",
    n_segments: int = 120,
) -> np.ndarray:
    """Trace a field line in the (r, z) plane with fixed arc-length steps.

    The ODE is

      d(r, z) / ds = (Br, Bz) / |B|     evaluated at (|r| + r_eps, z)

    integrated with explicit Euler (default) or classical RK4. The current point is recorded
    before each step, so the first point is the seed. Tracing stops after `max_steps` points,
    when |B| < b_min at the current point, or when a step leaves |r| <= 6R, |z| <= 5R (the
    outside point is not recorded).

    Returns:
      (n,2) read-only array of (r, z) with 1 <= n <= max_steps.
    """
    max_steps = int(max_steps)
    if max_steps < 1:
        raise ValueError(f"max_steps must be >= 1, got {max_steps}")
    ds = float(ds)
    check_step(loop, ds)
    if method not in ("euler", "rk4"):
        raise ValueError(f"Unknown integrator {method!r} (expected 'euler' or 'rk4')")
    r = float(start_r)
    z = float(start_z)
    if not in_domain(loop, r, z):
        raise ValueError(f"seed ({r}, {z}) lies outside the tracing domain")

    def direction(r_: float, z_: float) -> tuple[float, float] | None:
        Br, Bz = field_at(loop, abs(r_) + r_eps, z_, n_segments=n_segments)
        n = float(np.hypot(Br, Bz))
        if n < b_min:
            return None
        return Br / n, Bz / n

    def direction_or_zero(r_: float, z_: float) -> tuple[float, float]:
        u = direction(r_, z_)
        return (0.0, 0.0) if u is None else u

    pts = []
    for _ in range(max_steps):
        pts.append((r, z))
        k1 = direction(r, z)
        if k1 is None:
            break
        if method == "euler":
            r += ds * k1[0]
            z += ds * k1[1]
        else:
            k2 = direction_or_zero(r + 0.5 * ds * k1[0], z + 0.5 * ds * k1[1])
            k3 = direction_or_zero(r + 0.5 * ds * k2[0], z + 0.5 * ds * k2[1])
            k4 = direction_or_zero(r + ds * k3[0], z + ds * k3[1])
            r += (ds / 6.0) * (k1[0] + 2.0 * k2[0] + 2.0 * k3[0] + k4[0])
            z += (ds / 6.0) * (k1[1] + 2.0 * k2[1] + 2.0 * k3[1] + k4[1])
        if not in_domain(loop, r, z):
            break
    return _frozen(np.asarray(pts, dtype=float).reshape(-1, 2))


def trace_both_directions(
    loop: Loop,
    seed_r: float,
    *,
    max_steps: int,
    ds: float,
    z_offset: float | None = None,
    method: str = "euler",
    n_segments: int = 120,
) -> np.ndarray:
    """Full field line through a seed on the loop plane.

    The forward trace starts at (seed_r, +z_offset) with step +|ds| and the backward trace at
    (seed_r, -z_offset) with step -|ds|; the result is reverse(backward) followed by forward.
    """
    ds = abs(float(ds))
    z0 = seed_z_offset(loop) if z_offset is None else float(z_offset)
    forward = trace_line(loop, seed_r, z0, max_steps, ds, method=method, n_segments=n_segments)
    backward = trace_line(loop, seed_r, -z0, max_steps, -ds, method=method, n_segments=n_segments)
    return _frozen(np.concatenate([backward[::-1], forward], axis=0))


def seed_radii(loop: Loop, line_count: int) -> np.ndarray:
    """Seed radii: `line_count` interior seeds and min(line_count, 6) exterior seeds."""
    line_count = int(line_count)
    if line_count < 0:
        raise ValueError(f"line_count must be non-negative, got {line_count}")
    R = loop.radius
    n_int = line_count
    n_ext = min(line_count, 6)
    frac_int = (np.arange(n_int, dtype=float) + 1.0) / (n_int + 1)
    frac_ext = (np.arange(n_ext, dtype=float) + 1.0) / (n_ext + 1)
    return np.concatenate([R * frac_int * 0.9, R * (1.3 + frac_ext * 2.5)])


def build_field_line_set(
    loop: Loop,
    line_count: int,
    *,
    max_steps: int = 600,
    ds_fraction: float = 0.04,
    method: str = "euler",
    n_segments: int = 120,
    min_points: int = MIN_PATH_POINTS,
) -> FieldLineSet:
    """Trace the displayed family of field lines for `loop`.

    Pure function of its arguments; callers are expected to cache the result on
    :class:`FieldLineSetKey` (see :class:`loopfield_jax.solver.FieldSolver`).
    A zero current returns an empty set without tracing.
    """
    key = FieldLineSetKey.for_loop(loop, line_count)
    seeds = seed_radii(loop, line_count)
    if loop.current == 0.0 or seeds.size == 0:
        return FieldLineSet(key=key, paths=())

    ds = float(ds_fraction) * loop.radius
    paths = []
    for seed in seeds:
        line = trace_both_directions(
            loop, float(seed), max_steps=max_steps, ds=ds, method=method, n_segments=n_segments
        )
        if line.shape[0] >= int(min_points):
            paths.append(line)
    return FieldLineSet(key=key, paths=tuple(paths))


def mirror_path(path: np.ndarray) -> np.ndarray:
    """Reflect a traced (r, z) path about the axis (r -> -r) for the lower display half."""
    p = np.array(path, dtype=float, copy=True)
    p[:, 0] = -p[:, 0]
    return _frozen(p)


def arrow_index(path: np.ndarray, *, fraction: float = 0.35) -> int | None:
    """Index of the segment start where a direction arrow is drawn, or None for short paths."""
    n = int(np.asarray(path).shape[0])
    i = int(np.floor(n * fraction))
    return i if i < n - 1 else None
