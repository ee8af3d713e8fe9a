from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import jax
import jax.numpy as jnp
import numpy as np

from .biot_savart import FieldGrid, grid_coordinates, segment_angles
from .constants import coincidence_tol, mu0, pi, r_eps
from .loop import Loop


@dataclass(frozen=True)
class LoopSegments:
    """Discretized loop for Biot–Savart evaluation in the (r, z) plane (JAX-friendly).

    Attributes:
      radius:  loop radius [m]
      dl_x:    (N,) x-component of each current element, -R sin(phi) dphi
      dl_y:    (N,) y-component, R cos(phi) dphi
      src_x:   (N,) source x position, R cos(phi)
      src_y:   (N,) source y position, R sin(phi)
    """

    radius: float
    dl_x: jnp.ndarray
    dl_y: jnp.ndarray
    src_x: jnp.ndarray
    src_y: jnp.ndarray


def segments_from_loop(loop: Loop, *, n_segments: int = 120) -> LoopSegments:
    c, s, dphi = segment_angles(n_segments)
    R = loop.radius
    return LoopSegments(
        radius=R,
        dl_x=jnp.asarray(-R * s * dphi, dtype=jnp.float64),
        dl_y=jnp.asarray(R * c * dphi, dtype=jnp.float64),
        src_x=jnp.asarray(R * c, dtype=jnp.float64),
        src_y=jnp.asarray(R * s, dtype=jnp.float64),
    )


def bfield_rz(segs: LoopSegments, *, points: Any, current: Any) -> jnp.ndarray:
    """(Br, Bz) at (r, z) points for a loop carrying `current`.

    Same midpoint Biot–Savart sum as :func:`loopfield_jax.biot_savart.field_at_points`,
    vectorized with `jax.vmap` over points and differentiable with respect to `current`
    and the point coordinates.

    Args:
      points: (2,) or (N,2) array of (r, z); callers near the axis pass |r| + r_eps.

    Returns:
      (N,2) array (or (2,) for a single point).
    """
    points = jnp.asarray(points, dtype=jnp.float64)
    single_point = points.ndim == 1
    if single_point:
        points = points[None, :]
    if points.ndim != 2 or points.shape[1] != 2:
        raise ValueError(f"points must be (2,) or (N,2), got {points.shape}")

    coeff = (mu0 / (4.0 * pi)) * jnp.asarray(current, dtype=jnp.float64)

    def b_at_point(p: jnp.ndarray) -> jnp.ndarray:
        rx = p[0] - segs.src_x
        ry = -segs.src_y
        rz = p[1]
        rmag = jnp.sqrt(rx * rx + ry * ry + rz * rz)
        keep = rmag >= coincidence_tol
        r3 = jnp.where(keep, rmag * rmag * rmag, 1.0)
        cross_x = segs.dl_y * rz
        cross_z = segs.dl_x * ry - segs.dl_y * rx
        Br = jnp.sum(jnp.where(keep, cross_x / r3, 0.0))
        Bz = jnp.sum(jnp.where(keep, cross_z / r3, 0.0))
        return coeff * jnp.stack([Br, Bz])

    B = jax.vmap(b_at_point)(points)
    return B[0] if single_point else B


def field_magnitude_grid_jax(
    loop: Loop,
    *,
    nr: int = 61,
    nz: int = 81,
    r_max: float | None = None,
    z_max: float | None = None,
    n_segments: int = 120,
) -> FieldGrid:
    """JAX version of :func:`loopfield_jax.biot_savart.field_magnitude_grid`."""
    r, z = grid_coordinates(loop, nr=nr, nz=nz, r_max=r_max, z_max=z_max)
    rr, zz = np.meshgrid(r, z, indexing="ij")
    pts = np.stack([np.abs(rr).reshape(-1) + r_eps, zz.reshape(-1)], axis=1)
    segs = segments_from_loop(loop, n_segments=n_segments)
    B = np.asarray(bfield_rz(segs, points=pts, current=loop.current), dtype=float)
    Br = B[:, 0].reshape(rr.shape)
    Bz = B[:, 1].reshape(rr.shape)
    Br = np.where(rr < 0.0, -Br, Br)
    return FieldGrid(r=r, z=z, Br=Br, Bz=Bz, modB=np.sqrt(Br * Br + Bz * Bz))
