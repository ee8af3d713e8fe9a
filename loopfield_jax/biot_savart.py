from __future__ import annotations

from dataclasses import dataclass
from functools import lru_cache
from typing import Any

import numpy as np

from .constants import coincidence_tol, domain_r, domain_z, mu0, pi, r_eps, twopi
from .loop import Loop


@dataclass(frozen=True)
class FieldGrid:
    """Field sampled on a tensor-product (r, z) grid.

    Attributes:
      r:    (nr,) radial coordinates [m], symmetric about r=0 (display half-planes)
      z:    (nz,) axial coordinates [m]
      Br:   (nr, nz) radial component, sign-flipped for r<0 so the grid is the mirrored slice
      Bz:   (nr, nz)
      modB: (nr, nz) field magnitude
    """

    r: np.ndarray
    z: np.ndarray
    Br: np.ndarray
    Bz: np.ndarray
    modB: np.ndarray


@lru_cache(maxsize=8)
def segment_angles(n_segments: int) -> tuple[np.ndarray, np.ndarray, float]:
    """cos/sin of the segment angles phi_i = 2 pi i / N, and dphi.

    The returned arrays are read-only (they are shared through the cache).
    """
    n_segments = int(n_segments)
    if n_segments < 3:
        raise ValueError(f"n_segments must be >= 3, got {n_segments}")
    phi = twopi * np.arange(n_segments, dtype=float) / n_segments
    c = np.cos(phi)
    s = np.sin(phi)
    c.setflags(write=False)
    s.setflags(write=False)
    return c, s, twopi / n_segments


def field_at_points(loop: Loop, r: Any, z: Any, *, n_segments: int = 120) -> tuple[np.ndarray, np.ndarray]:
    """(Br, Bz) of the loop at cylindrical points (r, z), azimuth 0.

    `r` and `z` are broadcast against each other. Each segment of the discretized loop contributes

    .. math::

       d\\mathbf{B} = \\frac{\\mu_0 I}{4\\pi}\\,\\frac{d\\mathbf{l}\\times\\mathbf{R}}{\\lVert\\mathbf{R}\\rVert^3}

    with :math:`d\\mathbf{l} = (-R\\sin\\phi, R\\cos\\phi, 0)\\,d\\phi` located at
    :math:`(R\\cos\\phi, R\\sin\\phi, 0)`. The y-component (B_phi) cancels by symmetry and is not
    accumulated. Segments closer than `coincidence_tol` to the field point are skipped.

    Callers evaluating near the axis should pass ``abs(r) + r_eps``.
    """
    r, z = np.broadcast_arrays(np.asarray(r, dtype=float), np.asarray(z, dtype=float))
    if loop.current == 0.0:
        return np.zeros(r.shape), np.zeros(r.shape)

    R = loop.radius
    c, s, dphi = segment_angles(n_segments)
    dlx = -R * s * dphi
    dly = R * c * dphi

    rx = r[..., None] - R * c  # (..., N)
    ry = -R * s  # (N,)
    rz = z[..., None]  # (..., 1)
    rmag = np.sqrt(rx * rx + ry * ry + rz * rz)
    keep = rmag >= coincidence_tol
    r3 = np.where(keep, rmag * rmag * rmag, 1.0)

    cross_x = dly * rz
    cross_z = dlx * ry - dly * rx

    coeff = mu0 * loop.current / (4.0 * pi)
    Br = coeff * np.sum(np.where(keep, cross_x / r3, 0.0), axis=-1)
    Bz = coeff * np.sum(np.where(keep, cross_z / r3, 0.0), axis=-1)
    return Br, Bz


def field_at(loop: Loop, r: float, z: float, *, n_segments: int = 120) -> tuple[float, float]:
    """Scalar version of :func:`field_at_points`."""
    Br, Bz = field_at_points(loop, r, z, n_segments=n_segments)
    return float(Br), float(Bz)


def grid_coordinates(
    loop: Loop,
    *,
    nr: int,
    nz: int,
    r_max: float | None = None,
    z_max: float | None = None,
) -> tuple[np.ndarray, np.ndarray]:
    """Symmetric (r, z) sample coordinates; defaults span the tracing domain."""
    nr = int(nr)
    nz = int(nz)
    if nr < 2 or nz < 2:
        raise ValueError(f"Need at least a 2x2 grid, got nr={nr} nz={nz}")
    R = loop.radius
    r_max = domain_r * R if r_max is None else float(r_max)
    z_max = domain_z * R if z_max is None else float(z_max)
    return np.linspace(-r_max, r_max, nr), np.linspace(-z_max, z_max, nz)


def field_magnitude_grid(
    loop: Loop,
    *,
    nr: int = 61,
    nz: int = 81,
    r_max: float | None = None,
    z_max: float | None = None,
    n_segments: int = 120,
) -> FieldGrid:
    """Sample the field on a coarse (r, z) grid covering both display half-planes.

    The lower half (r<0) is the mirror image of the upper half: it is evaluated at |r| and
    its radial component is sign-flipped.
    """
    r, z = grid_coordinates(loop, nr=nr, nz=nz, r_max=r_max, z_max=z_max)
    rr, zz = np.meshgrid(r, z, indexing="ij")
    Br, Bz = field_at_points(loop, np.abs(rr) + r_eps, zz, n_segments=n_segments)
    Br = np.where(rr < 0.0, -Br, Br)
    modB = np.sqrt(Br * Br + Bz * Bz)
    return FieldGrid(r=r, z=z, Br=Br, Bz=Bz, modB=modB)


def heatmap_intensity(modB: Any, b_center: float) -> np.ndarray:
    """Shading weight in [0, 1]: |B| relative to 30% of the center field, dropped below 0.01."""
    modB = np.asarray(modB, dtype=float)
    if b_center == 0.0:
        return np.zeros(modB.shape)
    t = np.minimum(1.0, modB / (abs(b_center) * 0.3))
    return np.where(t > 0.01, t, 0.0)
