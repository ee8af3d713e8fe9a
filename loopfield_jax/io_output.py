from __future__ import annotations

from dataclasses import dataclass

import numpy as np

from .biot_savart import FieldGrid
from .fieldlines import FieldLineSet
from .loop import Loop, center_field

try:
    import netCDF4
except ImportError:
    netCDF4 = None


@dataclass(frozen=True)
class LoopfieldOutput:
    """Contents of a `loopfield_out.*.nc` file."""

    current: float
    loop_radius: float
    b_center: float
    n_segments: int
    line_count: int
    paths: list[np.ndarray]
    grid: FieldGrid | None


def _require_netcdf() -> None:
    if netCDF4 is None:
        raise ImportError("netCDF4 is required to read/write loopfield output .nc files (pip install netCDF4).")


def write_output_nc(
    path: str,
    loop: Loop,
    lines: FieldLineSet,
    *,
    n_segments: int,
    grid: FieldGrid | None = None,
) -> None:
    """Write the loop parameters, the traced (r, z) field lines and the optional |B| grid.

    Field lines of different lengths share a (n_lines, max_points) array padded with NaN;
    `line_npoints` holds each line's length.
    """
    _require_netcdf()
    npts = np.array([p.shape[0] for p in lines.paths], dtype=np.int32)
    max_points = int(npts.max()) if npts.size else 1

    ds = netCDF4.Dataset(path, "w")
    try:
        ds.title = "loopfield_jax output"
        ds.createDimension("n_lines", None)
        ds.createDimension("max_points", max_points)

        def _write_scalar(name: str, value, *, dtype="f8", units: str | None = None):
            v = ds.createVariable(name, dtype)
            v[...] = value
            if units:
                v.units = units

        _write_scalar("current", loop.current, units="A")
        _write_scalar("loop_radius", loop.radius, units="m")
        _write_scalar("b_center", center_field(loop), units="T")
        _write_scalar("n_segments", int(n_segments), dtype="i4")
        _write_scalar("line_count", int(lines.key.line_count), dtype="i4")

        v_n = ds.createVariable("line_npoints", "i4", ("n_lines",))
        v_r = ds.createVariable("line_r", "f8", ("n_lines", "max_points"))
        v_z = ds.createVariable("line_z", "f8", ("n_lines", "max_points"))
        v_r.units = "m"
        v_z.units = "m"
        if npts.size:
            r = np.full((npts.size, max_points), np.nan)
            z = np.full((npts.size, max_points), np.nan)
            for i, p in enumerate(lines.paths):
                r[i, : p.shape[0]] = p[:, 0]
                z[i, : p.shape[0]] = p[:, 1]
            n = int(npts.size)
            v_n[0:n] = npts
            v_r[0:n, :] = r
            v_z[0:n, :] = z

        if grid is not None:
            ds.createDimension("grid_nr", int(grid.r.size))
            ds.createDimension("grid_nz", int(grid.z.size))
            ds.createVariable("grid_r", "f8", ("grid_nr",))[:] = grid.r
            ds.createVariable("grid_z", "f8", ("grid_nz",))[:] = grid.z
            for name, arr in (("grid_Br", grid.Br), ("grid_Bz", grid.Bz), ("grid_modB", grid.modB)):
                v = ds.createVariable(name, "f8", ("grid_nr", "grid_nz"))
                v[:, :] = arr
                v.units = "T"
    finally:
        ds.close()


def read_output_nc(path: str) -> LoopfieldOutput:
    _require_netcdf()
    ds = netCDF4.Dataset(path, "r")
    try:
        ds.set_auto_mask(False)

        def _read(name: str) -> np.ndarray:
            if name not in ds.variables:
                raise KeyError(f"Missing variable {name!r} in {path}")
            return np.asarray(ds.variables[name][...])

        npts = _read("line_npoints").astype(int)
        r = _read("line_r")
        z = _read("line_z")
        paths = [np.stack([r[i, :n], z[i, :n]], axis=1) for i, n in enumerate(npts)]

        grid = None
        if "grid_modB" in ds.variables:
            grid = FieldGrid(
                r=_read("grid_r"),
                z=_read("grid_z"),
                Br=_read("grid_Br"),
                Bz=_read("grid_Bz"),
                modB=_read("grid_modB"),
            )
        return LoopfieldOutput(
            current=float(_read("current")),
            loop_radius=float(_read("loop_radius")),
            b_center=float(_read("b_center")),
            n_segments=int(_read("n_segments")),
            line_count=int(_read("line_count")),
            paths=paths,
            grid=grid,
        )
    finally:
        ds.close()
