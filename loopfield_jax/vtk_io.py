from __future__ import annotations

from pathlib import Path
from typing import Any, TextIO

import numpy as np

from .biot_savart import FieldGrid
from .fieldlines import FieldLineSet, mirror_path


def _fmt_f(arr: np.ndarray) -> str:
    return " ".join(f"{x:.16e}" for x in np.asarray(arr, dtype=float).reshape(-1))


def _fmt_i(arr: np.ndarray) -> str:
    return " ".join(str(int(x)) for x in np.asarray(arr).reshape(-1))


def _write_point_data(f: TextIO, point_data: dict[str, Any] | None, *, n_points: int) -> None:
    if not point_data:
        f.write("      <PointData/>\n")
        return
    f.write("      <PointData>\n")
    for name, arr_any in point_data.items():
        arr = np.asarray(arr_any, dtype=float)
        if arr.shape[0] != n_points:
            raise ValueError(f"{name}: expected {n_points} points, got shape={arr.shape}")
        if arr.ndim not in (1, 2):
            raise ValueError(f"{name}: expected 1D or 2D point array, got shape={arr.shape}")
        ncomp = 1 if arr.ndim == 1 else int(arr.shape[1])
        f.write(f'        <DataArray type="Float64" Name="{name}" NumberOfComponents="{ncomp}" format="ascii">\n')
        f.write(f"          {_fmt_f(arr)}\n")
        f.write("        </DataArray>\n")
    f.write("      </PointData>\n")


def rz_to_xyz(rz: Any) -> np.ndarray:
    """Embed (r, z) points in the x–z plane (x = r, y = 0) for 3D viewers."""
    rz = np.asarray(rz, dtype=float)
    if rz.ndim != 2 or rz.shape[1] != 2:
        raise ValueError(f"Expected (N,2) points, got shape={rz.shape}")
    return np.stack([rz[:, 0], np.zeros(rz.shape[0]), rz[:, 1]], axis=1)


def write_polylines_vtp(path: str | Path, *, polylines: list[np.ndarray], point_data: dict[str, Any] | None = None) -> None:
    """Write (N_i,3) polylines as a VTK XML PolyData (`.vtp`) file with ASCII arrays."""
    path = Path(path)
    pts = np.concatenate(polylines, axis=0) if polylines else np.zeros((0, 3))
    if pts.ndim != 2 or pts.shape[1] != 3:
        raise ValueError(f"polylines must be (N,3) arrays, got combined shape={pts.shape}")
    sizes = np.array([len(p) for p in polylines], dtype=np.int64)
    connectivity = np.arange(pts.shape[0], dtype=np.int64)
    offsets = np.cumsum(sizes)

    with path.open("w", encoding="utf-8") as f:
        f.write('<?xml version="1.0"?>\n')
        f.write('<VTKFile type="PolyData" version="0.1" byte_order="LittleEndian">\n')
        f.write("  <PolyData>\n")
        f.write(
            f'    <Piece NumberOfPoints="{pts.shape[0]}" NumberOfVerts="0" NumberOfLines="{sizes.size}" '
            'NumberOfStrips="0" NumberOfPolys="0">\n'
        )
        _write_point_data(f, point_data, n_points=int(pts.shape[0]))
        f.write("      <CellData/>\n")
        f.write("      <Points>\n")
        f.write('        <DataArray type="Float64" NumberOfComponents="3" format="ascii">\n')
        f.write(f"          {_fmt_f(pts)}\n")
        f.write("        </DataArray>\n")
        f.write("      </Points>\n")
        f.write("      <Lines>\n")
        f.write('        <DataArray type="Int64" Name="connectivity" format="ascii">\n')
        f.write(f"          {_fmt_i(connectivity)}\n")
        f.write("        </DataArray>\n")
        f.write('        <DataArray type="Int64" Name="offsets" format="ascii">\n')
        f.write(f"          {_fmt_i(offsets)}\n")
        f.write("        </DataArray>\n")
        f.write("      </Lines>\n")
        f.write("      <Polys/>\n")
        f.write("    </Piece>\n")
        f.write("  </PolyData>\n")
        f.write("</VTKFile>\n")


def write_fieldlines_vtp(path: str | Path, lines: FieldLineSet, *, mirror: bool = True) -> None:
    """Write a field-line set as polylines in the x–z plane; `mirror` adds the r<0 copies."""
    rz_paths = list(lines.paths)
    if mirror:
        rz_paths = rz_paths + [mirror_path(p) for p in lines.paths]
    line_id = np.concatenate([np.full(len(p), i, dtype=float) for i, p in enumerate(rz_paths)]) if rz_paths else np.zeros(0)
    write_polylines_vtp(path, polylines=[rz_to_xyz(p) for p in rz_paths], point_data={"line_id": line_id})


def write_field_grid_vts(path: str | Path, grid: FieldGrid) -> None:
    """Write an (r, z) field grid as a VTK XML StructuredGrid (`.vts`) in the x–z plane.

    VTK orders points with x fastest: x = r index, y = z index.
    """
    path = Path(path)
    nr = int(grid.r.size)
    nz = int(grid.z.size)
    rr, zz = np.meshgrid(grid.r, grid.z, indexing="xy")  # (nz, nr), r fastest
    pts = np.stack([rr.reshape(-1), np.zeros(rr.size), zz.reshape(-1)], axis=1)

    def _flat(a: np.ndarray) -> np.ndarray:
        return np.asarray(a, dtype=float).T.reshape(-1)

    B = np.stack([_flat(grid.Br), np.zeros(pts.shape[0]), _flat(grid.Bz)], axis=1)

    with path.open("w", encoding="utf-8") as f:
        f.write('<?xml version="1.0"?>\n')
        f.write('<VTKFile type="StructuredGrid" version="0.1" byte_order="LittleEndian">\n')
        f.write(f'  <StructuredGrid WholeExtent="0 {nr - 1} 0 {nz - 1} 0 0">\n')
        f.write(f'    <Piece Extent="0 {nr - 1} 0 {nz - 1} 0 0">\n')
        _write_point_data(f, {"modB": _flat(grid.modB), "B": B}, n_points=int(pts.shape[0]))
        f.write("      <CellData/>\n")
        f.write("      <Points>\n")
        f.write('        <DataArray type="Float64" NumberOfComponents="3" format="ascii">\n')
        f.write(f"          {_fmt_f(pts)}\n")
        f.write("        </DataArray>\n")
        f.write("      </Points>\n")
        f.write("    </Piece>\n")
        f.write("  </StructuredGrid>\n")
        f.write("</VTKFile>\n")
