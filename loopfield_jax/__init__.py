"""Magnetic field and field lines of a circular current loop (Biot–Savart, NumPy/JAX)."""

from .biot_savart import FieldGrid, field_at, field_at_points, field_magnitude_grid
from .fieldlines import FieldLineSet, FieldLineSetKey, build_field_line_set, trace_both_directions, trace_line
from .loop import Loop, axial_field, center_field, loop_from_params
from .solver import FieldSolver

__all__ = [
    "FieldGrid",
    "FieldLineSet",
    "FieldLineSetKey",
    "FieldSolver",
    "Loop",
    "axial_field",
    "build_field_line_set",
    "center_field",
    "field_at",
    "field_at_points",
    "field_magnitude_grid",
    "loop_from_params",
    "trace_both_directions",
    "trace_line",
]
