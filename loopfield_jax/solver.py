from __future__ import annotations

from typing import Any

from .biot_savart import field_at
from .constants import r_eps
from .fieldlines import FieldLineSet, FieldLineSetKey, build_field_line_set
from .loop import Loop, axial_field, center_field, loop_from_params


class FieldSolver:
    """Owns the current loop and its cached field-line set.

    The set is rebuilt only when the (current, radius, line_count) key changes; on every other
    call the cached set is returned unchanged. A build runs to completion before it replaces the
    cache, so a superseded or failed build never leaves a partial set behind.
    """

    def __init__(self, *, n_segments: int = 120, max_steps: int = 600, ds_fraction: float = 0.04, method: str = "euler"):
        self.n_segments = int(n_segments)
        self.max_steps = int(max_steps)
        self.ds_fraction = float(ds_fraction)
        if method not in ("euler", "rk4"):
            raise ValueError(f"Unknown integrator {method!r} (expected 'euler' or 'rk4')")
        self.method = str(method)
        self.loop: Loop | None = None
        self.line_count = 0
        self.show_strength = True
        self._cache: FieldLineSet | None = None
        self.n_builds = 0

    @property
    def key(self) -> FieldLineSetKey | None:
        if self.loop is None:
            return None
        return FieldLineSetKey.for_loop(self.loop, self.line_count)

    @property
    def field_lines(self) -> FieldLineSet | None:
        return self._cache

    def update(self, loop: Loop, line_count: int) -> FieldLineSet:
        line_count = int(line_count)
        key = FieldLineSetKey.for_loop(loop, line_count)
        if self._cache is not None and self._cache.key == key:
            self.loop = loop
            self.line_count = line_count
            return self._cache
        # Solver state changes only once the new set is complete.
        built = build_field_line_set(
            loop,
            line_count,
            max_steps=self.max_steps,
            ds_fraction=self.ds_fraction,
            method=self.method,
            n_segments=self.n_segments,
        )
        self.n_builds += 1
        self.loop = loop
        self.line_count = line_count
        self._cache = built
        return built

    def update_from_params(self, params: dict[str, Any]) -> FieldLineSet:
        """Presentation-layer entrypoint: decode raw parameters (radius in cm) and update."""
        loop, line_count, show_strength = loop_from_params(params)
        lines = self.update(loop, line_count)
        self.show_strength = show_strength
        return lines

    def reset(self) -> None:
        self._cache = None

    def _require_loop(self) -> Loop:
        if self.loop is None:
            raise ValueError("FieldSolver has no loop yet; call update() first")
        return self.loop

    def field_at(self, r: float, z: float) -> tuple[float, float]:
        """Field at a display point; the lower half-plane (r<0) is the mirror of the upper."""
        loop = self._require_loop()
        Br, Bz = field_at(loop, abs(r) + r_eps, z, n_segments=self.n_segments)
        return (-Br if r < 0.0 else Br), Bz

    def axial_field(self, x: float) -> float:
        return axial_field(self._require_loop(), x)

    def center_field(self) -> float:
        return center_field(self._require_loop())
