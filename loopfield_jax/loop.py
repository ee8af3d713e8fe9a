from __future__ import annotations

from dataclasses import dataclass
from typing import Any

import numpy as np

from .constants import mu0


@dataclass(frozen=True)
class Loop:
    """Circular current loop of radius `radius` [m] carrying `current` [A].

    The loop is centered at the origin in the z=0 plane with its axis along z.
    """

    radius: float
    current: float

    def __post_init__(self):
        if not np.isfinite(self.radius) or not np.isfinite(self.current):
            raise ValueError(f"loop radius/current must be finite, got R={self.radius} I={self.current}")
        if self.radius <= 0.0:
            raise ValueError(f"loop radius must be positive, got {self.radius}")
        object.__setattr__(self, "radius", float(self.radius))
        object.__setattr__(self, "current", float(self.current))


def axial_field(loop: Loop, x: Any) -> Any:
    """Closed-form field on the loop axis at distance `x` from the loop plane:

    .. math::

       B_z(x) = \\frac{\\mu_0 I R^2}{2 (R^2 + x^2)^{3/2}}

    Accepts a scalar or an array for `x`.
    """
    R = loop.radius
    x = np.asarray(x, dtype=float)
    b = mu0 * loop.current * R * R / (2.0 * np.power(R * R + x * x, 1.5))
    return float(b) if b.ndim == 0 else b


def center_field(loop: Loop) -> float:
    """mu0 I / (2R), the field at the loop center."""
    return mu0 * loop.current / (2.0 * loop.radius)


def loop_from_params(params: dict[str, Any]) -> tuple[Loop, int, bool]:
    """Decode presentation-layer parameters into (loop, line_count, show_strength).

    Expected keys (all optional): `current` [A], `loopRadius` [cm],
    `numFieldLines`, `showStrength` (>= 0.5 enables field shading).
    """
    current = float(params.get("current", 5.0))
    radius_cm = float(params.get("loopRadius", 10.0))
    line_count = int(params.get("numFieldLines", 12))
    show_strength = float(params.get("showStrength", 1.0)) >= 0.5
    return Loop(radius=radius_cm / 100.0, current=current), line_count, show_strength


def format_field_strength(b: float, digits: int = 2) -> str:
    # mT above 1 mT, uT otherwise.
    if abs(b) >= 1e-3:
        return f"{b * 1e3:.{digits}f} mT"
    return f"{b * 1e6:.{digits}f} uT"


def describe_state(loop: Loop) -> str:
    b = format_field_strength(center_field(loop), digits=3)
    return (
        f"Circular wire loop (cross-section view) carrying {loop.current:.1f} A with radius "
        f"{loop.radius * 100.0:.1f} cm. Magnetic field at center: {b}. Field lines form closed loops "
        "through the center of the coil and curve around outside, strongest at the center. "
        "Using Biot-Savart law: B = mu0*I*R^2/(2*(R^2+x^2)^(3/2))."
    )
