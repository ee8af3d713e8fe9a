from __future__ import annotations

from pathlib import Path

import numpy as np

from .biot_savart import FieldGrid, field_at_points, heatmap_intensity
from .constants import domain_z, r_eps
from .fieldlines import FieldLineSet, arrow_index, mirror_path
from .loop import Loop, axial_field, center_field, format_field_strength


def setup_matplotlib():
    try:
        import matplotlib
    except ImportError as e:
        raise ImportError("matplotlib is required for figures. Install with: pip install '.[viz]'") from e

    matplotlib.use("Agg", force=True)
    import matplotlib.pyplot as plt

    plt.rcParams.update(
        {
            "figure.dpi": 160,
            "savefig.dpi": 160,
            "font.size": 11,
            "axes.spines.top": False,
            "axes.spines.right": False,
        }
    )
    return plt


def plot_field_lines(loop: Loop, lines: FieldLineSet, *, grid: FieldGrid | None = None, ax=None):
    """Cross-section view: z horizontal, r vertical, both half-planes.

    Field lines are drawn with their mirror image, a direction arrow 35% along each line, the wire
    cross-sections at r = ±R, and (optionally) the |B| shading normalized to 30% of the center field.
    """
    plt = setup_matplotlib()
    if ax is None:
        fig, ax = plt.subplots(figsize=(7.0, 5.5))
    else:
        fig = ax.figure

    R = loop.radius
    b0 = center_field(loop)
    if grid is not None:
        w = heatmap_intensity(grid.modB, b0)
        ax.pcolormesh(grid.z, grid.r, w, cmap="inferno", vmin=0.0, vmax=1.0, shading="auto", alpha=0.6)

    for path in lines.paths:
        for p in (path, mirror_path(path)):
            ax.plot(p[:, 1], p[:, 0], color="tab:blue", lw=1.0, alpha=0.8)
            i = arrow_index(p)
            if i is not None:
                ax.annotate(
                    "",
                    xy=(p[i + 1, 1], p[i + 1, 0]),
                    xytext=(p[i, 1], p[i, 0]),
                    arrowprops=dict(arrowstyle="->", color="tab:blue", lw=1.2),
                )

    ax.plot([0.0], [R], "o", color="goldenrod", ms=9)
    ax.plot([0.0], [-R], "X", color="goldenrod", ms=9)
    ax.set_xlabel("z [m] (loop axis)")
    ax.set_ylabel("r [m]")
    ax.set_aspect("equal")
    ax.set_title(f"I = {loop.current:.1f} A, R = {R * 100.0:.1f} cm, B(center) = {format_field_strength(b0)}")
    return fig, ax


def save_field_line_figure(path: str | Path, loop: Loop, lines: FieldLineSet, *, grid: FieldGrid | None = None) -> Path:
    plt = setup_matplotlib()
    fig, _ax = plot_field_lines(loop, lines, grid=grid)
    path = Path(path)
    fig.tight_layout()
    fig.savefig(path)
    plt.close(fig)
    return path


def plot_axial_profile(loop: Loop, *, n_segments: int = 120, npts: int = 201, ax=None):
    """Closed-form on-axis field against the numerical Biot–Savart value."""
    plt = setup_matplotlib()
    if ax is None:
        fig, ax = plt.subplots(figsize=(6.5, 4.5))
    else:
        fig = ax.figure
    x = np.linspace(-domain_z * loop.radius, domain_z * loop.radius, int(npts))
    _Br, Bz = field_at_points(loop, r_eps, x, n_segments=n_segments)
    ax.plot(x, axial_field(loop, x), label="closed form", lw=2.0)
    ax.plot(x, Bz, "--", label=f"Biot–Savart (N={n_segments})")
    ax.set_xlabel("z [m]")
    ax.set_ylabel("B_z on axis [T]")
    ax.legend()
    return fig, ax
