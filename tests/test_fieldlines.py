from __future__ import annotations

import numpy as np
import pytest

from loopfield_jax.fieldlines import (
    MIN_PATH_POINTS,
    arrow_index,
    build_field_line_set,
    mirror_path,
    seed_radii,
    seed_z_offset,
    trace_both_directions,
    trace_line,
)
from loopfield_jax.loop import Loop

LOOP = Loop(radius=0.1, current=5.0)


def _assert_in_domain(path: np.ndarray, loop: Loop) -> None:
    assert np.all(np.abs(path[:, 0]) <= 6.0 * loop.radius)
    assert np.all(np.abs(path[:, 1]) <= 5.0 * loop.radius)


@pytest.mark.parametrize("seed_r,ds", [(0.02, 0.004), (0.05, -0.004), (0.2, 0.005), (0.33, -0.002)])
def test_trace_starts_at_seed_and_stays_bounded(seed_r, ds):
    path = trace_line(LOOP, seed_r, 0.001, 300, ds)
    assert path.ndim == 2 and path.shape[1] == 2
    assert 1 <= path.shape[0] <= 300
    assert np.array_equal(path[0], [seed_r, 0.001])
    _assert_in_domain(path, LOOP)
    steps = np.linalg.norm(np.diff(path, axis=0), axis=1)
    assert np.allclose(steps, abs(ds), rtol=1e-9)


def test_forward_trace_follows_field_through_center():
    # For I>0 the field at the loop center points along +z.
    path = trace_line(LOOP, 0.01, 0.001, 20, 0.004)
    assert np.all(np.diff(path[:, 1]) > 0.0)
    back = trace_line(LOOP, 0.01, -0.001, 20, -0.004)
    assert np.all(np.diff(back[:, 1]) < 0.0)


def test_trace_near_axis_leaves_through_domain_boundary():
    path = trace_line(LOOP, 1e-4, 0.001, 600, 0.004)
    assert path.shape[0] < 600
    nxt = path[-1]
    # The next Euler step would have crossed |z| = 5R.
    assert abs(nxt[1]) > 5.0 * LOOP.radius - 0.004


def test_trace_result_is_read_only():
    path = trace_line(LOOP, 0.05, 0.001, 10, 0.004)
    with pytest.raises(ValueError):
        path[0, 0] = 1.0


def test_trace_with_zero_current_stops_immediately():
    path = trace_line(Loop(radius=0.1, current=0.0), 0.05, 0.001, 600, 0.004)
    assert path.shape == (1, 2)


@pytest.mark.parametrize("ds", [0.0, 0.001, -0.0019, 0.0051, 0.1])
def test_step_size_outside_stable_range_is_rejected(ds):
    with pytest.raises(ValueError):
        trace_line(LOOP, 0.05, 0.001, 10, ds)


def test_invalid_trace_arguments():
    with pytest.raises(ValueError):
        trace_line(LOOP, 0.05, 0.001, 0, 0.004)
    with pytest.raises(ValueError):
        trace_line(LOOP, 0.7, 0.0, 10, 0.004)
    with pytest.raises(ValueError):
        trace_line(LOOP, 0.05, 0.001, 10, 0.004, method="midpoint")


def test_rk4_and_euler_agree_over_short_arcs():
    e = trace_line(LOOP, 0.05, 0.001, 20, 0.002)
    k = trace_line(LOOP, 0.05, 0.001, 20, 0.002, method="rk4")
    assert e.shape == k.shape
    assert np.array_equal(e[0], k[0])
    assert np.max(np.abs(e - k)) < 0.05 * LOOP.radius


def test_bidirectional_line_is_reversed_backward_then_forward():
    ds = 0.04 * LOOP.radius
    line = trace_both_directions(LOOP, 0.05, max_steps=50, ds=ds)
    z0 = seed_z_offset(LOOP)
    fwd = trace_line(LOOP, 0.05, z0, 50, ds)
    bwd = trace_line(LOOP, 0.05, -z0, 50, -ds)
    assert line.shape[0] == fwd.shape[0] + bwd.shape[0]
    assert np.array_equal(line[: bwd.shape[0]], bwd[::-1])
    assert np.array_equal(line[bwd.shape[0]:], fwd)
    # The two halves meet at the seed.
    assert np.allclose(line[bwd.shape[0] - 1], [0.05, -z0])
    assert np.allclose(line[bwd.shape[0]], [0.05, z0])


def test_seed_radii_interior_and_exterior():
    seeds = seed_radii(LOOP, 3)
    R = LOOP.radius
    expected_int = [0.9 * R * f for f in (0.25, 0.5, 0.75)]
    expected_ext = [R * (1.3 + 2.5 * f) for f in (0.25, 0.5, 0.75)]
    assert np.allclose(seeds, expected_int + expected_ext)
    assert seed_radii(LOOP, 10).size == 16
    assert seed_radii(LOOP, 0).size == 0
    with pytest.raises(ValueError):
        seed_radii(LOOP, -1)


def test_seed_offset_is_capped_for_small_loops():
    assert seed_z_offset(LOOP) == pytest.approx(1e-3)
    assert seed_z_offset(Loop(radius=1.0, current=1.0)) == pytest.approx(1e-3)
    assert seed_z_offset(Loop(radius=0.01, current=1.0)) == pytest.approx(1e-4)


def test_empty_sets():
    assert len(build_field_line_set(LOOP, 0)) == 0
    zero = build_field_line_set(Loop(radius=0.1, current=0.0), 12)
    assert len(zero) == 0
    assert zero.key.line_count == 12


def test_field_line_set_is_pure_and_bounded():
    a = build_field_line_set(LOOP, 2, max_steps=150)
    b = build_field_line_set(LOOP, 2, max_steps=150)
    assert a.key == b.key
    assert 0 < len(a) <= 4
    assert len(a) == len(b)
    for pa, pb in zip(a, b):
        assert np.array_equal(pa, pb)
        assert pa.shape[0] >= MIN_PATH_POINTS
        assert pa.shape[0] <= 2 * 150
        _assert_in_domain(pa, LOOP)


def test_exterior_lines_wrap_around_the_wire():
    # An exterior seed's line passes through the loop interior (|r| < R) on its way around the wire.
    lines = build_field_line_set(LOOP, 1, max_steps=600)
    ext = lines.paths[-1]
    assert np.min(np.abs(ext[:, 0])) < LOOP.radius


def test_mirror_and_arrow_helpers():
    p = np.array([[0.1, 0.0], [0.2, 0.1], [0.3, 0.3], [0.1, 0.5]])
    m = mirror_path(p)
    assert np.array_equal(m[:, 0], -p[:, 0])
    assert np.array_equal(m[:, 1], p[:, 1])
    assert p[0, 0] == 0.1
    assert arrow_index(p) == 1
    assert arrow_index(np.zeros((2, 2))) == 0
    assert arrow_index(np.zeros((1, 2))) is None
    assert arrow_index(np.zeros((100, 2))) == 35


def test_zero_current_builds_without_tracing(monkeypatch):
    import loopfield_jax.fieldlines as fieldlines

    def fail(*args, **kwargs):
        raise AssertionError("traced a zero-current loop")

    monkeypatch.setattr(fieldlines, "trace_both_directions", fail)
    lines = fieldlines.build_field_line_set(Loop(radius=0.1, current=0.0), 12)
    assert len(lines) == 0
    assert lines.key.current == 0.0
