from __future__ import annotations

import numpy as np
import pytest

from loopfield_jax.biot_savart import field_at
from loopfield_jax.constants import r_eps
from loopfield_jax.fieldlines import FieldLineSetKey
from loopfield_jax.loop import Loop
from loopfield_jax.solver import FieldSolver


def test_field_line_set_is_cached_per_key():
    solver = FieldSolver(max_steps=60)
    loop = Loop(radius=0.1, current=5.0)
    a = solver.update(loop, 2)
    b = solver.update(Loop(radius=0.1, current=5.0), 2)
    assert a is b
    assert solver.n_builds == 1
    assert solver.key == FieldLineSetKey(current=5.0, radius=0.1, line_count=2)

    c = solver.update(Loop(radius=0.1, current=6.0), 2)
    assert c is not a
    assert solver.n_builds == 2
    d = solver.update(Loop(radius=0.1, current=6.0), 3)
    assert d.key.line_count == 3
    assert solver.n_builds == 3
    assert solver.field_lines is d


def test_reset_forces_rebuild():
    solver = FieldSolver(max_steps=40)
    loop = Loop(radius=0.1, current=5.0)
    solver.update(loop, 1)
    solver.reset()
    assert solver.field_lines is None
    solver.update(loop, 1)
    assert solver.n_builds == 2


def test_update_from_presentation_params():
    solver = FieldSolver(max_steps=40)
    lines = solver.update_from_params({"current": 0.0, "loopRadius": 20.0, "numFieldLines": 4, "showStrength": 0.2})
    assert len(lines) == 0
    assert solver.loop == Loop(radius=0.2, current=0.0)
    assert solver.show_strength is False
    assert solver.center_field() == 0.0


def test_display_field_is_mirrored_in_lower_half_plane():
    solver = FieldSolver()
    loop = Loop(radius=0.1, current=5.0)
    solver.update(loop, 0)
    Br, Bz = solver.field_at(0.07, 0.03)
    Br_m, Bz_m = solver.field_at(-0.07, 0.03)
    assert Br == -Br_m
    assert Bz == Bz_m
    assert (Br, Bz) == field_at(loop, 0.07 + r_eps, 0.03)
    assert np.isclose(solver.axial_field(0.0), solver.center_field())


def test_solver_requires_a_loop():
    with pytest.raises(ValueError):
        FieldSolver().field_at(0.0, 0.0)


def test_failed_build_keeps_previous_state():
    solver = FieldSolver(max_steps=40)
    first = solver.update(Loop(radius=0.1, current=5.0), 1)
    with pytest.raises(ValueError):
        solver.update(Loop(radius=0.2, current=7.0), -1)
    assert solver.loop == Loop(radius=0.1, current=5.0)
    assert solver.field_lines is first
    assert solver.field_lines.key == solver.key
    assert solver.n_builds == 1
    assert solver.center_field() == pytest.approx(4e-7 * 3.141592653589793 * 5.0 / 0.2)


def test_unknown_integrator_is_rejected_up_front():
    with pytest.raises(ValueError, match="integrator"):
        FieldSolver(method="midpoint")
