from __future__ import annotations

import pytest

from loopfield_jax.config import RunConfig, config_from_inputs
from loopfield_jax.utils import parse_namelist, parse_value, split_assignments, strip_comment


def _write(tmp_path, text: str, name: str = "loopfield_in.test"):
    p = tmp_path / name
    p.write_text(text, encoding="utf-8")
    return str(p)


def test_parse_namelist_values(tmp_path):
    path = _write(
        tmp_path,
        """! leading comment
&loopfield_nml
  current = 2.5d0   ! amps
  LOOP_RADIUS_CM = 7.5, num_field_lines = 4
  integrator = 'RK4'
  write_vtk = .true.
  use_jax = F
  tags = (/ 1, 2,
            3 /)
/
&other_nml
  current = 99.0
/
""",
    )
    nml = parse_namelist(path)
    assert nml == {
        "current": 2.5,
        "loop_radius_cm": 7.5,
        "num_field_lines": 4,
        "integrator": "RK4",
        "write_vtk": True,
        "use_jax": False,
        "tags": [1, 2, 3],
    }


def test_parse_namelist_missing_block(tmp_path):
    path = _write(tmp_path, "&other_nml\n  x = 1\n/\n")
    with pytest.raises(ValueError, match="loopfield_nml"):
        parse_namelist(path)


def test_value_and_comment_helpers():
    assert parse_value("1.0d-3") == pytest.approx(1e-3)
    assert parse_value("-7") == -7
    assert parse_value(".false.,") is False
    assert parse_value('"a!b"') == "a!b"
    assert strip_comment("name = 'x!y' ! note") == "name = 'x!y' "
    assert split_assignments("a = 1, b = 2\nc = 3") == ["a = 1", "b = 2", "c = 3"]
    with pytest.raises(ValueError):
        parse_value("nonsense")


def test_config_defaults_and_conversion():
    cfg = config_from_inputs({})
    assert cfg == RunConfig()
    assert cfg.loop.radius == pytest.approx(0.1)
    assert cfg.loop.current == 5.0
    assert cfg.sample_grid

    cfg = config_from_inputs({"current": 3, "num_field_lines": 2.0, "integrator": "RK4", "show_strength": 0.2})
    assert isinstance(cfg.current, float) and cfg.current == 3.0
    assert cfg.num_field_lines == 2
    assert cfg.integrator == "rk4"
    assert not cfg.sample_grid


@pytest.mark.parametrize(
    "inputs",
    [
        {"bogus": 1},
        {"num_field_lines": 2.5},
        {"num_field_lines": -1},
        {"write_vtk": 1},
        {"integrator": "leapfrog"},
        {"use_jax": True, "integrator": "rk4"},
        {"ds_fraction": 0.1},
        {"max_steps": 0},
        {"loop_radius_cm": 0.0},
        {"current": float("nan")},
        {"num_field_lines": float("inf")},
        {"max_steps": float("-inf")},
        {"ds_fraction": float("inf")},
    ],
)
def test_config_rejects_invalid_inputs(inputs):
    with pytest.raises(ValueError):
        config_from_inputs(inputs)


def test_overflowing_namelist_integer_is_a_value_error(tmp_path):
    path = _write(tmp_path, "&loopfield_nml\n  num_field_lines = 1d400\n/\n")
    nml = parse_namelist(path)
    with pytest.raises(ValueError, match="num_field_lines"):
        config_from_inputs(nml)
