from __future__ import annotations

import numpy as np


def test_biot_savart_jax_matches_numpy():
    import jax
    import jax.numpy as jnp

    jax.config.update("jax_enable_x64", True)

    from loopfield_jax.biot_savart import field_at_points
    from loopfield_jax.biot_savart_jax import bfield_rz, segments_from_loop
    from loopfield_jax.loop import Loop

    loop = Loop(radius=0.1, current=5.0)
    pts = np.array(
        [
            [1e-8, 0.0],
            [0.05, 0.02],
            [0.1, 0.0],
            [0.12, -0.03],
            [0.4, 0.25],
        ],
        dtype=float,
    )
    Br, Bz = field_at_points(loop, pts[:, 0], pts[:, 1])
    segs = segments_from_loop(loop)
    B = np.asarray(bfield_rz(segs, points=jnp.asarray(pts), current=loop.current))
    assert B.shape == (5, 2)
    assert np.allclose(B[:, 0], Br, rtol=1e-10, atol=1e-18)
    assert np.allclose(B[:, 1], Bz, rtol=1e-10, atol=1e-18)

    single = np.asarray(bfield_rz(segs, points=pts[1], current=loop.current))
    assert single.shape == (2,)
    assert np.allclose(single, B[1], rtol=1e-14, atol=0.0)


def test_biot_savart_jax_is_differentiable_wrt_current():
    import jax
    import jax.numpy as jnp

    jax.config.update("jax_enable_x64", True)

    from loopfield_jax.biot_savart_jax import bfield_rz, segments_from_loop
    from loopfield_jax.loop import Loop

    loop = Loop(radius=0.1, current=5.0)
    segs = segments_from_loop(loop, n_segments=64)
    pts = jnp.asarray([[0.03, 0.01], [0.2, -0.05]], dtype=jnp.float64)

    def bz_sum(I):
        return jnp.sum(bfield_rz(segs, points=pts, current=I)[:, 1])

    g = float(jax.grad(bz_sum)(jnp.asarray(loop.current, dtype=jnp.float64)))
    assert np.isfinite(g)
    assert np.isclose(g, float(bz_sum(loop.current)) / loop.current, rtol=1e-12)


def test_field_grid_jax_matches_numpy():
    import jax

    jax.config.update("jax_enable_x64", True)

    from loopfield_jax.biot_savart import field_magnitude_grid
    from loopfield_jax.biot_savart_jax import field_magnitude_grid_jax
    from loopfield_jax.loop import Loop

    loop = Loop(radius=0.05, current=-2.0)
    g_np = field_magnitude_grid(loop, nr=11, nz=13)
    g_jx = field_magnitude_grid_jax(loop, nr=11, nz=13)
    assert np.array_equal(g_np.r, g_jx.r)
    assert np.array_equal(g_np.z, g_jx.z)
    for name in ("Br", "Bz", "modB"):
        a = getattr(g_np, name)
        b = getattr(g_jx, name)
        assert np.allclose(a, b, rtol=1e-10, atol=1e-12 * np.max(np.abs(a)))
