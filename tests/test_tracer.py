import math

import pytest
from spacetime_core.errors import SingularInputError
from spacetime_core.integrators import energy
from spacetime_core.models import Disk
from spacetime_core.orbits import OrbitingBody
from spacetime_core.tracer import TraceOutcome, trace_ray

FAST = dict(d_lambda=0.1, escape_radius=1000.0)


def test_radially_outward_escapes():
    res = trace_ray((10.0, 0.0, 0.0), (1.0, 0.0, 0.0), 1.0, max_steps=5000,
                    d_lambda=1.0, escape_radius=1000.0)
    assert res.outcome is TraceOutcome.ESCAPED
    assert 980 < res.steps < 1000
    assert res.ray.r > 1000.0


def test_radially_inward_hits_black_hole():
    res = trace_ray((10.0, 0.0, 0.0), (-1.0, 0.0, 0.0), 1.0, max_steps=1000, **FAST)
    assert res.outcome is TraceOutcome.HIT_BLACK_HOLE
    assert res.steps <= 91
    assert res.ray.L == 0.0


def test_polar_infall_stays_finite():
    res = trace_ray((0.0, 0.0, 10.0), (0.0, 0.0, -1.0), 1.0, max_steps=1000, **FAST)
    assert res.outcome is TraceOutcome.HIT_BLACK_HOLE


def test_escape_radius_checked_before_first_step():
    res = trace_ray((2e30, 0.0, 0.0), (-1.0, 0.0, 0.0), 1.0, max_steps=10)
    assert res.outcome is TraceOutcome.ESCAPED
    assert res.steps == 0


def test_origin_inside_horizon():
    res = trace_ray((0.5, 0.0, 0.0), (1.0, 0.0, 0.0), 1.0, max_steps=10)
    assert res.outcome is TraceOutcome.HIT_BLACK_HOLE
    assert res.steps == 0
    assert res.ray is None


def test_step_budget():
    res = trace_ray((10.0, 0.0, 0.0), (0.0, 1.0, 0.0), 1.0, max_steps=5, **FAST)
    assert res.outcome is TraceOutcome.MAX_STEPS
    assert res.steps == 5


def test_reference_defaults_exhaust_budget():
    # dlambda = 1e7 against a unit horizon never escapes to 1e30 in a few steps
    res = trace_ray((10.0, 0.0, 0.0), (1.0, 0.0, 0.0), 1.0, max_steps=3)
    assert res.outcome is TraceOutcome.MAX_STEPS


def test_singular_origin_raises():
    with pytest.raises(SingularInputError):
        trace_ray((0.0, 0.0, 0.0), (1.0, 0.0, 0.0), 1.0, max_steps=10)


def test_hits_disk():
    disk = Disk(inner_radius=3.0, outer_radius=10.0, thickness=0.1)
    res = trace_ray((0.0, -5.0, 5.0), (0.0, 0.0, -1.0), 1.0, max_steps=1000,
                    d_lambda=0.05, escape_radius=1000.0, disk=disk)
    assert res.outcome is TraceOutcome.HIT_DISK
    x, y, z = res.position
    assert abs(z) <= 0.05
    assert 3.0 <= math.hypot(x, y) <= 5.0
    assert 0.0 < res.redshift < 1.0


def test_ray_through_disk_hole_is_not_a_hit():
    disk = Disk(inner_radius=30.0, outer_radius=40.0, thickness=0.1)
    res = trace_ray((0.0, -5.0, 5.0), (0.0, 0.0, -1.0), 1.0, max_steps=1000,
                    d_lambda=0.05, escape_radius=100.0, disk=disk)
    assert res.outcome is not TraceOutcome.HIT_DISK


def test_hits_orbiting_body():
    body = OrbitingBody(position=(5.0, 0.0, 0.0), velocity=(0.0, 0.0, 0.0), radius=1.0,
                        semi_major_axis=5.0, eccentricity=0.0, mean_motion=1.0)
    res = trace_ray((20.0, 0.0, 0.0), (-1.0, 0.0, 0.0), 1.0, max_steps=1000, body=body, **FAST)
    assert res.outcome is TraceOutcome.HIT_OBJECT
    assert res.position[0] == pytest.approx(6.0, abs=0.15)


def test_traced_ray_conserves_energy():
    res = trace_ray((20.0, 0.0, 0.0), (-0.6, 0.8, 0.0), 1.0, max_steps=300,
                    d_lambda=0.05, escape_radius=1000.0)
    assert res.outcome is TraceOutcome.MAX_STEPS
    assert energy(res.ray, 1.0) == pytest.approx(res.ray.E, rel=1e-3)


def test_euler_variant_is_available():
    res = trace_ray((10.0, 0.0, 0.0), (-1.0, 0.0, 0.0), 1.0, max_steps=1000, method="euler", **FAST)
    assert res.outcome is TraceOutcome.HIT_BLACK_HOLE


def test_result_serialisation():
    res = trace_ray((10.0, 0.0, 0.0), (-1.0, 0.0, 0.0), 1.0, max_steps=1000, **FAST)
    out = res.as_dict()
    assert out["outcome"] == "hit_black_hole"
    assert out["steps"] == res.steps
    assert len(out["position"]) == 3
    assert len(res.position_f32) == 3
    assert TraceOutcome.HIT_BLACK_HOLE.code == 0
    assert TraceOutcome.MAX_STEPS.code == 4
    assert TraceOutcome.REJECTED.code == 5
    assert out["error"] is None
