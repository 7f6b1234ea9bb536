import math

import pytest
from spacetime_core.constants import G, SAGITTARIUS_A_MASS, schwarzschild_radius
from spacetime_core.orbits import (INCLINATION, MEAN_MOTION_DISPLAY_SCALE, OrbitingBody,
                                   solve_kepler, solve_kepler_fixed)

RS = schwarzschild_radius(SAGITTARIUS_A_MASS)


def kepler_residual(E, M, e):
    return abs(E - e * math.sin(E) - M)


def test_from_elements_scales_by_half_rs():
    body = OrbitingBody.from_elements(7.0, 0.5, 0.4, SAGITTARIUS_A_MASS)
    a = 7.0 * RS / 2.0
    assert body.semi_major_axis == pytest.approx(a)
    assert body.radius == pytest.approx(0.4 * RS / 2.0)
    assert body.mean_motion == pytest.approx(math.sqrt(G * SAGITTARIUS_A_MASS / a ** 3) * MEAN_MOTION_DISPLAY_SCALE)
    assert body.position == pytest.approx((a * 0.5, 0.0, 0.0))
    assert body.velocity == (0.0, 0.0, 0.0)


@pytest.mark.parametrize("e", [-0.1, 1.0, 1.5])
def test_rejects_eccentricity_outside_unit_interval(e):
    with pytest.raises(ValueError):
        OrbitingBody.from_elements(7.0, e, 0.4, SAGITTARIUS_A_MASS)


@pytest.mark.parametrize("e", [0.0, 0.3, 0.5])
def test_periapsis_at_time_zero(e):
    body = OrbitingBody.from_elements(7.0, e, 0.4, SAGITTARIUS_A_MASS)
    body.update(0.0)
    a = body.semi_major_axis
    assert body.position == pytest.approx((a * (1.0 - e), 0.0, 0.0), abs=1e-6 * a)


def test_circular_orbit_has_constant_radius():
    body = OrbitingBody.from_elements(9.0, 0.0, 0.4, SAGITTARIUS_A_MASS)
    a = body.semi_major_axis
    for k in range(25):
        t = k * body.period / 17.0
        x, w = body.orbital_plane_position(t)
        assert math.hypot(x, w) == pytest.approx(a, rel=1e-12)
        body.update(t)
        assert math.sqrt(sum(v * v for v in body.position)) == pytest.approx(a, rel=1e-12)


def test_one_period_returns_to_start():
    body = OrbitingBody.from_elements(7.0, 0.5, 0.4, SAGITTARIUS_A_MASS)
    a = body.semi_major_axis
    start = body.orbital_plane_position(0.0)
    assert body.orbital_plane_position(body.period) == pytest.approx(start, abs=1e-6 * a)
    t = 0.37 * body.period
    body.update(t)
    p1, v1 = body.position, body.velocity
    body.update(t + body.period)
    assert body.position == pytest.approx(p1, abs=1e-6 * a)
    speed = math.sqrt(sum(v * v for v in v1))
    assert body.velocity == pytest.approx(v1, abs=1e-6 * speed)


def test_inclination_rotates_about_x_axis():
    body = OrbitingBody.from_elements(7.0, 0.2, 0.4, SAGITTARIUS_A_MASS)
    t = 0.25 * body.period
    x, w = body.orbital_plane_position(t)
    body.update(t)
    assert body.position == pytest.approx((x, w * math.sin(INCLINATION), w * math.cos(INCLINATION)))


def test_velocity_matches_finite_difference():
    body = OrbitingBody.from_elements(7.0, 0.5, 0.4, SAGITTARIUS_A_MASS, kepler_tolerance=1e-14)
    t, h = 0.3 * body.period, 1e-6 * body.period
    body.update(t - h)
    before = body.position
    body.update(t + h)
    after = body.position
    body.update(t)
    numeric = tuple((after[i] - before[i]) / (2.0 * h) for i in range(3))
    speed = math.sqrt(sum(v * v for v in body.velocity))
    assert body.velocity == pytest.approx(numeric, abs=1e-6 * speed)


def test_fixed_solver_runs_exactly_ten_iterations():
    M, e = 1.0, 0.5
    E = M
    for _ in range(10):
        E = M + e * math.sin(E)
    assert solve_kepler_fixed(M, e) == E
    assert solve_kepler_fixed(M, e, iterations=0) == M


def test_tolerance_solver_converges():
    E, iterations, converged = solve_kepler(1.0, 0.5)
    assert converged
    assert iterations < 100
    assert kepler_residual(E, 1.0, 0.5) < 1e-11


def test_fixed_count_is_inaccurate_near_unit_eccentricity():
    M, e = 0.1, 0.99
    fixed = solve_kepler_fixed(M, e)
    E, _, converged = solve_kepler(M, e, tolerance=1e-13, max_iterations=5000)
    assert converged
    assert kepler_residual(E, M, e) < 1e-10
    assert kepler_residual(fixed, M, e) > 1e-3


def test_tolerance_solver_reports_non_convergence():
    E, iterations, converged = solve_kepler(0.1, 0.99, tolerance=1e-15, max_iterations=3)
    assert not converged
    assert iterations == 3
    assert math.isfinite(E)


def test_body_uses_tolerance_solver_when_configured():
    fixed = OrbitingBody.from_elements(7.0, 0.99, 0.4, SAGITTARIUS_A_MASS)
    exact = OrbitingBody.from_elements(7.0, 0.99, 0.4, SAGITTARIUS_A_MASS, kepler_tolerance=1e-13)
    t = 0.1 / fixed.mean_motion
    assert kepler_residual(exact.eccentric_anomaly(t), 0.1, 0.99) < 1e-10
    assert kepler_residual(fixed.eccentric_anomaly(t), 0.1, 0.99) > 1e-3


def test_contains():
    body = OrbitingBody.from_elements(7.0, 0.5, 0.4, SAGITTARIUS_A_MASS)
    x = body.position[0]
    assert body.contains((x + 0.5 * body.radius, 0.0, 0.0))
    assert not body.contains((x + 2.0 * body.radius, 0.0, 0.0))
