"""Vectorized tracing of many rays at once.

All live rays are advanced together as rows of one (N, 6) numpy state array,
one RK4 (or single-evaluation) step per loop iteration. Rays leave the array
as soon as they terminate, so the per-ray outcomes match `trace_ray`.
"""
import logging
from collections import Counter
from typing import TYPE_CHECKING, List, Optional, Sequence

import numpy as np

from .constants import POLE_EPSILON, redshift_factor
from .coordinates import cartesian_to_spherical, init_ray
from .errors import SpacetimeError
from .integrators import get_stepper
from .models import Disk, RayState, Vec3
from .settings import D_LAMBDA, ESCAPE_R, MAX_STEPS
from .tracer import TraceOutcome, TraceResult

if TYPE_CHECKING:
    from .orbits import OrbitingBody

logger = logging.getLogger(__name__)


def geodesic_rhs_many(Y: np.ndarray, E: np.ndarray, rs: float) -> np.ndarray:
    """Row-wise geodesic right-hand side for states Y = (r, theta, phi, dr, dtheta, dphi)."""
    r, theta = Y[:, 0], Y[:, 1]
    dr, dtheta, dphi = Y[:, 3], Y[:, 4], Y[:, 5]
    f = 1.0 - rs / r
    dt_dlam = E / f
    sin_t = np.sin(theta)
    sin_t = np.where(np.abs(sin_t) < POLE_EPSILON, np.copysign(POLE_EPSILON, sin_t), sin_t)
    cos_t = np.cos(theta)

    d2r = (-(rs / (2.0 * r * r)) * f * (dt_dlam * dt_dlam)
           + (rs / (2.0 * r * r * f)) * (dr * dr)
           + (r - rs) * (dtheta * dtheta + sin_t * sin_t * dphi * dphi))
    d2theta = -2.0 * dr * dtheta / r + sin_t * cos_t * (dphi * dphi)
    d2phi = -2.0 * dr * dphi / r - 2.0 * (cos_t / sin_t) * dtheta * dphi
    return np.column_stack([dr, dtheta, dphi, d2r, d2theta, d2phi])


def step_many(Y: np.ndarray, E: np.ndarray, dlam: float, rs: float, method: str = "rk4"):
    """Advance every row by one step.

    Returns (new states, fell_in) where fell_in marks rows whose intermediate
    stage reached r <= rs; those rows are left unchanged.
    """
    with np.errstate(divide="ignore", invalid="ignore"):
        k1 = geodesic_rhs_many(Y, E, rs)
        if method == "euler":
            return Y + dlam * k1, np.zeros(len(Y), dtype=bool)
        y2 = Y + (dlam / 2.0) * k1
        fell_in = y2[:, 0] <= rs
        k2 = geodesic_rhs_many(y2, E, rs)
        y3 = Y + (dlam / 2.0) * k2
        fell_in |= y3[:, 0] <= rs
        k3 = geodesic_rhs_many(y3, E, rs)
        y4 = Y + dlam * k3
        fell_in |= y4[:, 0] <= rs
        k4 = geodesic_rhs_many(y4, E, rs)
        Y1 = Y + (dlam / 6.0) * (k1 + 2.0 * k2 + 2.0 * k3 + k4)
    Y1[fell_in] = Y[fell_in]
    return Y1, fell_in


def to_cartesian_many(Y: np.ndarray) -> np.ndarray:
    r, theta, phi = Y[:, 0], Y[:, 1], Y[:, 2]
    sin_t = np.sin(theta)
    return np.column_stack([r * sin_t * np.cos(phi), r * sin_t * np.sin(phi), r * np.cos(theta)])


def disk_hits(disk: Disk, p0: np.ndarray, p1: np.ndarray):
    """Vectorized `Disk.crossing`: (hit mask, impact points)."""
    rho1 = np.hypot(p1[:, 0], p1[:, 1])
    inside = ((np.abs(p1[:, 2]) <= 0.5 * disk.thickness)
              & (rho1 >= disk.inner_radius) & (rho1 <= disk.outer_radius))
    z0, z1 = p0[:, 2], p1[:, 2]
    crosses = z0 * z1 < 0.0
    with np.errstate(divide="ignore", invalid="ignore"):
        s = np.where(crosses, z0 / (z0 - z1), 0.0)
    plane = p0 + s[:, None] * (p1 - p0)
    plane[:, 2] = 0.0
    rho = np.hypot(plane[:, 0], plane[:, 1])
    crosses &= (rho >= disk.inner_radius) & (rho <= disk.outer_radius)
    points = np.where(inside[:, None], p1, plane)
    return inside | crosses, points


def _ray_state(y, E, L, rs) -> RayState:
    r = float(y[0])
    dt = E / (1.0 - rs / r) if r > rs else float("nan")
    return RayState(r, float(y[1]), float(y[2]), float(y[3]), float(y[4]), float(y[5]), dt, E, L)


def trace_batch(origins: Sequence[Vec3], directions: Sequence[Vec3], rs: float,
                max_steps: int = MAX_STEPS, d_lambda: float = D_LAMBDA,
                escape_radius: float = ESCAPE_R, disk: Optional[Disk] = None,
                body: Optional["OrbitingBody"] = None, method: str = "rk4") -> List[TraceResult]:
    """Trace many rays together; results keep input order.

    A ray with singular input (or one whose state turns non-finite) gets a
    REJECTED result carrying the error message; the other rays are unaffected.
    """
    if len(origins) != len(directions):
        raise ValueError(f"got {len(origins)} origins but {len(directions)} directions")
    get_stepper(method)
    n_rays = len(origins)
    results: List[Optional[TraceResult]] = [None] * n_rays

    ids, rows, energies, momenta = [], [], [], []
    for i in range(n_rays):
        try:
            r0, _, _ = cartesian_to_spherical(origins[i])
            if r0 <= rs:
                results[i] = TraceResult(TraceOutcome.HIT_BLACK_HOLE, 0,
                                         tuple(float(v) for v in origins[i]))
                continue
            ray = init_ray(origins[i], directions[i], rs)
        except SpacetimeError as exc:
            results[i] = TraceResult(TraceOutcome.REJECTED, 0, None, error=str(exc))
            continue
        if ray.r > escape_radius:
            results[i] = TraceResult(TraceOutcome.ESCAPED, 0, ray.to_cartesian(), ray)
            continue
        ids.append(i)
        rows.append((ray.r, ray.theta, ray.phi, ray.dr, ray.dtheta, ray.dphi))
        energies.append(ray.E)
        momenta.append(ray.L)

    ids = np.array(ids, dtype=np.int64)
    Y = np.array(rows, dtype=np.float64).reshape(-1, 6)
    E = np.array(energies, dtype=np.float64)
    L = np.array(momenta, dtype=np.float64)
    prev = to_cartesian_many(Y)

    def finish(mask, outcome, step, points, redshift=None):
        for k in np.flatnonzero(mask):
            results[ids[k]] = TraceResult(
                outcome, step, tuple(float(v) for v in points[k]),
                _ray_state(Y[k], float(E[k]), float(L[k]), rs),
                None if redshift is None else redshift[k])

    step = 0
    while len(ids) and step < max_steps:
        step += 1
        old_points = prev
        Y, fell_in = step_many(Y, E, d_lambda, rs, method)

        bad = ~np.isfinite(Y).all(axis=1) & ~fell_in
        for k in np.flatnonzero(bad):
            results[ids[k]] = TraceResult(TraceOutcome.REJECTED, step, None,
                                          error=f"integration produced r={Y[k, 0]!r} after {step} steps")
        with np.errstate(invalid="ignore"):
            captured = (fell_in | (Y[:, 0] <= rs)) & ~bad
        points = to_cartesian_many(Y)
        finish(captured, TraceOutcome.HIT_BLACK_HOLE, step, np.where(fell_in[:, None], old_points, points))
        done = bad | captured

        if disk is not None:
            hit, impact = disk_hits(disk, old_points, points)
            hit &= ~done
            r_hit = np.linalg.norm(impact, axis=1)
            g = [redshift_factor(float(rh), rs) if rh > rs else None for rh in r_hit]
            finish(hit, TraceOutcome.HIT_DISK, step, impact, g)
            done |= hit
        if body is not None:
            center = np.asarray(body.position, dtype=np.float64)
            hit = (np.sum((points - center) ** 2, axis=1) <= body.radius * body.radius) & ~done
            finish(hit, TraceOutcome.HIT_OBJECT, step, points)
            done |= hit
        escaped = (Y[:, 0] > escape_radius) & ~done
        finish(escaped, TraceOutcome.ESCAPED, step, points)
        done |= escaped

        keep = ~done
        ids, Y, E, L, prev = ids[keep], Y[keep], E[keep], L[keep], points[keep]

    finish(np.ones(len(ids), dtype=bool), TraceOutcome.MAX_STEPS, max_steps, prev)

    counts = Counter(res.outcome.value for res in results)
    logger.info("traced %d rays in %d steps: %s", n_rays, step, dict(counts))
    return results
