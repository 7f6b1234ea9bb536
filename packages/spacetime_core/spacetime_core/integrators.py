import math
from typing import Callable, Dict, Tuple

from .constants import POLE_EPSILON, lapse_factor
from .coordinates import init_ray
from .errors import HorizonError
from .models import BlackHole, RayState, Vec3

State = Tuple[float, float, float, float, float, float]  # r, theta, phi, dr, dtheta, dphi


def _rhs(y: State, E: float, rs: float) -> State:
    r, theta, _, dr, dtheta, dphi = y
    f = lapse_factor(r, rs)
    dt_dlam = E / f
    sin_t = math.sin(theta)
    if abs(sin_t) < POLE_EPSILON:
        sin_t = math.copysign(POLE_EPSILON, sin_t)
    cos_t = math.cos(theta)

    d2r = (-(rs / (2.0 * r * r)) * f * (dt_dlam * dt_dlam)
           + (rs / (2.0 * r * r * f)) * (dr * dr)
           + (r - rs) * (dtheta * dtheta + sin_t * sin_t * dphi * dphi))
    d2theta = -2.0 * dr * dtheta / r + sin_t * cos_t * (dphi * dphi)
    d2phi = -2.0 * dr * dphi / r - 2.0 * (cos_t / sin_t) * dtheta * dphi
    return dr, dtheta, dphi, d2r, d2theta, d2phi


def _state(ray: RayState) -> State:
    return ray.r, ray.theta, ray.phi, ray.dr, ray.dtheta, ray.dphi


def _store(ray: RayState, y: State, rs: float) -> None:
    ray.r, ray.theta, ray.phi, ray.dr, ray.dtheta, ray.dphi = y
    if ray.r > rs:
        ray.dt = ray.E / lapse_factor(ray.r, rs)


def geodesic_rhs(ray: RayState, rs: float) -> State:
    """Rates (dr, dtheta, dphi) and accelerations (d2r, d2theta, d2phi).

    dt/dlambda is not integrated; it is recovered from the conserved energy
    as E / f at every evaluation.
    """
    return _rhs(_state(ray), ray.E, rs)


def _check_outside(ray: RayState, rs: float) -> None:
    if ray.r <= rs:
        raise HorizonError(f"cannot step a ray at r={ray.r!r} <= rs={rs!r}")


def rk4_step(ray: RayState, dlam: float, rs: float) -> None:
    _check_outside(ray, rs)
    y0 = _state(ray)

    def add(a, b, f): return tuple(a[i] + f*b[i] for i in range(6))
    k1 = _rhs(y0, ray.E, rs)
    k2 = _rhs(add(y0, k1, dlam/2.0), ray.E, rs)
    k3 = _rhs(add(y0, k2, dlam/2.0), ray.E, rs)
    k4 = _rhs(add(y0, k3, dlam), ray.E, rs)

    y1 = tuple(y0[i] + (dlam / 6.0) * (k1[i] + 2*k2[i] + 2*k3[i] + k4[i]) for i in range(6))
    _store(ray, y1, rs)


def euler_step(ray: RayState, dlam: float, rs: float) -> None:
    """Single right-hand-side evaluation per step; first order in dlam."""
    _check_outside(ray, rs)
    y0 = _state(ray)
    k1 = _rhs(y0, ray.E, rs)
    _store(ray, tuple(y0[i] + dlam * k1[i] for i in range(6)), rs)


STEPPERS: Dict[str, Callable[[RayState, float, float], None]] = {
    "rk4": rk4_step,
    "euler": euler_step,
}


def get_stepper(method: str) -> Callable[[RayState, float, float], None]:
    try:
        return STEPPERS[method]
    except KeyError:
        raise ValueError(f"unknown integrator {method!r}, expected one of {sorted(STEPPERS)}") from None


def energy(ray: RayState, rs: float) -> float:
    """Energy recomputed from the current position and velocity via the null condition."""
    f = lapse_factor(ray.r, rs)
    sin_t = math.sin(ray.theta)
    return math.sqrt(ray.dr * ray.dr
                     + f * ray.r * ray.r * (ray.dtheta * ray.dtheta + sin_t * sin_t * ray.dphi * ray.dphi))


def angular_momentum(ray: RayState) -> float:
    return ray.r * ray.r * math.sin(ray.theta) * ray.dphi


def null_residual(ray: RayState, rs: float) -> float:
    """g(k, k) / E^2 for the current state; zero along a light ray."""
    f = lapse_factor(ray.r, rs)
    sin_t = math.sin(ray.theta)
    g = (-f * ray.dt * ray.dt + ray.dr * ray.dr / f
         + ray.r * ray.r * (ray.dtheta * ray.dtheta + sin_t * sin_t * ray.dphi * ray.dphi))
    return g / (ray.E * ray.E)


def integrate_trajectory(bh: BlackHole, pos: Vec3, direction: Vec3,
                         steps: int = 1000, dlam: float = 1.0, method: str = "rk4"):
    rs = bh.rs
    step = get_stepper(method)
    origin = bh.position
    local = tuple(pos[i] - origin[i] for i in range(3))

    def world(p): return tuple(p[i] + origin[i] for i in range(3))
    ray = init_ray(local, direction, rs)
    ray.trail = [world(ray.to_cartesian())]
    captured = False
    for _ in range(steps):
        if ray.r <= rs:
            break
        try:
            step(ray, dlam, rs)
        except HorizonError:
            captured = True
            break
        ray.trail.append(world(ray.to_cartesian()))
    return {"trail": ray.trail, "hit_horizon": captured or ray.r <= rs, "rs": rs}
