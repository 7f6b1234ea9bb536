import math
from typing import Tuple

from .constants import POLE_EPSILON, lapse_factor
from .errors import SingularInputError
from .models import RayState, Vec3


def cartesian_to_spherical(pos: Vec3) -> Tuple[float, float, float]:
    x, y, z = (float(v) for v in pos)
    if not all(math.isfinite(v) for v in (x, y, z)):
        raise SingularInputError(f"non-finite position {pos!r}")
    r = math.sqrt(x * x + y * y + z * z)
    if r == 0.0:
        raise SingularInputError("position at the coordinate origin")
    theta = math.acos(max(-1.0, min(1.0, z / r)))
    phi = math.atan2(y, x)
    return r, theta, phi


def spherical_to_cartesian(r: float, theta: float, phi: float) -> Vec3:
    sin_t = math.sin(theta)
    return (r * sin_t * math.cos(phi), r * sin_t * math.sin(phi), r * math.cos(theta))


def clamp_polar(theta: float) -> float:
    return min(max(theta, POLE_EPSILON), math.pi - POLE_EPSILON)


def init_ray(pos: Vec3, direction: Vec3, rs: float) -> RayState:
    """Spherical ray state for a photon at `pos` heading along `direction`.

    The direction is projected on the local spherical basis as given (it is
    not re-normalized). dt/dlambda follows from the null condition of the
    Schwarzschild line element and fixes the conserved energy E = f dt/dlambda.
    """
    r, theta, phi = cartesian_to_spherical(pos)
    theta = clamp_polar(theta)
    dx, dy, dz = (float(v) for v in direction)
    if not all(math.isfinite(v) for v in (dx, dy, dz)):
        raise SingularInputError(f"non-finite direction {direction!r}")

    sin_t, cos_t = math.sin(theta), math.cos(theta)
    sin_p, cos_p = math.sin(phi), math.cos(phi)

    dr = sin_t * cos_p * dx + sin_t * sin_p * dy + cos_t * dz
    dtheta = (cos_t * cos_p * dx + cos_t * sin_p * dy - sin_t * dz) / r
    dphi = (-sin_p * dx + cos_p * dy) / (r * sin_t)

    L = r * r * sin_t * dphi
    f = lapse_factor(r, rs)
    dt_dlam = math.sqrt((dr * dr) / (f * f)
                        + (r * r * (dtheta * dtheta + sin_t * sin_t * dphi * dphi)) / f)
    E = f * dt_dlam

    return RayState(r, theta, phi, dr, dtheta, dphi, dt_dlam, E, L)
