import logging
import math
from dataclasses import dataclass
from enum import Enum
from typing import TYPE_CHECKING, Optional

import numpy as np

from .constants import redshift_factor
from .coordinates import cartesian_to_spherical, init_ray
from .errors import HorizonError, SingularInputError
from .integrators import get_stepper
from .models import Disk, RayState, Vec3
from .settings import D_LAMBDA, ESCAPE_R, MAX_STEPS

if TYPE_CHECKING:
    from .orbits import OrbitingBody

logger = logging.getLogger(__name__)


class TraceOutcome(str, Enum):
    HIT_BLACK_HOLE = "hit_black_hole"
    HIT_DISK = "hit_disk"
    HIT_OBJECT = "hit_object"
    ESCAPED = "escaped"
    MAX_STEPS = "max_steps"
    # singular input or non-finite state; only batch tracing reports it
    REJECTED = "rejected"

    @property
    def code(self) -> int:
        return _CODES[self]


_CODES = {outcome: i for i, outcome in enumerate(TraceOutcome)}


@dataclass
class TraceResult:
    outcome: TraceOutcome
    steps: int
    position: Optional[Vec3]
    ray: Optional[RayState] = None
    redshift: Optional[float] = None
    error: Optional[str] = None

    @property
    def position_f32(self) -> Vec3:
        return tuple(float(v) for v in np.asarray(self.position, dtype=np.float32))

    def as_dict(self):
        return {
            "outcome": self.outcome.value,
            "steps": self.steps,
            "position": None if self.position is None else list(self.position),
            "redshift": self.redshift,
            "error": self.error,
        }


def trace_ray(pos: Vec3, direction: Vec3, rs: float, max_steps: int = MAX_STEPS,
              d_lambda: float = D_LAMBDA, escape_radius: float = ESCAPE_R,
              disk: Optional[Disk] = None, body: Optional["OrbitingBody"] = None,
              method: str = "rk4") -> TraceResult:
    """Follow one light ray from `pos` (black-hole-centred) until it terminates.

    Each step checks, in order: horizon, one integration step, disk, orbiting
    body, escape radius and finally the step budget.
    """
    step = get_stepper(method)
    r0, _, _ = cartesian_to_spherical(pos)
    if r0 <= rs:
        return TraceResult(TraceOutcome.HIT_BLACK_HOLE, 0, tuple(float(v) for v in pos))

    ray = init_ray(pos, direction, rs)
    if ray.r > escape_radius:
        return TraceResult(TraceOutcome.ESCAPED, 0, ray.to_cartesian(), ray)

    prev = ray.to_cartesian()
    for n in range(1, max_steps + 1):
        try:
            step(ray, d_lambda, rs)
        except HorizonError:
            # an intermediate stage already fell through the horizon
            return _finish(TraceOutcome.HIT_BLACK_HOLE, n, ray.to_cartesian(), ray)
        if not math.isfinite(ray.r):
            raise SingularInputError(f"integration produced r={ray.r!r} after {n} steps")
        if ray.r <= rs:
            return _finish(TraceOutcome.HIT_BLACK_HOLE, n, ray.to_cartesian(), ray)

        point = ray.to_cartesian()
        if disk is not None:
            hit = disk.crossing(prev, point)
            if hit is not None:
                r_hit = math.sqrt(hit[0] * hit[0] + hit[1] * hit[1] + hit[2] * hit[2])
                g = redshift_factor(r_hit, rs) if r_hit > rs else None
                return _finish(TraceOutcome.HIT_DISK, n, hit, ray, g)
        if body is not None and body.contains(point):
            return _finish(TraceOutcome.HIT_OBJECT, n, point, ray)
        if ray.r > escape_radius:
            return _finish(TraceOutcome.ESCAPED, n, point, ray)
        prev = point

    return _finish(TraceOutcome.MAX_STEPS, max_steps, prev, ray)


def _finish(outcome, steps, position, ray, redshift=None) -> TraceResult:
    logger.debug("ray terminated: %s after %d steps at r=%.6g", outcome.value, steps, ray.r)
    return TraceResult(outcome, steps, position, ray, redshift)

