import math
from dataclasses import dataclass

from .errors import HorizonError

c = 299_792_458.0
G = 6.67430e-11

SAGITTARIUS_A_MASS = 8.54e36  # kg

# polar angle is kept this far from 0 and pi so sin(theta) never vanishes
POLE_EPSILON = 1e-9


@dataclass(frozen=True)
class PhysicalConstants:
    c: float = c
    G: float = G


DEFAULT_CONSTANTS = PhysicalConstants()
GEOMETRIC_UNITS = PhysicalConstants(c=1.0, G=1.0)


def schwarzschild_radius(mass: float, constants: PhysicalConstants = DEFAULT_CONSTANTS) -> float:
    return 2.0 * constants.G * mass / (constants.c * constants.c)


def lapse_factor(r: float, rs: float) -> float:
    """f = 1 - rs/r. Only defined outside the horizon."""
    if r <= rs:
        raise HorizonError(f"lapse factor evaluated at r={r!r} <= rs={rs!r}")
    return 1.0 - rs / r


def redshift_factor(r: float, rs: float) -> float:
    """Frequency seen at infinity over frequency emitted by a static source at r."""
    return math.sqrt(lapse_factor(r, rs))
