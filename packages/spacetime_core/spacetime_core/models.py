import math
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

from .constants import DEFAULT_CONSTANTS, SAGITTARIUS_A_MASS, PhysicalConstants, schwarzschild_radius

Vec3 = Tuple[float, float, float]


@dataclass(frozen=True)
class BlackHole:
    mass: float  # kg
    position: Vec3 = (0.0, 0.0, 0.0)
    constants: PhysicalConstants = DEFAULT_CONSTANTS
    rs: float = field(init=False)

    def __post_init__(self):
        rs = schwarzschild_radius(self.mass, self.constants)
        if not rs > 0.0:
            raise ValueError(f"black hole mass must be positive, got {self.mass!r}")
        object.__setattr__(self, "rs", rs)

    @classmethod
    def sagittarius_a(cls) -> "BlackHole":
        return cls(mass=SAGITTARIUS_A_MASS)

    def intercept(self, point: Vec3) -> bool:
        dx, dy, dz = (point[i] - self.position[i] for i in range(3))
        return dx * dx + dy * dy + dz * dz < self.rs * self.rs


@dataclass
class RayState:
    r: float; theta: float; phi: float
    dr: float; dtheta: float; dphi: float
    dt: float
    E: float
    L: float
    trail: Optional[List[Vec3]] = None

    def to_cartesian(self) -> Vec3:
        sin_t = math.sin(self.theta)
        return (self.r * sin_t * math.cos(self.phi),
                self.r * sin_t * math.sin(self.phi),
                self.r * math.cos(self.theta))


@dataclass(frozen=True)
class Disk:
    """Accretion disk annulus in the equatorial (z = 0) plane of the black hole."""
    inner_radius: float
    outer_radius: float
    thickness: float

    def __post_init__(self):
        if not 0.0 <= self.inner_radius < self.outer_radius:
            raise ValueError("disk needs 0 <= inner_radius < outer_radius")
        if self.thickness < 0.0:
            raise ValueError("disk thickness must be non-negative")

    @classmethod
    def default_accretion_disk(cls) -> "Disk":
        rs = 1.269e10
        return cls(inner_radius=rs * 2.2, outer_radius=rs * 5.2, thickness=1.0e9)

    def in_annulus(self, x: float, y: float) -> bool:
        rho = math.hypot(x, y)
        return self.inner_radius <= rho <= self.outer_radius

    def contains(self, point: Vec3) -> bool:
        x, y, z = point
        return abs(z) <= 0.5 * self.thickness and self.in_annulus(x, y)

    def crossing(self, p0: Vec3, p1: Vec3) -> Optional[Vec3]:
        """Point where the segment p0 -> p1 meets the disk, or None.

        A segment ending inside the slab hits at p1. Otherwise a segment that
        jumps across the z = 0 plane hits at the interpolated plane point when
        that point lies in the annulus.
        """
        if self.contains(p1):
            return p1
        z0, z1 = p0[2], p1[2]
        if z0 * z1 >= 0.0:
            return None
        s = z0 / (z0 - z1)
        x = p0[0] + s * (p1[0] - p0[0])
        y = p0[1] + s * (p1[1] - p0[1])
        if self.in_annulus(x, y):
            return (x, y, 0.0)
        return None
