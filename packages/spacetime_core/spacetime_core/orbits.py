import logging
import math
from dataclasses import dataclass
from typing import Optional, Tuple

from .constants import DEFAULT_CONSTANTS, PhysicalConstants, schwarzschild_radius
from .models import Vec3

logger = logging.getLogger(__name__)

# mean motion is sped up so an orbit completes on screen in seconds
MEAN_MOTION_DISPLAY_SCALE = 1000.0
INCLINATION = math.radians(30.0)
KEPLER_ITERATIONS = 10


def solve_kepler_fixed(mean_anomaly: float, e: float, iterations: int = KEPLER_ITERATIONS) -> float:
    """Fixed-point iteration E <- M + e sin E seeded at E = M, no convergence test."""
    E = mean_anomaly
    for _ in range(iterations):
        E = mean_anomaly + e * math.sin(E)
    return E


def solve_kepler(mean_anomaly: float, e: float, tolerance: float = 1e-12,
                 max_iterations: int = 500) -> Tuple[float, int, bool]:
    """Fixed-point iteration stopped once successive iterates agree to `tolerance`.

    Returns (E, iterations used, converged).
    """
    E = mean_anomaly
    for n in range(1, max_iterations + 1):
        E_next = mean_anomaly + e * math.sin(E)
        if abs(E_next - E) <= tolerance:
            return E_next, n, True
        E = E_next
    logger.debug("Kepler solve did not converge: M=%g e=%g after %d iterations",
                 mean_anomaly, e, max_iterations)
    return E, max_iterations, False


@dataclass
class OrbitingBody:
    position: Vec3
    velocity: Vec3
    radius: float
    semi_major_axis: float
    eccentricity: float
    mean_motion: float
    kepler_tolerance: Optional[float] = None

    @classmethod
    def from_elements(cls, semi_major_axis_scu: float, eccentricity: float, radius: float,
                      black_hole_mass: float, constants: PhysicalConstants = DEFAULT_CONSTANTS,
                      kepler_tolerance: Optional[float] = None) -> "OrbitingBody":
        """Body at periapsis on the +x axis.

        Lengths are given in units of rs / 2 and converted to metres.
        """
        if not 0.0 <= eccentricity < 1.0:
            raise ValueError(f"eccentricity must be in [0, 1), got {eccentricity!r}")
        if semi_major_axis_scu <= 0.0:
            raise ValueError("semi-major axis must be positive")
        unit_scale = schwarzschild_radius(black_hole_mass, constants) / 2.0
        a = semi_major_axis_scu * unit_scale
        n = math.sqrt(constants.G * black_hole_mass / a ** 3) * MEAN_MOTION_DISPLAY_SCALE
        return cls(
            position=(a * (1.0 - eccentricity), 0.0, 0.0),
            velocity=(0.0, 0.0, 0.0),
            radius=radius * unit_scale,
            semi_major_axis=a,
            eccentricity=eccentricity,
            mean_motion=n,
            kepler_tolerance=kepler_tolerance,
        )

    @property
    def period(self) -> float:
        return 2.0 * math.pi / self.mean_motion

    def eccentric_anomaly(self, time: float) -> float:
        M = self.mean_motion * time
        if self.kepler_tolerance is None:
            return solve_kepler_fixed(M, self.eccentricity)
        E, _, _ = solve_kepler(M, self.eccentricity, self.kepler_tolerance)
        return E

    def orbital_plane_position(self, time: float) -> Tuple[float, float]:
        """(x, w) in the orbital plane before the inclination rotation."""
        a, e = self.semi_major_axis, self.eccentricity
        E = self.eccentric_anomaly(time)
        return a * (math.cos(E) - e), a * math.sqrt(1.0 - e * e) * math.sin(E)

    def update(self, time: float) -> None:
        a, e, n = self.semi_major_axis, self.eccentricity, self.mean_motion
        E = self.eccentric_anomaly(time)
        cos_e, sin_e = math.cos(E), math.sin(E)
        root = math.sqrt(1.0 - e * e)

        x_orbit = a * (cos_e - e)
        w_orbit = a * root * sin_e
        self.position = (x_orbit, w_orbit * math.sin(INCLINATION), w_orbit * math.cos(INCLINATION))

        denom = 1.0 - e * cos_e
        vx_orbit = -a * n * sin_e / denom
        vw_orbit = a * n * root * cos_e / denom
        self.velocity = (vx_orbit, vw_orbit * math.sin(INCLINATION), vw_orbit * math.cos(INCLINATION))

    def contains(self, point: Vec3) -> bool:
        dx, dy, dz = (point[i] - self.position[i] for i in range(3))
        return dx * dx + dy * dy + dz * dz <= self.radius * self.radius
