from .constants import (c, G, DEFAULT_CONSTANTS, GEOMETRIC_UNITS, PhysicalConstants,
                        schwarzschild_radius, lapse_factor, redshift_factor)
from .errors import SpacetimeError, SingularInputError, HorizonError
from .models import BlackHole, RayState, Disk
from .coordinates import init_ray, cartesian_to_spherical, spherical_to_cartesian
from .integrators import geodesic_rhs, rk4_step, euler_step, integrate_trajectory
from .tracer import TraceOutcome, TraceResult, trace_ray
from .batch import trace_batch
from .orbits import OrbitingBody, solve_kepler, solve_kepler_fixed
from .camera import OrbitCamera
from .scene import Scene
from .settings import TracerSettings
__all__ = ["c","G","DEFAULT_CONSTANTS","GEOMETRIC_UNITS","PhysicalConstants",
           "schwarzschild_radius","lapse_factor","redshift_factor",
           "SpacetimeError","SingularInputError","HorizonError",
           "BlackHole","RayState","Disk",
           "init_ray","cartesian_to_spherical","spherical_to_cartesian",
           "geodesic_rhs","rk4_step","euler_step","integrate_trajectory",
           "TraceOutcome","TraceResult","trace_ray","trace_batch",
           "OrbitingBody","solve_kepler","solve_kepler_fixed",
           "OrbitCamera","Scene","TracerSettings"]
