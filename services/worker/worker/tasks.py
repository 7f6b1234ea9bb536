import logging
import os
from celery import Celery
from spacetime_core.integrators import integrate_trajectory
from spacetime_core.models import BlackHole
from spacetime_core.orbits import OrbitingBody
from spacetime_core.settings import TracerSettings
from spacetime_core.tracer import trace_ray

CELERY_BROKER_URL = os.getenv("CELERY_BROKER_URL", "redis://redis:6379/0")
CELERY_BACKEND_URL = os.getenv("CELERY_BACKEND_URL", "redis://redis:6379/1")

celery = Celery("bh", broker=CELERY_BROKER_URL, backend=CELERY_BACKEND_URL)
logger = logging.getLogger(__name__)
settings = TracerSettings.from_env()

@celery.task
def integrate_task(mass, position, direction, steps=50000, dlam=1.0):
    bh = BlackHole(mass=mass)
    return integrate_trajectory(bh, position, direction, steps, dlam)

@celery.task
def trace_task(mass, position, direction, max_steps=None, dlam=None, escape_radius=None):
    bh = BlackHole(mass=mass)
    res = trace_ray(position, direction, bh.rs,
                    max_steps or settings.max_steps,
                    dlam or settings.d_lambda,
                    escape_radius or settings.escape_radius,
                    method=settings.method)
    logger.info("trace_task finished: %s in %d steps", res.outcome.value, res.steps)
    return res.as_dict()

@celery.task
def orbit_task(mass, semi_major_axis, eccentricity, radius, time):
    body = OrbitingBody.from_elements(semi_major_axis, eccentricity, radius, mass)
    body.update(time)
    return {"position": list(body.position), "velocity": list(body.velocity)}
