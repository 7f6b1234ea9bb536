import logging
import os
from typing import List, Optional, Tuple

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from spacetime_core.errors import SpacetimeError
from spacetime_core.integrators import integrate_trajectory
from spacetime_core.models import BlackHole, Disk
from spacetime_core.orbits import OrbitingBody
from spacetime_core.settings import TracerSettings
from spacetime_core.batch import trace_batch
from spacetime_core.tracer import trace_ray

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("ray-api")

settings = TracerSettings.from_env()

app = FastAPI(title="Ray API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

Vec = Tuple[float, float, float]

class DiskReq(BaseModel):
    inner_radius: float = Field(ge=0)
    outer_radius: float = Field(gt=0)
    thickness: float = Field(ge=0)

class TraceReq(BaseModel):
    mass: float = Field(gt=0)
    position: Vec
    direction: Vec
    max_steps: int = Field(settings.max_steps, gt=0)
    dlam: float = Field(settings.d_lambda, gt=0)
    escape_radius: float = Field(settings.escape_radius, gt=0)
    method: str = settings.method
    disk: Optional[DiskReq] = None

class BatchReq(BaseModel):
    mass: float = Field(gt=0)
    positions: List[Vec]
    directions: List[Vec]
    max_steps: int = Field(settings.max_steps, gt=0)
    dlam: float = Field(settings.d_lambda, gt=0)
    escape_radius: float = Field(settings.escape_radius, gt=0)
    method: str = settings.method
    disk: Optional[DiskReq] = None

class IntegrateReq(BaseModel):
    mass: float = Field(gt=0)
    position: Vec
    direction: Vec
    steps: int = 1000
    dlam: float = 1.0

class OrbitReq(BaseModel):
    mass: float = Field(gt=0)
    semi_major_axis: float = Field(gt=0)
    eccentricity: float = Field(ge=0, lt=1)
    radius: float = Field(gt=0)
    time: float = 0.0
    kepler_tolerance: Optional[float] = Field(None, gt=0)

def _unprocessable(exc: Exception):
    logger.info("rejected request: %s", exc)
    return HTTPException(status_code=422, detail=str(exc))

@app.post("/trace")
def trace(req: TraceReq):
    try:
        bh = BlackHole(mass=req.mass)
        disk = Disk(**req.disk.model_dump()) if req.disk else None
        res = trace_ray(req.position, req.direction, bh.rs, req.max_steps, req.dlam,
                        req.escape_radius, disk=disk, method=req.method)
    except (SpacetimeError, ValueError) as exc:
        raise _unprocessable(exc)
    return {"rs": bh.rs, **res.as_dict()}

@app.post("/trace/batch")
def trace_many(req: BatchReq):
    try:
        bh = BlackHole(mass=req.mass)
        disk = Disk(**req.disk.model_dump()) if req.disk else None
        results = trace_batch(req.positions, req.directions, bh.rs,
                              max_steps=req.max_steps, d_lambda=req.dlam,
                              escape_radius=req.escape_radius, disk=disk, method=req.method)
    except (SpacetimeError, ValueError) as exc:
        raise _unprocessable(exc)
    return {"rs": bh.rs, "results": [res.as_dict() for res in results]}

@app.post("/integrate")
def integrate(req: IntegrateReq):
    try:
        bh = BlackHole(mass=req.mass)
        return integrate_trajectory(bh, req.position, req.direction, req.steps, req.dlam)
    except (SpacetimeError, ValueError) as exc:
        raise _unprocessable(exc)

@app.post("/orbit")
def orbit(req: OrbitReq):
    body = OrbitingBody.from_elements(req.semi_major_axis, req.eccentricity, req.radius,
                                      req.mass, kepler_tolerance=req.kepler_tolerance)
    body.update(req.time)
    return {"position": list(body.position), "velocity": list(body.velocity),
            "radius": body.radius, "mean_motion": body.mean_motion, "period": body.period}
