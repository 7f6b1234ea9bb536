import logging
import os

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, Field
from spacetime_core.constants import lapse_factor, redshift_factor, schwarzschild_radius
from spacetime_core.errors import SpacetimeError

logging.basicConfig(level=os.getenv("LOG_LEVEL", "INFO"))
logger = logging.getLogger("blackhole-api")

app = FastAPI(title="Black Hole API")
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["*"],
    allow_headers=["*"],
)

class BHReq(BaseModel):
    mass: float = Field(gt=0)

class RedshiftReq(BHReq):
    r: float = Field(gt=0)

@app.post("/derived")
def derived(req: BHReq):
    return {"mass": req.mass, "schwarzschild_radius": schwarzschild_radius(req.mass)}

@app.post("/redshift")
def redshift(req: RedshiftReq):
    rs = schwarzschild_radius(req.mass)
    try:
        return {"r": req.r, "schwarzschild_radius": rs,
                "lapse_factor": lapse_factor(req.r, rs),
                "redshift_factor": redshift_factor(req.r, rs)}
    except SpacetimeError as exc:
        logger.info("rejected redshift request: %s", exc)
        raise HTTPException(status_code=422, detail=str(exc))
