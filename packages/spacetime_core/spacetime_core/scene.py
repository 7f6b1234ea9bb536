import logging
from dataclasses import dataclass, field
from typing import Optional

import numpy as np

from .camera import OrbitCamera
from .constants import SAGITTARIUS_A_MASS
from .models import BlackHole, Disk, Vec3
from .orbits import OrbitingBody
from .settings import TracerSettings
from .batch import trace_batch
from .tracer import TraceResult, trace_ray

logger = logging.getLogger(__name__)


@dataclass
class Scene:
    black_hole: BlackHole
    disk: Optional[Disk] = None
    body: Optional[OrbitingBody] = None
    settings: TracerSettings = field(default_factory=TracerSettings)

    @classmethod
    def default(cls, settings: Optional[TracerSettings] = None) -> "Scene":
        bh = BlackHole.sagittarius_a()
        body = OrbitingBody.from_elements(7.0, 0.5, 0.4, SAGITTARIUS_A_MASS)
        logger.info("black hole: rs = %g m", bh.rs)
        logger.info("planet semi-major axis: %g m, eccentricity: %g",
                    body.semi_major_axis, body.eccentricity)
        return cls(bh, Disk.default_accretion_disk(), body, settings or TracerSettings())

    def advance(self, time: float) -> None:
        if self.body is not None:
            self.body.update(time)

    def _kwargs(self):
        s = self.settings
        return dict(max_steps=s.max_steps, d_lambda=s.d_lambda, escape_radius=s.escape_radius,
                    disk=self.disk, body=self.body, method=s.method)

    def _local(self, pos):
        origin = self.black_hole.position
        return tuple(pos[i] - origin[i] for i in range(3))

    def _world(self, res: TraceResult) -> TraceResult:
        origin = self.black_hole.position
        if res.position is not None:
            res.position = tuple(res.position[i] + origin[i] for i in range(3))
        return res

    def trace(self, pos: Vec3, direction: Vec3) -> TraceResult:
        """Trace a world-space ray; the returned position is in world space too."""
        return self._world(trace_ray(self._local(pos), direction, self.black_hole.rs, **self._kwargs()))

    def trace_frame(self, camera: OrbitCamera, width: int, height: int,
                    fov_deg: float = 60.0) -> np.ndarray:
        """Outcome code per pixel, shape (height, width)."""
        dirs = camera.ray_directions(width, height, fov_deg)
        origins = np.tile(self._local(camera.position()), (len(dirs), 1))
        results = trace_batch(origins, dirs, self.black_hole.rs, **self._kwargs())
        codes = np.fromiter((res.outcome.code for res in results), dtype=np.int8, count=len(results))
        return codes.reshape(height, width)
