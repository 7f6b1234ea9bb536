import math
from dataclasses import dataclass

import numpy as np

from .models import Vec3

MIN_ELEVATION = 0.01


@dataclass
class OrbitCamera:
    """Camera orbiting the origin; elevation is the polar angle from +z."""
    radius: float = 1.67e11
    azimuth: float = 0.0
    elevation: float = 1.66
    min_radius: float = 1e10
    max_radius: float = 1e12

    def position(self) -> Vec3:
        el = min(max(self.elevation, MIN_ELEVATION), math.pi - MIN_ELEVATION)
        radius = min(max(self.radius, self.min_radius), self.max_radius)
        return (radius * math.sin(el) * math.cos(self.azimuth),
                radius * math.sin(el) * math.sin(self.azimuth),
                radius * math.cos(el))

    def basis(self):
        """(right, up, forward) unit vectors looking at the origin."""
        pos = np.array(self.position(), dtype=np.float64)
        forward = -pos / np.linalg.norm(pos)
        right = np.cross(forward, np.array([0.0, 0.0, 1.0]))
        rn = np.linalg.norm(right)
        if rn < 1e-6:
            right = np.array([1.0, 0.0, 0.0])
        else:
            right /= rn
        up = np.cross(right, forward)
        up /= np.linalg.norm(up)
        return right, up, forward

    def ray_directions(self, width: int, height: int, fov_deg: float = 60.0) -> np.ndarray:
        """Unit direction per pixel, row-major, shape (height * width, 3)."""
        if width <= 0 or height <= 0:
            raise ValueError("raster dimensions must be positive")
        right, up, forward = self.basis()
        tan_half = math.tan(math.radians(fov_deg) / 2.0)
        aspect = width / height

        py, px = np.mgrid[0:height, 0:width]
        u = ((px.ravel() + 0.5) / width * 2.0 - 1.0) * tan_half * aspect
        v = (1.0 - (py.ravel() + 0.5) / height * 2.0) * tan_half

        dirs = forward[None, :] + u[:, None] * right[None, :] + v[:, None] * up[None, :]
        dirs /= np.linalg.norm(dirs, axis=1, keepdims=True)
        return dirs
