import os
from dataclasses import dataclass

D_LAMBDA = 1e7
ESCAPE_R = 1e30
MAX_STEPS = 60000


@dataclass(frozen=True)
class TracerSettings:
    d_lambda: float = D_LAMBDA
    escape_radius: float = ESCAPE_R
    max_steps: int = MAX_STEPS
    method: str = "rk4"

    @classmethod
    def from_env(cls) -> "TracerSettings":
        return cls(
            d_lambda=float(os.getenv("BH_D_LAMBDA", D_LAMBDA)),
            escape_radius=float(os.getenv("BH_ESCAPE_RADIUS", ESCAPE_R)),
            max_steps=int(os.getenv("BH_MAX_STEPS", MAX_STEPS)),
            method=os.getenv("BH_INTEGRATOR", "rk4"),
        )
