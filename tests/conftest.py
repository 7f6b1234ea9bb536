import importlib.util
from pathlib import Path

import pytest
from fastapi.testclient import TestClient
from spacetime_core.constants import GEOMETRIC_UNITS
from spacetime_core.models import BlackHole

ROOT = Path(__file__).resolve().parents[1]


@pytest.fixture
def unit_hole():
    # rs = 2GM/c^2 = 1 in geometric units
    return BlackHole(mass=0.5, constants=GEOMETRIC_UNITS)


def _load_service(name):
    path = ROOT / "services" / name / "app" / "main.py"
    spec = importlib.util.spec_from_file_location(name.replace("-", "_") + "_main", path)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


@pytest.fixture
def ray_api():
    return TestClient(_load_service("ray-api").app)


@pytest.fixture
def blackhole_api():
    return TestClient(_load_service("blackhole-api").app)
