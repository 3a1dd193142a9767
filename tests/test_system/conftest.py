import pytest

from hydrodash.system import WaterSystem
from hydrodash.testing import make_system


@pytest.fixture
def system() -> WaterSystem:
    # no glacier melt, so the dam follows the water input instead of saturating
    system = make_system(initial_glacier_volume=0.0)
    yield system
    system.destroy()


@pytest.fixture
def idle_system() -> WaterSystem:
    system = make_system(start=False)
    yield system
    system.destroy()
