import pytest

from acpc.density import DensityField
from acpc.geometry import Point
from acpc.polygon import Polygon


@pytest.fixture
def unit_square():
    return Polygon([Point(0, 0), Point(1, 0), Point(1, 1), Point(0, 1)])


@pytest.fixture
def uniform_field(unit_square):
    return DensityField.from_function(unit_square, 21, 21)


@pytest.fixture
def triangle():
    return Polygon([Point(0, 0), Point(4, 0), Point(0, 3)])
