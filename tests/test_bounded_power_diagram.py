"""Tests for the power bisector search and the clipped power diagram."""

import pytest

from acpc.bounded_power_diagram import bounded_power_diagram, find_bisector, half_plane, power_distance
from acpc.geometry import Point, distance
from acpc.polygon import Polygon

EPS = 1e-7


class TestBisector:
    """Test the step-halving bisector search."""

    def test_equal_weights_midpoint(self):
        point, count = find_bisector(Point(0, 0), Point(2, 2), 0.0, 0.0)
        assert point == Point(1, 1)
        assert count == 0

    @pytest.mark.parametrize("wi,wj", [(0.5, 0.1), (0.0, 0.3), (-0.2, 0.4), (1.5, 0.0)])
    def test_matches_closed_form(self, wi, wj):
        ci, cj = Point(0, 0), Point(2, 0)
        point, _ = find_bisector(ci, cj, wi, wj)
        t = 0.5 + (wi - wj) / (2 * distance(ci, cj) ** 2)
        assert point.x == pytest.approx(2 * t, abs=1e-6)
        assert point.y == pytest.approx(0.0)
        assert abs(power_distance(point, ci, wi) - power_distance(point, cj, wj)) < EPS

    def test_iteration_cap(self):
        """The last estimate is returned when the search runs out of iterations."""
        point, count = find_bisector(Point(0, 0), Point(1, 0), 0.0, 0.123, max_iterations=3)
        assert count == 3
        assert point.is_defined


class TestHalfPlane:
    """Test the half-plane quadrilateral."""

    def test_contains_own_center(self):
        ci, cj = Point(0.25, 0.5), Point(0.75, 0.5)
        quad = half_plane(Point(0.5, 0.5), ci, cj, 0.0, 0.0, (0, 0, 1, 1), EPS)
        cell = Polygon(quad)
        assert cell.pnpoly(ci)
        assert not cell.pnpoly(cj)
        minx, miny, maxx, maxy = cell.extrema
        assert miny < 0 and maxy > 1
        assert maxx == pytest.approx(0.5)

    def test_coincident_centers(self):
        c = Point(0.5, 0.5)
        assert half_plane(c, c, c, 0.0, 0.0, (0, 0, 1, 1), EPS) is None


def cell_x_range(cell):
    minx, _, maxx, _ = cell.extrema
    return minx, maxx


class TestBoundedPowerDiagram:
    """Test the clipped diagram on the unit square."""

    def test_voronoi_split(self, unit_square):
        covering = bounded_power_diagram([Point(0.25, 0.5), Point(0.75, 0.5)], [0.0, 0.0], unit_square)
        assert len(covering) == 2
        assert cell_x_range(covering[0]) == (0.0, 0.5)
        assert cell_x_range(covering[1]) == (0.5, 1.0)

    def test_weights_shift_boundary(self, unit_square):
        covering = bounded_power_diagram([Point(0.25, 0.5), Point(0.75, 0.5)], [0.1, 0.0], unit_square)
        _, maxx = cell_x_range(covering[0])
        assert maxx == pytest.approx(0.6, abs=1e-6)

    def test_quadrants(self, unit_square, uniform_field):
        centers = [Point(0.25, 0.25), Point(0.75, 0.25), Point(0.75, 0.75), Point(0.25, 0.75)]
        covering = bounded_power_diagram(centers, [0.0] * 4, unit_square)
        for center, cell in zip(centers, covering):
            assert cell.pnpoly(center)
            assert cell.to_shapely().area == pytest.approx(0.25, abs=1e-6)
            # the diagonal bisector may shave the inner corner grid point
            assert uniform_field.calculate_weighted_area(cell) == pytest.approx(0.25, abs=3e-3)

    def test_cells_cover_region(self, unit_square, uniform_field):
        centers = [Point(0.2, 0.3), Point(0.7, 0.2), Point(0.5, 0.8)]
        covering = bounded_power_diagram(centers, [0.01, -0.02, 0.03], unit_square)
        total = sum(cell.to_shapely().area for cell in covering)
        assert total == pytest.approx(1.0, abs=1e-5)

    def test_dominant_weight_swallows_neighbour(self, unit_square, uniform_field):
        """A center whose weight puts it outside its own cell ends up with no area."""
        covering = bounded_power_diagram([Point(0.25, 0.5), Point(0.75, 0.5)], [0.0, 0.5], unit_square)
        assert uniform_field.calculate_weighted_area(covering[0]) < 1e-3
        assert uniform_field.calculate_weighted_area(covering[1]) == pytest.approx(1.0)

    def test_single_center(self, unit_square):
        covering = bounded_power_diagram([Point(0.5, 0.5)], [0.0], unit_square)
        assert covering[0].extrema == (0.0, 0.0, 1.0, 1.0)
