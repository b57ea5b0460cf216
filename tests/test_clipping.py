"""Tests for integer path clipping."""

from acpc.clipping import (clean_polygon, clean_polygons, intersect, orientation, reverse_path, scale_from_int,
                           scale_to_int)
from acpc.geometry import Point

SQUARE = [(0, 0), (10, 0), (10, 10), (0, 10)]


class TestScaling:
    """Test conversion between float points and integer paths."""

    def test_scale_to_int_truncates(self):
        assert scale_to_int([Point(1.99, -1.99), Point(0.5, 2.0)], 1) == [(1, -1), (0, 2)]

    def test_scale_with_multiplier(self):
        assert scale_to_int([Point(0.5, -0.25)], 10_000_000) == [(5_000_000, -2_500_000)]

    def test_scale_from_int(self):
        assert scale_from_int([(5, -20)], 10) == [Point(0.5, -2.0)]


class TestOrientation:
    """Test the path orientation helpers."""

    def test_ccw(self):
        assert orientation(SQUARE)
        assert not orientation(reverse_path(SQUARE))

    def test_short_path(self):
        assert not orientation([(0, 0), (1, 1)])


class TestIntersect:
    """Test path intersection."""

    def test_overlapping_squares(self):
        result = intersect([SQUARE], [[(5, 5), (15, 5), (15, 15), (5, 15)]])
        assert len(result) == 1
        assert set(result[0]) == {(5, 5), (10, 5), (10, 10), (5, 10)}
        assert orientation(result[0])

    def test_clockwise_input(self):
        result = intersect([reverse_path(SQUARE)], [[(5, -5), (5, 15), (20, 15), (20, -5)]])
        assert set(result[0]) == {(5, 0), (10, 0), (10, 10), (5, 10)}

    def test_disjoint(self):
        assert intersect([SQUARE], [[(20, 20), (30, 20), (30, 30)]]) == []

    def test_empty_input(self):
        assert intersect([], [SQUARE]) == []
        assert intersect([SQUARE], [[(0, 0), (1, 1)]]) == []

    def test_contained(self):
        inner = [(2, 2), (4, 2), (4, 4), (2, 4)]
        result = intersect([SQUARE], [inner])
        assert set(result[0]) == set(inner)


class TestClean:
    """Test vertex cleaning."""

    def test_collinear_vertex_removed(self):
        result = clean_polygon([(0, 0), (5, 0), (10, 0), (10, 10), (0, 10)])
        assert set(result) == set(SQUARE)

    def test_close_vertex_merged(self):
        result = clean_polygon([(0, 0), (1, 0), (10, 0), (10, 10), (0, 10)])
        assert set(result) == set(SQUARE)

    def test_degenerate_path(self):
        assert clean_polygon([(0, 0), (1, 0), (0, 1)]) == []
        assert clean_polygon([(0, 0), (10, 0)]) == []

    def test_clean_polygons(self):
        """A smaller distance keeps the unit triangle."""
        result = clean_polygons([SQUARE, [(0, 0), (1, 0), (0, 1)]], distance=1)
        assert [len(path) for path in result] == [4, 3]
        assert clean_polygons([[(0, 0), (1, 0), (0, 1)]]) == [[]]
