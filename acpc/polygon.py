import math

import numpy as np
from shapely.geometry import Polygon as ShapelyPolygon

from acpc.geometry import DEFAULT_ROBUSTNESS_CONSTANT, Point, are_between, points_between, points_equal


class Polygon:
    """
    Convex polygon given by its vertices in counter-clockwise order (the first
    vertex is not repeated). A polygon without vertices is the "undefined region".
    """

    def __init__(self, vertices=(), eps=DEFAULT_ROBUSTNESS_CONSTANT):
        self.eps = eps
        self._vertices = []
        self._minx = self._miny = math.inf
        self._maxx = self._maxy = -math.inf
        self.set_vertices(vertices)

    def __repr__(self):
        return f"Polygon({[tuple(v) for v in self._vertices]})"

    def __len__(self):
        return len(self._vertices)

    @property
    def vertices(self):
        return list(self._vertices)

    @property
    def n_vertices(self):
        return len(self._vertices)

    @property
    def is_empty(self):
        return not self._vertices

    @property
    def extrema(self):
        """(minx, miny, maxx, maxy) of the vertices."""
        return self._minx, self._miny, self._maxx, self._maxy

    def set_vertices(self, vertices, get_extrema=True):
        """
        Replace the vertex loop. With get_extrema=False only the vertex count is
        checked and the cached bounding box is left as it was.
        """
        vertices = [v if isinstance(v, Point) else Point(float(v[0]), float(v[1])) for v in vertices]
        self._vertices = vertices
        if get_extrema:
            self._initialize()
        elif vertices and len(vertices) < 3:
            raise ValueError("List of vertices must contain at least 3 points")

    def _initialize(self):
        self._minx = self._miny = math.inf
        self._maxx = self._maxy = -math.inf
        vertices = self._vertices
        if not vertices:
            return
        if len(vertices) < 3:
            raise ValueError("List of vertices must contain at least 3 points")
        for i, v in enumerate(vertices):
            if math.isinf(v.x) or math.isinf(v.y):
                raise ValueError("Polygon vertices cannot be infinite")
            self._minx = min(self._minx, v.x)
            self._maxx = max(self._maxx, v.x)
            self._miny = min(self._miny, v.y)
            self._maxy = max(self._maxy, v.y)
            for w in vertices[i + 1:]:
                if points_equal(v, w):
                    raise ValueError("Polygon vertices must all be distinct")
        if self._minx == self._maxx or self._miny == self._maxy:
            raise ValueError("Polygon must have non-zero nominal area")

    def pnpoly(self, point):
        """Ray casting point-in-polygon test; points on an edge count as inside."""
        if not self._vertices:
            raise RuntimeError("Polygon vertices have not been initialized")
        inside = False
        v1 = self._vertices[-1]
        for v2 in self._vertices:
            if are_between(v1, v2, point, self.eps):
                return True
            if ((v1.y < point.y <= v2.y) or (point.y <= v1.y and v2.y < point.y)) and (v1.x <= point.x or v2.x <= point.x):
                if v1.x + (point.y - v1.y) * (v2.x - v1.x) / (v2.y - v1.y) < point.x:
                    inside = not inside
            v1 = v2
        return inside

    def contains_points(self, xs, ys):
        """Vectorised pnpoly over coordinate arrays; returns a boolean array shaped like xs."""
        if not self._vertices:
            raise RuntimeError("Polygon vertices have not been initialized")
        xs = np.asarray(xs, dtype=float)
        ys = np.asarray(ys, dtype=float)
        inside = np.zeros(xs.shape, dtype=bool)
        on_edge = np.zeros(xs.shape, dtype=bool)
        v1 = self._vertices[-1]
        for v2 in self._vertices:
            on_edge |= points_between(v1, v2, xs, ys, self.eps)
            crosses = (((v1.y < ys) & (ys <= v2.y)) | ((ys <= v1.y) & (v2.y < ys))) & ((v1.x <= xs) | (v2.x <= xs))
            if v2.y != v1.y:
                x_cross = v1.x + (ys - v1.y) * (v2.x - v1.x) / (v2.y - v1.y)
                inside ^= crosses & (x_cross < xs)
            v1 = v2
        return inside | on_edge

    def to_shapely(self):
        if not self._vertices:
            return ShapelyPolygon()
        return ShapelyPolygon([(v.x, v.y) for v in self._vertices])
