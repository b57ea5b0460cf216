import math
from typing import NamedTuple

import numpy as np

# distances below this (relative for collinearity) are treated as zero
DEFAULT_ROBUSTNESS_CONSTANT = 1e-7


class Point(NamedTuple):
    """A point (or vector) in the plane. Point() is the undefined sentinel (inf, inf)."""
    x: float = math.inf
    y: float = math.inf

    @property
    def is_defined(self):
        return not (math.isinf(self.x) or math.isinf(self.y))


UNDEFINED = Point()


def points_equal(p1, p2):
    return p1.x == p2.x and p1.y == p2.y


def norm(p):
    return math.sqrt(p.x * p.x + p.y * p.y)


def distance(p1, p2):
    return math.sqrt((p1.x - p2.x) ** 2 + (p1.y - p2.y) ** 2)


def add_points(p1, p2):
    return Point(p1.x + p2.x, p1.y + p2.y)


def scale_point(p, factor):
    return Point(factor * p.x, factor * p.y)


def flip_direction(p):
    return Point(-p.x, -p.y)


def find_point_along_line(p1, p2, t):
    """Point at normalized position t on the line p1 -> p2 (t=0.5 is the midpoint)."""
    return Point(p1.x + (p2.x - p1.x) * t, p1.y + (p2.y - p1.y) * t)


def find_perp_direction(p1, p2, length):
    """Vector of the given length perpendicular to p1 -> p2 (zero vector if p1 == p2)."""
    d = distance(p1, p2)
    if d == 0:
        return Point(0.0, 0.0)
    return Point((p2.y - p1.y) / d * length, (p1.x - p2.x) / d * length)


def perp_distance_to_line(p1, p2, p3, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """Distance from p3 to the line through p1, p2."""
    # near horizontal / vertical lines fall back to the axis distance
    if abs(p2.y - p1.y) < eps:
        return abs(p3.y - p2.y)
    if abs(p2.x - p1.x) < eps:
        return abs(p3.x - p2.x)
    return abs((p2.y - p1.y) * p3.x - (p2.x - p1.x) * p3.y + p2.x * p1.y - p2.y * p1.x) / distance(p1, p2)


def are_collinear(p1, p2, p3, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """
    Numerical collinearity test. The perpendicular distance of p3 is measured
    relative to the longest pairwise distance, so the result does not depend on scale.
    """
    max_dist = max(distance(p1, p2), distance(p2, p3), distance(p1, p3))
    if max_dist == 0:
        return False
    return perp_distance_to_line(p1, p2, p3, eps) / max_dist < eps


def are_between(p1, p2, p3, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """True if p3 lies (numerically) on the segment p1 -> p2."""
    if not are_collinear(p1, p2, p3, eps):
        return False
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    if dx == 0 and dy == 0:
        return False
    t = ((p3.x - p1.x) * dx + (p3.y - p1.y) * dy) / (dx * dx + dy * dy)
    return 0 <= t <= 1


def find_collinear_intersection(p1, p2, p3, p4, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """
    Overlap of the collinear segments p1-p2 and p3-p4.

    Returns a list with 0, 1 or 2 end points. Candidate end points closer than
    eps to the one already found are dropped.
    """
    result = []
    if are_between(p1, p2, p3, eps):
        result.append(p3)
        if are_between(p1, p2, p4, eps):
            result.append(p4)
        elif are_between(p3, p4, p1, eps) and distance(p3, p1) > eps:
            result.append(p1)
        elif are_between(p3, p4, p2, eps) and distance(p3, p2) > eps:
            result.append(p2)
    elif are_between(p1, p2, p4, eps):
        result.append(p4)
        if are_between(p3, p4, p1, eps) and distance(p4, p1) > eps:
            result.append(p1)
        elif are_between(p3, p4, p2, eps) and distance(p2, p4) > eps:
            result.append(p2)
    elif are_between(p3, p4, p1, eps) and are_between(p3, p4, p2, eps):
        result.append(p1)
        result.append(p2)
    return result


def points_between(p1, p2, xs, ys, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """
    Vectorised are_between for arrays of test coordinates.
    Returns a boolean array shaped like xs.
    """
    xs = np.asarray(xs, dtype=float)
    ys = np.asarray(ys, dtype=float)
    dx = p2.x - p1.x
    dy = p2.y - p1.y
    seg = math.sqrt(dx * dx + dy * dy)
    if seg == 0:
        return np.zeros(xs.shape, dtype=bool)

    if abs(dy) < eps:
        perp = np.abs(ys - p2.y)
    elif abs(dx) < eps:
        perp = np.abs(xs - p2.x)
    else:
        perp = np.abs(dy * xs - dx * ys + p2.x * p1.y - p2.y * p1.x) / seg

    max_dist = np.maximum(seg, np.maximum(np.hypot(xs - p2.x, ys - p2.y), np.hypot(xs - p1.x, ys - p1.y)))
    collinear = perp / max_dist < eps

    t = ((xs - p1.x) * dx + (ys - p1.y) * dy) / (dx * dx + dy * dy)
    return collinear & (t >= 0) & (t <= 1)
