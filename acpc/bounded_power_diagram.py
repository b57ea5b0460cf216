import numpy as np
import structlog

from acpc.clipping import clean_polygon, clean_polygons, intersect, orientation, reverse_path, scale_from_int, scale_to_int
from acpc.geometry import (DEFAULT_ROBUSTNESS_CONSTANT, Point, add_points, distance, find_perp_direction,
                           find_point_along_line)
from acpc.polygon import Polygon

logger = structlog.get_logger()

MAX_BISECTOR_ITERATIONS = 10000


def clip_multiplier(eps):
    return int(round(1.0 / eps))


def power_distance(point, center, weight):
    return distance(point, center) ** 2 - weight


def find_bisector(center_i, center_j, weight_i, weight_j, eps=DEFAULT_ROBUSTNESS_CONSTANT,
                  max_iterations=MAX_BISECTOR_ITERATIONS):
    """
    Search the line center_i -> center_j for the point of equal power distance.
    Steps by a fixed increment while the sign of the error holds and halves it
    when the sign flips. Returns (point, iterations); the last estimate is returned
    if the search does not converge.
    """
    t = 0.5
    increment = 1.0
    test = find_point_along_line(center_i, center_j, t)
    value_i = power_distance(test, center_i, weight_i)
    value_j = power_distance(test, center_j, weight_j)
    if abs(value_j - value_i) < eps:
        return test, 0
    prev_i, prev_j = value_i, value_j
    t = t - increment if value_i > value_j else t + increment

    count = 0
    while count < max_iterations:
        test = find_point_along_line(center_i, center_j, t)
        value_i = power_distance(test, center_i, weight_i)
        value_j = power_distance(test, center_j, weight_j)
        if abs(value_j - value_i) < eps:
            break
        if value_j > value_i and prev_j > prev_i:
            t += increment
            prev_i, prev_j = value_i, value_j
        elif value_i > value_j and prev_i > prev_j:
            t -= increment
            prev_i, prev_j = value_i, value_j
        elif value_j > value_i and prev_i > prev_j:
            increment /= 2
            t += increment
        else:
            increment /= 2
            t -= increment
        count += 1

    if count >= max_iterations:
        logger.debug("bisector search did not converge", error=abs(value_j - value_i), t=t)
    return test, count


def half_plane(bisector, center_i, center_j, weight_i, weight_j, extrema, eps=DEFAULT_ROBUSTNESS_CONSTANT,
               iterations=0):
    """
    Quadrilateral covering the side of the power bisector that belongs to center_i,
    large enough to straddle the bounding box `extrema`. Returns None when the
    bisector direction is undefined (coincident centers).
    """
    minx, miny, maxx, maxy = extrema
    reference = center_i
    if distance(bisector, center_i) == 0:
        reference = center_j
    length = distance(bisector, reference)
    if length == 0:
        return None

    increment = 1.0
    while True:
        p1 = add_points(bisector, find_perp_direction(bisector, reference, length * increment))
        p2 = add_points(bisector, find_perp_direction(bisector, reference, -length * increment))
        if (p1.x < minx and p2.x > maxx) or (p1.x > maxx and p2.x < minx):
            low = min(miny, p1.y, p2.y) - 1
            high = max(maxy, p1.y, p2.y) + 1
            p3, p4 = Point(p1.x, low), Point(p2.x, low)
            p5, p6 = Point(p2.x, high), Point(p1.x, high)
            break
        if (p1.y < miny and p2.y > maxy) or (p1.y > maxy and p2.y < miny):
            low = min(minx, p1.x, p2.x) - 1
            high = max(maxx, p1.x, p2.x) + 1
            p3, p4 = Point(low, p1.y), Point(low, p2.y)
            p5, p6 = Point(high, p2.y), Point(high, p1.y)
            break
        increment *= 2
        if iterations > MAX_BISECTOR_ITERATIONS:
            increment *= 500

    # choose which half contains center_i, unless center_i lies outside its own cell
    lower = [p3, p4, p2, p1]
    probe = Polygon(eps=eps)
    probe.set_vertices(lower, get_extrema=False)
    which = probe.pnpoly(center_i)
    if -weight_i > distance(center_i, center_j) ** 2 - weight_j:
        which = not which
    return lower if which else [p5, p6, p1, p2]


def _to_polygon(points, eps):
    if len(points) < 3:
        return Polygon(eps=eps)
    try:
        return Polygon(points, eps=eps)
    except ValueError as exc:
        logger.debug("degenerate cell dropped", reason=str(exc), n_vertices=len(points))
        return Polygon(eps=eps)


def bounded_power_diagram(centers, weights, region, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """
    Compute power diagram cells for the weighted centers, clipped to region.
    Returns a list of Polygons of length = len(centers); cells that vanish are empty.
    """
    mult = clip_multiplier(eps)
    extrema = region.extrema
    subject = scale_to_int(region.vertices, mult)
    n = len(centers)
    covering = []
    for i in range(n):
        # the cell is the intersection of half-planes: for each other center j,
        # { x | pow(x, c_i) <= pow(x, c_j) }
        solution = [subject]
        for j in range(n):
            if j == i:
                continue
            bisector, count = find_bisector(centers[i], centers[j], weights[i], weights[j], eps)
            quad = half_plane(bisector, centers[i], centers[j], weights[i], weights[j], extrema, eps, count)
            if quad is None:
                logger.debug("coincident centers, half-plane skipped", i=i, j=j)
                continue
            clip = scale_to_int(quad, mult)
            if not orientation(clip):
                clip = reverse_path(clip)
            solution = [clean_polygon(path, 1) for path in intersect(solution, [clip])]
            solution = [path for path in solution if path]
            if not solution:
                break
        if solution:
            covering.append(_to_polygon(scale_from_int(solution[0], mult), eps))
        else:
            logger.debug("cell vanished", region=i)
            covering.append(Polygon(eps=eps))
    return clean_covering(covering, eps)


def clean_covering(covering, eps=DEFAULT_ROBUSTNESS_CONSTANT):
    """
    Snap vertices of different cells that are closer than the clip resolution onto
    each other, then clean every cell, so that neighbouring cells share vertices.
    """
    mult = clip_multiplier(eps)
    tolerance = 1.0 / mult
    n = len(covering)
    verts = [np.array([(v.x, v.y) for v in cell.vertices], dtype=float).reshape(-1, 2) for cell in covering]
    for i in range(n):
        vert_i = verts[i].copy()
        if not len(vert_i):
            continue
        for j in range(i, n):
            vert_j = verts[j]
            if not len(vert_j):
                continue
            close = np.hypot(vert_i[:, None, 0] - vert_j[None, :, 0], vert_i[:, None, 1] - vert_j[None, :, 1]) < tolerance
            hit = close.any(axis=0)
            if not hit.any():
                continue
            # the last close vertex of cell i wins
            last = len(vert_i) - 1 - np.argmax(close[::-1, :], axis=0)
            vert_j[hit] = vert_i[last[hit]]

    paths = clean_polygons([scale_to_int(v, mult) for v in verts])
    return [_to_polygon(scale_from_int(path, mult), eps) for path in paths]
