"""
Integer polygon clipping on top of shapely.

Paths are lists of integer (x, y) vertices without a repeated closing vertex.
Floating point coordinates are scaled by mult (the reciprocal of the robustness
constant) and truncated toward zero before clipping; overlays run on a unit grid
so their output stays integral.
"""
import numpy as np
import shapely
from shapely.geometry import LinearRing
from shapely.geometry import Polygon as ShapelyPolygon
from shapely.geometry.polygon import orient

from acpc.geometry import Point

# Clipper's default clean distance (just over sqrt(2))
CLEAN_DISTANCE = 1.415


def scale_to_int(points, mult):
    coords = np.array([(p[0], p[1]) for p in points], dtype=float).reshape(-1, 2)
    return [tuple(v) for v in np.trunc(coords * mult).astype(np.int64).tolist()]


def scale_from_int(path, mult):
    return [Point(x / mult, y / mult) for x, y in path]


def orientation(path):
    """True when the path runs counter-clockwise (positive area)."""
    if len(path) < 3:
        return False
    return LinearRing(path).is_ccw


def reverse_path(path):
    return list(reversed(path))


def _to_geometry(paths):
    polygons = []
    for path in paths:
        if len(path) < 3:
            continue
        polygon = ShapelyPolygon(path)
        if polygon.is_valid:
            polygons.append(polygon)
            continue
        # keep only the areal pieces of a repaired polygon
        for part in shapely.get_parts(shapely.make_valid(polygon)):
            if part.geom_type in ("Polygon", "MultiPolygon") and part.area > 0:
                polygons.append(part)
    if not polygons:
        return ShapelyPolygon()
    return shapely.unary_union(polygons, grid_size=1.0)


def _to_paths(geometry):
    paths = []
    for part in shapely.get_parts(geometry):
        if part.geom_type != "Polygon" or part.is_empty or part.area == 0:
            continue
        ring = orient(part, sign=1.0).exterior.coords[:-1]
        paths.append((part.area, [(int(round(x)), int(round(y))) for x, y in ring]))
    paths.sort(key=lambda item: -item[0])
    return [path for _, path in paths]


def intersect(subject_paths, clip_paths):
    """Intersection of two sets of integer paths; the largest result comes first."""
    subject = _to_geometry(subject_paths)
    clip = _to_geometry(clip_paths)
    if subject.is_empty or clip.is_empty:
        return []
    return _to_paths(shapely.intersection(subject, clip, grid_size=1.0))


def clean_polygon(path, distance=CLEAN_DISTANCE):
    """Merge vertices closer than distance and drop collinear ones; degenerate results are empty."""
    if len(path) < 3:
        return []
    coords = np.asarray(path, dtype=float)
    keep = [coords[0]]
    for vertex in coords[1:]:
        if np.hypot(*(vertex - keep[-1])) >= distance:
            keep.append(vertex)
    while len(keep) > 1 and np.hypot(*(keep[-1] - keep[0])) < distance:
        keep.pop()
    if len(keep) < 3:
        return []

    polygon = ShapelyPolygon(keep).simplify(0, preserve_topology=False)
    if polygon.is_empty or polygon.geom_type != "Polygon" or polygon.area == 0:
        return []
    ring = polygon.exterior.coords[:-1]
    if len(ring) < 3:
        return []
    return [(int(round(x)), int(round(y))) for x, y in ring]


def clean_polygons(paths, distance=CLEAN_DISTANCE):
    return [clean_polygon(path, distance) for path in paths]
