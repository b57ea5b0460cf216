from dataclasses import dataclass

import numpy as np
import structlog
from scipy.integrate import trapezoid
from scipy.interpolate import RegularGridInterpolator

from acpc.geometry import Point, distance
from acpc.polygon import Polygon

logger = structlog.get_logger()


def phi_uniform(xy):
    # uniform density (constant)
    return 1.0


@dataclass
class IntegralTable:
    """
    Per-cell values used to evaluate area integrals without quadrature.

    Cell (i, j) spans grid columns i, i+1 and rows j, j+1. On it the density is
    the bilinear patch a*x + b*y + c*x*y + d. total, total_x and total_y hold the
    integrals of f, x*f and y*f over the cell (normalized once preprocessing is done).
    """
    a: np.ndarray
    b: np.ndarray
    c: np.ndarray
    d: np.ndarray
    total: np.ndarray
    total_x: np.ndarray
    total_y: np.ndarray
    unweighted_area: float = 0.0


class DensityField:
    """
    Density over a convex region, sampled on a regular nx x ny grid spanning the
    region's bounding box. values[ny*i + j] is the sample at grid column i, row j.
    """

    def __init__(self, region=None, nx=0, ny=0, values=None, volume_lower_bound=0.0):
        self.volume_lower_bound = volume_lower_bound
        self.set_new_region(region if region is not None else Polygon(), nx, ny, values)

    @classmethod
    def from_function(cls, region, nx, ny, phi=phi_uniform, volume_lower_bound=0.0):
        """Sample the callable phi(xy) at every grid point of region's bounding box."""
        minx, miny, maxx, maxy = region.extrema
        xs = np.linspace(minx, maxx, nx)
        ys = np.linspace(miny, maxy, ny)
        values = [phi(np.array([x, y])) for x in xs for y in ys]
        return cls(region, nx, ny, values, volume_lower_bound)

    @property
    def region(self):
        return self._region

    @property
    def nx(self):
        return self._nx

    @property
    def ny(self):
        return self._ny

    @property
    def values(self):
        return self._values.copy()

    @property
    def is_set(self):
        return self._values.size > 0

    @property
    def extrema(self):
        return self._minx, self._miny, self._maxx, self._maxy

    @property
    def grid_in_region(self):
        return self._grid_in_region.copy()

    @property
    def integral(self):
        return self._integral

    def set_new_region(self, region, nx=0, ny=0, values=None):
        self._region = region
        self._minx, self._miny, self._maxx, self._maxy = region.extrema
        self.set_parameters(nx, ny, values)

    def set_parameters(self, nx, ny, values=None):
        values = np.asarray([] if values is None else values, dtype=float).ravel()
        if self._region.is_empty or nx == 0 or ny == 0:
            nx, ny, values = 0, 0, np.array([], dtype=float)
        elif nx == 1 or ny == 1:
            raise ValueError("Nx and Ny must be at least 2 to define grid spacing")
        elif nx * ny != values.size:
            raise ValueError("The size of Values must be equal to Nx*Ny")

        self._nx, self._ny = nx, ny
        self._values = values
        self._interpolator = None
        self._grid_in_region = np.zeros((nx, ny), dtype=bool)
        self._integral = None
        if nx:
            self._dx = (self._maxx - self._minx) / (nx - 1)
            self._dy = (self._maxy - self._miny) / (ny - 1)
            self._grid_x = self._minx + np.arange(nx) * self._dx
            self._grid_y = self._miny + np.arange(ny) * self._dy
        else:
            self._dx = self._dy = 0.0
            self._grid_x = self._grid_y = np.array([], dtype=float)

        if values.size:
            self._preprocess_integral()

    def convert_index_to_world(self, index):
        i, j = divmod(index, self._ny)
        return Point(self._minx + i * self._dx, self._miny + j * self._dy)

    def _preprocess_integral(self):
        self._create_integral_coefficients()
        total = self._create_integral_vector()
        self._normalize(total)

    def _create_integral_coefficients(self):
        v = self._values.reshape(self._nx, self._ny)
        v00, v10, v01, v11 = v[:-1, :-1], v[1:, :-1], v[:-1, 1:], v[1:, 1:]
        x0 = self._grid_x[:-1, None]
        y0 = self._grid_y[None, :-1]

        gamma = (v11 - v10 - v01 + v00) / (self._dx * self._dy)
        eta = (v10 - v00) / self._dx
        xi = (v01 - v00) / self._dy
        a = -gamma * y0 + eta
        b = -gamma * x0 + xi
        d = x0 * y0 * gamma - y0 * xi - x0 * eta + v00
        self._integral = IntegralTable(a=a, b=b, c=gamma, d=d, total=None, total_x=None, total_y=None)

        xx, yy = np.meshgrid(self._grid_x, self._grid_y, indexing="ij")
        self._grid_in_region = self._region.contains_points(xx, yy)

    def _create_integral_vector(self):
        table = self._integral
        dx, dy = self._dx, self._dy
        x0 = self._grid_x[:-1, None]
        x1 = x0 + dx
        y0 = self._grid_y[None, :-1]
        y1 = y0 + dy
        # antiderivative differences over each cell
        sx2 = x1 * x1 - x0 * x0
        sx3 = x1 ** 3 - x0 ** 3
        sy2 = y1 * y1 - y0 * y0
        sy3 = y1 ** 3 - y0 ** 3

        table.total = dy * dx * table.d + dy * sx2 / 2 * table.a + dx * sy2 / 2 * table.b + sy2 * sx2 / 4 * table.c
        table.total_x = dy * sx2 * table.d / 2 + dy * sx3 * table.a / 3 + sx2 * sy2 / 4 * table.b + sy2 * sx3 / 6 * table.c
        table.total_y = sy2 * dx * table.d / 2 + sy2 * sx2 / 4 * table.a + dx * sy3 / 3 * table.b + sy3 * sx2 / 6 * table.c

        cells = _cells_from_grid(self._grid_in_region)
        table.unweighted_area = float(np.count_nonzero(cells)) * dx * dy
        return float(table.total[cells].sum())

    def _normalize(self, total):
        table = self._integral
        if total == 0:
            if table.unweighted_area == 0:
                raise ValueError("Density grid is too coarse: no grid cell lies inside the region")
            logger.warning("density values do not have sufficient support, treated as uniform",
                           unweighted_area=table.unweighted_area)
            self.set_parameters(self._nx, self._ny, np.full(self._nx * self._ny, 1.0 / table.unweighted_area))
            return
        table.total = table.total / total
        table.total_x = table.total_x / total
        table.total_y = table.total_y / total
        self._values = self._values / total

    def grid_in_polygon(self, polygon):
        """Grid points inside polygon, pruned by its bounding box. Returns a fresh (nx, ny) array."""
        inside = np.zeros((self._nx, self._ny), dtype=bool)
        minx, miny, maxx, maxy = polygon.extrema
        eps = polygon.eps
        cols = (self._grid_x >= minx - eps) & (self._grid_x <= maxx + eps)
        rows = (self._grid_y >= miny - eps) & (self._grid_y <= maxy + eps)
        if not cols.any() or not rows.any():
            return inside
        xx, yy = np.meshgrid(self._grid_x[cols], self._grid_y[rows], indexing="ij")
        inside[np.ix_(cols, rows)] = polygon.contains_points(xx, yy)
        return inside

    def _require_values(self):
        if not self.is_set:
            raise RuntimeError("Values have not been set!")

    def calculate_weighted_area(self, polygon):
        """Integral of the density over the grid cells lying entirely inside polygon."""
        self._require_values()
        if polygon.is_empty:
            return self.volume_lower_bound
        cells = _cells_from_grid(self.grid_in_polygon(polygon))
        area = float(self._integral.total[cells].sum())
        return max(area, self.volume_lower_bound)

    def calculate_centroid(self, polygon, volume=None):
        """
        Density-weighted centroid of polygon. An empty polygon gives the origin; a
        polygon whose weighted area is at or below the lower bound gives the lower
        corner of its bounding box.
        """
        self._require_values()
        if polygon.is_empty:
            return Point(0.0, 0.0)
        if volume is None:
            volume = self.calculate_weighted_area(polygon)
        if volume <= self.volume_lower_bound:
            minx, miny, _, _ = polygon.extrema
            return Point(minx, miny)
        cells = _cells_from_grid(self.grid_in_polygon(polygon))
        sum_x = float(self._integral.total_x[cells].sum())
        sum_y = float(self._integral.total_y[cells].sum())
        return Point(sum_x / volume, sum_y / volume)

    def _get_interpolator(self):
        if self._interpolator is None:
            self._interpolator = RegularGridInterpolator(
                (self._grid_x, self._grid_y), self._values.reshape(self._nx, self._ny),
                method="linear", bounds_error=False, fill_value=None)
        return self._interpolator

    def interpolate_value(self, point):
        """Bilinear interpolation of the samples at point."""
        self._require_values()
        return float(self._get_interpolator()([[point.x, point.y]])[0])

    def line_integral(self, spacing, p1, p2):
        """Trapezoid-rule integral of the density along p1 -> p2 at normalized step spacing."""
        self._require_values()
        if spacing <= 0 or spacing > 1:
            raise ValueError("Spacing cannot be less than or equal to 0 or greater than 1")
        n_steps = int(np.ceil(1.0 / spacing - 1e-9))
        t = np.minimum(np.arange(n_steps + 1) * spacing, 1.0)
        t[-1] = 1.0
        xs = p1.x + (p2.x - p1.x) * t
        ys = p1.y + (p2.y - p1.y) * t
        samples = self._get_interpolator()(np.column_stack([xs, ys]))
        return float(trapezoid(samples, t)) * distance(p1, p2)


def _cells_from_grid(inside):
    # a cell counts only when all four of its corners are inside
    return inside[:-1, :-1] & inside[1:, :-1] & inside[:-1, 1:] & inside[1:, 1:]
