import copy
import math
from contextlib import nullcontext
from enum import Enum

import numpy as np
import structlog

from acpc.adjacency_graph import AdjacencyGraph, create_adjacency_graph
from acpc.bounded_power_diagram import bounded_power_diagram
from acpc.geometry import (Point, add_points, distance, find_perp_direction, find_point_along_line,
                           flip_direction)
from acpc.parameters import AlgParameters
from acpc.polygon import Polygon
from acpc.trace import TraceWriter

logger = structlog.get_logger()

DEFAULT_CENTER_OFFSET = 10e-3
DEFAULT_CENTER_ATTEMPTS = 10


class PartitionStatus(Enum):
    UNINITIALIZED = "uninitialized"
    CENTERS_INITIALIZED = "centers_initialized"
    CONVERGING = "converging"
    CONVERGED = "converged"
    STEP_BUDGET_EXHAUSTED = "step_budget_exhausted"


class PartitionState:
    """
    Area-constrained partition of the prior's region into n_regions cells.

    Centers and power-diagram weights are driven by nested gradient descent: the
    inner loop adjusts weights until the weighted cell areas match desired_area,
    the outer loop moves centers toward the generalized centroids of their cells.
    """

    def __init__(self, n_regions, prior, desired_area=None, params=None):
        self.params = params if params is not None else AlgParameters()
        self._centers = []
        self._weights = []
        self._covering = []
        self.set_partition_variables(n_regions, prior, desired_area)

    @property
    def n_regions(self):
        return self._n_regions

    @property
    def prior(self):
        return self._prior

    @property
    def desired_area(self):
        return self._desired_area.copy()

    @property
    def centers(self):
        return list(self._centers)

    @property
    def weights(self):
        return list(self._weights)

    @property
    def covering(self):
        return list(self._covering)

    @property
    def eps(self):
        return self.params.robustness_constant

    def set_partition_variables(self, n_regions, prior, desired_area=None):
        if n_regions < 1:
            raise ValueError("NRegions must be at least 1")
        self._n_regions = n_regions
        self._prior = copy.copy(prior)
        self._prior.volume_lower_bound = self.params.volume_lower_bound
        self._desired_area = self._check_desired_area(desired_area)
        self._centers, self._weights, self._covering = [], [], []
        self.status = PartitionStatus.UNINITIALIZED

    def _check_desired_area(self, desired_area):
        n = self._n_regions
        lower_bound = self.params.volume_lower_bound
        if desired_area is None or len(desired_area) == 0:
            if lower_bound > 1.0 / n:
                raise ValueError("Volume_Lower_Bound is too large for the number of regions. Try making "
                                 "Volume_Lower_Bound smaller or decreasing the number of regions")
            return np.full(n, 1.0 / n)

        desired_area = np.asarray(desired_area, dtype=float)
        if desired_area.size != n:
            raise ValueError("The size of desired_area must equal NRegions")
        if np.any(desired_area <= lower_bound):
            raise ValueError("Entries of desired_area must be greater than Volume_Lower_Bound")
        total = desired_area.sum()
        if total != 1:
            if not math.isclose(total, 1.0, rel_tol=0, abs_tol=1e-12):
                logger.warning("desired areas not normalized, normalizing automatically", total=float(total))
            desired_area = desired_area / total
            if np.any(desired_area < lower_bound):
                raise ValueError("Normalized areas too small. Decrease the number of regions, increase desired "
                                 "areas, or decrease Volume_Lower_Bound")
        return desired_area

    def _try_default_centers(self, region, multiplier):
        vertices = region.vertices
        p1, p2 = vertices[0], vertices[1]
        perp = find_perp_direction(p1, p2, multiplier)
        spacing = 1.0 / (self._n_regions + 1)
        if not region.pnpoly(add_points(find_point_along_line(p1, p2, 0.5), perp)):
            perp = flip_direction(perp)
        centers = []
        for k in range(self._n_regions):
            center = add_points(find_point_along_line(p1, p2, spacing * (k + 1)), perp)
            if not region.pnpoly(center):
                return None
            centers.append(center)
        return centers

    def create_default_centers(self, region, initial_multiplier=DEFAULT_CENTER_OFFSET,
                               max_steps=DEFAULT_CENTER_ATTEMPTS):
        """
        Place the centers evenly along the first edge of region, offset toward the
        interior. The offset is halved until every center lies inside the region.
        """
        multiplier = initial_multiplier
        for _ in range(max_steps + 1):
            centers = self._try_default_centers(region, multiplier)
            if centers is not None:
                self._centers = centers
                return centers
            multiplier /= 2
        raise RuntimeError("Unable to Create Default Centers")

    def initialize(self, centers=None, weights=None):
        region = self._prior.region
        if region.is_empty:
            raise RuntimeError("Prior has not been initialized")

        if centers is None or len(centers) == 0:
            self.create_default_centers(region)
        elif len(centers) != self._n_regions:
            raise ValueError("Centers must be the same size as NRegions!")
        else:
            centers = [c if isinstance(c, Point) else Point(float(c[0]), float(c[1])) for c in centers]
            for center in centers:
                if not region.pnpoly(center):
                    raise ValueError("Centers must be located inside the region of interest")
            self._centers = centers

        if weights is None or len(weights) == 0:
            self._weights = [0.0] * self._n_regions
        elif len(weights) != self._n_regions:
            raise ValueError("Weights must be the same size as NRegions")
        else:
            self._weights = [float(w) for w in weights]

        self._covering = [Polygon(eps=self.eps) for _ in range(self._n_regions)]
        self.status = PartitionStatus.CENTERS_INITIALIZED
        logger.debug("partition initialized", n_regions=self._n_regions)

    def create_power_diagram(self):
        self._covering = bounded_power_diagram(self._centers, self._weights, self._prior.region, self.eps)
        return self.covering

    def create_adjacency_graph(self, graph=None):
        return create_adjacency_graph(self._covering, self.eps, graph)

    def calculate_volumes(self):
        return np.array([self._prior.calculate_weighted_area(cell) for cell in self._covering])

    def calculate_error(self, volumes):
        return float(np.sum((np.asarray(volumes) - self._desired_area) ** 2))

    def gradient_step_weights(self, volumes, graph):
        """One gradient step on the weights toward the desired areas."""
        if graph.n_regions != self._n_regions:
            raise ValueError("AdjacencyGraph has inconsistent sizes")
        n = self._n_regions
        ratio = self._desired_area / np.asarray(volumes, dtype=float)
        totals = np.zeros(n)
        for i, j, p0, p1 in graph.edges():
            edge_integral = self._prior.line_integral(self.params.line_int_step, p0, p1)
            term = (ratio[j] - ratio[i]) * edge_integral / distance(self._centers[i], self._centers[j])
            totals[i] += term
            totals[j] -= term

        step = self.params.weights_step
        for i in range(n):
            if self._covering[i].is_empty:
                # revive a vanished cell
                self._weights[i] += step * 2
            else:
                self._weights[i] -= totals[i] * step

    def gradient_step_centers(self, volumes, step=None):
        """
        Move every center toward the centroid of its cell. Returns the sum of the
        squared displacements to the centroids.
        """
        if step is None:
            step = self.params.centers_step
        elif step <= 0 or step > 1:
            raise ValueError("step must be between 0 and 1 (can be equal to 1, but not zero)")
        error = 0.0
        for i in range(self._n_regions):
            cell = self._covering[i]
            if cell.is_empty:
                continue
            centroid = self._prior.calculate_centroid(cell, volumes[i])
            error += distance(centroid, self._centers[i]) ** 2
            self._centers[i] = find_point_along_line(self._centers[i], centroid, step)
        return error

    def compute_partition(self, write_to_file=False, filename_partition="partition.txt",
                          filename_centers="centers.txt"):
        """
        Run the partitioning algorithm from the current centers and weights.
        Returns the final (centers, covering).
        """
        if self._prior.region.is_empty:
            raise RuntimeError("Prior has not been initialized")
        if not self._centers:
            raise RuntimeError("Centers and Weights have not been initialized")

        params = self.params
        writer = TraceWriter(filename_partition, filename_centers) if write_to_file else nullcontext()
        with writer as trace:
            def emit():
                if trace is not None:
                    trace.write(self._centers, self._covering)

            emit()
            self.create_power_diagram()
            emit()
            volumes = self.calculate_volumes()
            self.gradient_step_centers(volumes, step=1.0)
            self.create_power_diagram()
            emit()

            self.status = PartitionStatus.CONVERGING
            graph = AdjacencyGraph(self._n_regions)
            error = math.inf
            iterations = 0
            while error > params.convergence_criterion and iterations < params.max_iterations_centers:
                volumes = self.calculate_volumes()
                error_vol = self.calculate_error(volumes)
                count = 0
                while error_vol > params.volume_tolerance and count < params.max_iterations_volume:
                    self.create_adjacency_graph(graph)
                    self.gradient_step_weights(volumes, graph)
                    self.create_power_diagram()
                    emit()
                    volumes = self.calculate_volumes()
                    error_vol = self.calculate_error(volumes)
                    count += 1
                if error_vol > params.volume_tolerance:
                    logger.warning("volume iterations exhausted", iteration=iterations, volume_error=error_vol)

                error = self.gradient_step_centers(volumes)
                self.create_power_diagram()
                emit()
                iterations += 1
                logger.info("center step", iteration=iterations, volume_error=error_vol,
                            weight_steps=count, center_error=error)

            if error > params.convergence_criterion:
                self.status = PartitionStatus.STEP_BUDGET_EXHAUSTED
                logger.warning("center iterations exhausted", iterations=iterations, center_error=error)
            else:
                self.status = PartitionStatus.CONVERGED
            emit()
        return self.centers, self.covering
