import numpy as np

from acpc.geometry import DEFAULT_ROBUSTNESS_CONSTANT, Point, are_collinear, find_collinear_intersection


class AdjacencyGraph:
    """
    Dual graph of a covering. Entry (i, j) holds the two end points of the edge
    shared by cells i and j; a missing end point is the undefined Point (inf, inf).
    The graph is symmetric: writing (i, j) also writes (j, i).
    """

    def __init__(self, n_regions):
        if n_regions < 0:
            raise ValueError("n_regions cannot be negative")
        self.n_regions = n_regions
        self._edges = np.full((n_regions, n_regions, 2, 2), np.inf)

    def __repr__(self):
        return f"AdjacencyGraph(n_regions={self.n_regions}, edges={len(self.edges())})"

    def _check_index(self, i, j):
        if not (0 <= i < self.n_regions and 0 <= j < self.n_regions):
            raise IndexError(f"region pair ({i}, {j}) out of range for {self.n_regions} regions")

    def __getitem__(self, key):
        i, j = key
        self._check_index(i, j)
        (x0, y0), (x1, y1) = self._edges[i, j]
        return Point(x0, y0), Point(x1, y1)

    def __setitem__(self, key, endpoints):
        i, j = key
        self._check_index(i, j)
        p0, p1 = endpoints
        self._edges[i, j] = self._edges[j, i] = ((p0.x, p0.y), (p1.x, p1.y))

    def shares_edge(self, i, j):
        self._check_index(i, j)
        return bool(np.isfinite(self._edges[i, j, 1]).all())

    def neighbors(self, i):
        return [j for j in range(self.n_regions) if j != i and self.shares_edge(i, j)]

    def edges(self):
        """(i, j, p0, p1) for every pair i < j with a shared edge."""
        result = []
        for i in range(self.n_regions):
            for j in range(i + 1, self.n_regions):
                if self.shares_edge(i, j):
                    p0, p1 = self[i, j]
                    result.append((i, j, p0, p1))
        return result

    def reset(self):
        self._edges.fill(np.inf)

    def copy(self):
        graph = AdjacencyGraph(self.n_regions)
        graph._edges = self._edges.copy()
        return graph


def create_adjacency_graph(covering, eps=DEFAULT_ROBUSTNESS_CONSTANT, graph=None):
    """
    Build the dual graph of a covering by comparing the edges of every pair of
    cells. The first pair of collinear edges with a two-point overlap is taken as
    the shared edge; convex cells of a power diagram share at most one.
    """
    n = len(covering)
    if graph is None:
        graph = AdjacencyGraph(n)
    elif graph.n_regions != n:
        raise ValueError("AdjacencyGraph has inconsistent sizes")
    graph.reset()
    undefined = Point()

    for i in range(n):
        vert_i = covering[i].vertices
        for j in range(i + 1, n):
            vert_j = covering[j].vertices
            found = False
            for k in range(len(vert_i)):
                pi1 = vert_i[k]
                pi2 = vert_i[(k + 1) % len(vert_i)]
                for p in range(len(vert_j)):
                    pj1 = vert_j[p]
                    pj2 = vert_j[(p + 1) % len(vert_j)]
                    if not (are_collinear(pi1, pi2, pj1, eps) and are_collinear(pi1, pi2, pj2, eps)):
                        continue
                    overlap = find_collinear_intersection(pi1, pi2, pj1, pj2, eps)
                    if not overlap:
                        graph[i, j] = (undefined, undefined)
                    elif len(overlap) == 1:
                        graph[i, j] = (overlap[0], undefined)
                    else:
                        graph[i, j] = (overlap[0], overlap[1])
                        found = True
                        break
                if found:
                    break
    return graph
