import matplotlib.pyplot as plt
import numpy as np


def plot_partition(centers, covering, region=None, ax=None, centroids=None):
    """
    Draw the covering (dashed cell outlines), the region outline, the centers and,
    optionally, the cell centroids. Returns the matplotlib axis.
    """
    if ax is None:
        _, ax = plt.subplots(figsize=(8, 8))
    # plot region
    if region is not None and not region.is_empty:
        xs, ys = region.to_shapely().exterior.xy
        ax.plot(xs, ys, 'k-', linewidth=1.2)
    # plot cells
    for cell in covering:
        if not cell.is_empty:
            xs, ys = cell.to_shapely().exterior.xy
            ax.plot(xs, ys, 'k--', linewidth=0.7)
    pts = np.array([(c.x, c.y) for c in centers], dtype=float).reshape(-1, 2)
    ax.scatter(pts[:, 0], pts[:, 1], marker='o', label='centers')
    if centroids is not None:
        cpts = np.array([(c.x, c.y) for c in centroids], dtype=float).reshape(-1, 2)
        ax.scatter(cpts[:, 0], cpts[:, 1], marker='*', s=120, c='r', label='centroids')
    ax.set_aspect('equal', adjustable='box')
    ax.legend()
    return ax
