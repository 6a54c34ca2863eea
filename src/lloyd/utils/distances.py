"""
Distance and centroid kernels shared by every update strategy.

All strategies must agree bit-for-bit on the distances they compare and on
the centers they produce, so the arithmetic lives here and nowhere else.
Ties between equally distant centers always resolve to the lowest index.
"""

from typing import Tuple
import torch
from torch import Tensor


# Slack applied whenever a cached bound is compared against another bound.
# A pair is only pruned when it is farther away by more than this margin.
BOUND_RTOL = 1e-9
BOUND_ATOL = 1e-12


def squared_distances(points: Tensor, centers: Tensor) -> Tensor:
    """Squared Euclidean distances between every point and every center.

    Args:
        points: (m, d) points
        centers: (k, d) centers

    Returns:
        (m, k) tensor of squared distances
    """
    diff = points.unsqueeze(1) - centers.unsqueeze(0)
    return torch.sum(diff * diff, dim=2)


def paired_squared_distances(points: Tensor, centers: Tensor) -> Tensor:
    """Squared distance between row i of points and row i of centers.

    Laid out like ``squared_distances`` with a single center per point so the
    two functions round identically.
    """
    diff = points.unsqueeze(1) - centers.unsqueeze(1)
    return torch.sum(diff * diff, dim=2).squeeze(1)


def nearest_centers(points: Tensor, centers: Tensor) -> Tuple[Tensor, Tensor]:
    """Index of and squared distance to the nearest center for each point."""
    distances = squared_distances(points, centers)
    min_distances, assignments = torch.min(distances, dim=1)
    return assignments, min_distances


def center_distances(centers: Tensor) -> Tensor:
    """(k, k) Euclidean distances between centers, diagonal set to +inf."""
    distances = torch.sqrt(squared_distances(centers, centers))
    distances.fill_diagonal_(float('inf'))
    return distances


def compute_centroids(points: Tensor, assignments: Tensor,
                      centers: Tensor) -> Tuple[Tensor, Tensor]:
    """Mean of the points assigned to each center.

    Centers that received no points keep their previous position.

    Args:
        points: (n, d) data points
        assignments: (n,) center index per point
        centers: (k, d) previous centers

    Returns:
        new_centers: (k, d) tensor
        counts: (k,) int64 tensor of cluster sizes
    """
    n_clusters = centers.shape[0]
    sums = torch.zeros_like(centers).index_add_(0, assignments, points)
    counts = torch.bincount(assignments, minlength=n_clusters)

    nonempty = counts > 0
    new_centers = centers.clone()
    new_centers[nonempty] = sums[nonempty] / counts[nonempty].unsqueeze(1).to(points.dtype)
    return new_centers, counts


def center_movement(old_centers: Tensor, new_centers: Tensor) -> Tensor:
    """(k,) Euclidean displacement of each center."""
    return torch.norm(new_centers - old_centers, dim=1)


def loosen(bound: Tensor) -> Tensor:
    """Inflate an upper bound by the pruning slack."""
    return bound * (1.0 + BOUND_RTOL) + BOUND_ATOL
