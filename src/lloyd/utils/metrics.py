"""
Clustering quality measures used for progress reporting and results.
"""

import torch
from torch import Tensor

from .distances import squared_distances


def inertia(X: Tensor, labels: Tensor, centers: Tensor) -> float:
    """Compute within-cluster sum of squared distances.

    Args:
        X: (n, d) data points
        labels: (n,) cluster labels
        centers: (k, d) cluster centers

    Returns:
        Sum of squared distances to assigned centers
    """
    diff = X - centers[labels]
    return torch.sum(diff * diff).item()


def score_samples(X: Tensor, centers: Tensor) -> Tensor:
    """Squared distance from each point to its nearest center."""
    return torch.min(squared_distances(X, centers), dim=1).values
