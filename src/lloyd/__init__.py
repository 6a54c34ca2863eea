"""
lloyd: exact k-means clustering with interchangeable update strategies.

This package implements Lloyd's algorithm with five update strategies that
always agree on the result and differ only in how many distances they
compute:
- naive
- Elkan (per-center lower bounds)
- Hamerly (single lower bound)
- dual-tree over kd-trees
- dual-tree over cover trees

Example usage:
    >>> import torch
    >>> from lloyd import KMeans
    >>>
    >>> X = torch.randn(1000, 10, dtype=torch.float64)
    >>>
    >>> kmeans = KMeans(n_clusters=5, algorithm='hamerly', random_state=0)
    >>> kmeans.fit(X)
    >>> labels = kmeans.labels_

Or through the run-configuration boundary:
    >>> from lloyd import KMeansConfig, run_kmeans
    >>> out = run_kmeans(KMeansConfig(input=X, clusters=5, labels_only=True))
    >>> out.output.shape, out.centroid.shape
    (torch.Size([1000, 1]), torch.Size([5, 10]))
"""

__version__ = '0.1.0'

from .base import (
    ConfigError,
    RunStatus,
    RunResult,
    StepResult
)
from .config import KMeansConfig, ALGORITHMS, DEFAULT_SHIFT_TOLERANCE
from .algorithms.kmeans import KMeans
from .engine import run_kmeans, KMeansOutput
from .updates import get_update_strategy
from .empty_clusters import get_empty_cluster_policy

__all__ = [
    # Algorithms
    'KMeans',

    # Engine boundary
    'KMeansConfig',
    'KMeansOutput',
    'run_kmeans',
    'ALGORITHMS',
    'DEFAULT_SHIFT_TOLERANCE',

    # Components
    'get_update_strategy',
    'get_empty_cluster_policy',

    # Core data structures
    'ConfigError',
    'RunStatus',
    'RunResult',
    'StepResult',

    # Version
    '__version__'
]
