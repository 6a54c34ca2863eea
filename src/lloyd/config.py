"""
Per-run configuration for the clustering engine.

A ``KMeansConfig`` is the whole contract between the engine and whatever
front end builds it: one value per run, no process-wide settings.
"""

from dataclasses import dataclass
from typing import Any, Optional, Union
import torch


ALGORITHMS = ('naive', 'elkan', 'hamerly', 'dualtree', 'dualtree-covertree')

DEFAULT_MAX_ITERATIONS = 1000
DEFAULT_SAMPLINGS = 100
DEFAULT_LEAF_SIZE = 8

# Centers are considered stable when their summed displacement over one
# iteration is at most this value. Lloyd iterations with consistent tie
# breaking reach an exact fixed point, so the default is a strict zero.
DEFAULT_SHIFT_TOLERANCE = 0.0


@dataclass
class KMeansConfig:
    """Parameters of a single clustering run.

    Attributes:
        input: (n, d) points as a tensor, ndarray or nested list. Required.
        clusters: Number of clusters C, 1 <= C <= n. Required.
        algorithm: One of ``ALGORITHMS``.
        max_iterations: Iteration cap; 0 means unlimited.
        initial_centroids: Optional (C, d) starting centers.
        refined_start: Use the refined-start initializer.
        percentage: Sub-sample fraction for refined start, in (0, 1].
        samplings: Number of refined-start sub-samples.
        allow_empty_clusters: Keep empty clusters as they are.
        kill_empty_clusters: Remove empty clusters.
        labels_only: Output only the label column.
        in_place: Append the label column to ``input`` itself. For an
            ndarray this reallocates its buffer, so views of ``input``
            taken earlier become invalid.
        tol: Convergence tolerance on the summed center shift.
        random_state: Seed for the run's random generator.
        verbose: 0 silent, 1 progress, 2 every iteration.
        device: Torch device for computation.
        leaf_size: Leaf capacity of the spatial trees.
    """

    input: Any = None
    clusters: Optional[int] = None
    algorithm: str = 'naive'
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    initial_centroids: Any = None
    refined_start: bool = False
    percentage: Optional[float] = None
    samplings: int = DEFAULT_SAMPLINGS
    allow_empty_clusters: bool = False
    kill_empty_clusters: bool = False
    labels_only: bool = False
    in_place: bool = False
    tol: float = DEFAULT_SHIFT_TOLERANCE
    random_state: Optional[int] = None
    verbose: int = 0
    device: Optional[Union[str, torch.device]] = None
    leaf_size: int = DEFAULT_LEAF_SIZE

    @property
    def empty_clusters(self) -> str:
        """Name of the empty-cluster policy selected by the flags."""
        if self.kill_empty_clusters:
            return 'kill'
        if self.allow_empty_clusters:
            return 'allow'
        return 'reinitialize'
