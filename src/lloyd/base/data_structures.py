"""
Core data structures for the lloyd clustering engine.

These are plain value containers passed between the iteration controller,
the update strategies and the empty-cluster policies.
"""

from typing import Dict, Any
from dataclasses import dataclass, field
from enum import Enum
import torch
from torch import Tensor


class RunStatus(Enum):
    """States of the iteration controller."""

    INITIALIZED = 'initialized'
    ITERATING = 'iterating'
    CONVERGED = 'converged'
    ITERATION_LIMIT_REACHED = 'iteration_limit_reached'


@dataclass
class StepResult:
    """Output of a single UpdateStrategy.step call."""

    assignments: Tensor  # (n,) int64 center index per point
    centers: Tensor      # (k, d) recomputed centers
    counts: Tensor       # (k,) int64 points per center
    shift: float         # sum of per-center Euclidean displacement
    n_distance_calcs: int = 0

    def __post_init__(self):
        assert self.assignments.dim() == 1
        assert self.centers.dim() == 2
        assert self.counts.shape == (self.centers.shape[0],)


@dataclass
class PolicyOutcome:
    """Result of resolving empty clusters."""

    centers: Tensor
    assignments: Tensor
    centers_moved: bool = False
    n_removed: int = 0


@dataclass
class AlgorithmState:
    """Snapshot of one iteration, kept in the controller's history."""

    iteration: int
    n_clusters: int
    shift: float
    objective_value: float
    n_changed: int
    n_empty: int = 0
    metadata: Dict[str, Any] = field(default_factory=dict)


@dataclass
class RunResult:
    """Final output of a clustering run."""

    centers: Tensor       # (k, d)
    assignments: Tensor   # (n,)
    n_iter: int
    status: RunStatus
    inertia: float = float('nan')
    n_distance_calcs: int = 0

    @property
    def converged(self) -> bool:
        return self.status is RunStatus.CONVERGED

    @property
    def iteration_limit_reached(self) -> bool:
        return self.status is RunStatus.ITERATION_LIMIT_REACHED

    @property
    def n_clusters(self) -> int:
        return self.centers.shape[0]

    def counts(self) -> Tensor:
        """Number of points per cluster."""
        return torch.bincount(self.assignments, minlength=self.n_clusters)
