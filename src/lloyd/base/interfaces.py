"""
Core interfaces for the lloyd clustering engine.

This module defines the abstract base classes that all pluggable components
implement, so the iteration controller can combine any update strategy with
any initializer and empty-cluster policy.
"""

from abc import ABC, abstractmethod
from typing import Optional, Dict, Any, List
import torch
from torch import Tensor

from .data_structures import StepResult, PolicyOutcome


class UpdateStrategy(ABC):
    """Abstract base class for one assign-then-update (Lloyd) step.

    Implementations differ only in how they avoid distance computations:
    - Naive: every point against every center
    - Elkan: per-point upper bound and per-center lower bounds
    - Hamerly: per-point upper bound and a single lower bound
    - Dual-tree: simultaneous traversal of a point tree and a center tree

    Given the same points and centers, every implementation must return the
    same assignments and the same centers. Any cached bounds belong to the
    instance and refer to the centers it was last called with.
    """

    name: str = ''

    @abstractmethod
    def step(self, points: Tensor, centers: Tensor,
             prev_assignments: Optional[Tensor] = None) -> StepResult:
        """Assign points to their nearest center and recompute the centers.

        Args:
            points: (n, d) data points
            centers: (k, d) current centers
            prev_assignments: (n,) assignments the caller currently holds,
                or None before the first step

        Returns:
            StepResult with new assignments, new centers, counts and the
            summed center displacement
        """
        pass

    def reset(self) -> None:
        """Drop any cached state."""
        pass


class InitializationStrategy(ABC):
    """Abstract base class for producing starting centers."""

    @abstractmethod
    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Produce initial centers.

        Args:
            points: (n, d) tensor of data points
            n_clusters: Number of centers to produce
            generator: Random generator owned by the current run

        Returns:
            (n_clusters, d) tensor of centers
        """
        pass


class EmptyClusterPolicy(ABC):
    """Abstract base class deciding what happens to clusters with no points."""

    @abstractmethod
    def handle(self, points: Tensor, centers: Tensor,
               assignments: Tensor) -> PolicyOutcome:
        """Resolve empty clusters.

        Args:
            points: (n, d) data points
            centers: (k, d) centers returned by the last step
            assignments: (n,) assignments returned by the last step

        Returns:
            PolicyOutcome with possibly modified centers and assignments
        """
        pass

    @property
    def changes_cluster_count(self) -> bool:
        """Whether ``handle`` may remove clusters.

        The controller drops the update strategy's cached bounds after such
        a policy removed any.
        """
        return False


class ConvergenceCriterion(ABC):
    """Abstract base class for convergence checking."""

    def __init__(self):
        self.history = []

    @abstractmethod
    def check(self, current_state: Dict[str, Any]) -> bool:
        """Check if the run has converged.

        Args:
            current_state: Dictionary containing current iteration state

        Returns:
            True if converged, False otherwise
        """
        pass

    def reset(self):
        """Reset convergence history."""
        self.history = []


class SpatialTree(ABC):
    """A node of a static space-partitioning tree.

    Trees are built once over a fixed set of rows and answer distance-bound
    queries between two nodes, which is all the dual-tree traversal needs.
    """

    @property
    @abstractmethod
    def children(self) -> List['SpatialTree']:
        pass

    @property
    @abstractmethod
    def indices(self) -> Tensor:
        """Row indices of every point held at or below this node."""
        pass

    @property
    def is_leaf(self) -> bool:
        return len(self.children) == 0

    @abstractmethod
    def min_distance(self, other: 'SpatialTree') -> float:
        """Lower bound on the distance between any point here and any in other."""
        pass

    @abstractmethod
    def max_distance(self, other: 'SpatialTree') -> float:
        """Upper bound on the distance between any point here and any in other."""
        pass
