"""
Naive Lloyd step: every point against every center.

This is the reference implementation the accelerated strategies are
validated against.
"""

from typing import Optional
from torch import Tensor

from ..base.interfaces import UpdateStrategy
from ..base.data_structures import StepResult
from ..utils.distances import nearest_centers, compute_centroids, center_movement


class NaiveUpdate(UpdateStrategy):
    """Brute-force assignment in O(n * k * d) per step. Keeps no state."""

    name = 'naive'

    def step(self, points: Tensor, centers: Tensor,
             prev_assignments: Optional[Tensor] = None) -> StepResult:
        """Assign every point to its nearest center and recompute means.

        Args:
            points: (n, d) data points
            centers: (k, d) current centers
            prev_assignments: Ignored

        Returns:
            StepResult
        """
        assignments, _ = nearest_centers(points, centers)
        new_centers, counts = compute_centroids(points, assignments, centers)
        shift = center_movement(centers, new_centers).sum().item()

        return StepResult(
            assignments=assignments,
            centers=new_centers,
            counts=counts,
            shift=shift,
            n_distance_calcs=points.shape[0] * centers.shape[0]
        )
