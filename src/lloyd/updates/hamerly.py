"""
Hamerly's accelerated Lloyd step.

G. Hamerly. Making k-means even faster. SDM 2010.

Each point keeps only two bounds: an upper bound on the distance to its
assigned center and a lower bound on the distance to the second-closest
center. Cheaper to maintain than Elkan's k lower bounds, but a point that
fails the test is compared against every center.
"""

from typing import Optional
import warnings
import torch
from torch import Tensor

from ..base.interfaces import UpdateStrategy
from ..base.data_structures import StepResult
from ..utils.distances import (
    squared_distances, paired_squared_distances, center_distances,
    compute_centroids, center_movement, loosen
)


class HamerlyUpdate(UpdateStrategy):
    """Lloyd step pruned with one upper and one lower bound per point.

    Bounds follow the same discipline as ``ElkanUpdate``: they refer to the
    centers of the previous call and are shifted by center displacement.
    """

    name = 'hamerly'

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._points = None
        self._centers = None
        self._assignments = None
        self._upper = None
        self._lower = None

    def _bounds_valid_for(self, points: Tensor, centers: Tensor,
                          prev_assignments: Optional[Tensor]) -> bool:
        return (prev_assignments is not None
                and self._centers is not None
                and self._points is points
                and self._centers.shape == centers.shape)

    @staticmethod
    def _exact_rows(points: Tensor, centers: Tensor, rows: Tensor,
                    assignments: Tensor, upper: Tensor, lower: Tensor) -> int:
        """Compare ``rows`` against every center and reset their bounds."""
        sq = squared_distances(points[rows], centers)
        min_sq, nearest = torch.min(sq, dim=1)
        assignments[rows] = nearest
        upper[rows] = torch.sqrt(min_sq)
        if centers.shape[0] > 1:
            second_sq = torch.topk(sq, 2, dim=1, largest=False).values[:, 1]
            lower[rows] = torch.sqrt(second_sq)
        else:
            lower[rows] = float('inf')
        return sq.numel()

    @staticmethod
    def _max_other_movement(movement: Tensor, assignments: Tensor) -> Tensor:
        """Largest displacement among the centers a point is not assigned to."""
        if movement.shape[0] == 1:
            return torch.zeros(assignments.shape[0], dtype=movement.dtype,
                               device=movement.device)
        top = torch.topk(movement, 2).values
        furthest = torch.argmax(movement)
        return torch.where(assignments == furthest, top[1], top[0])

    def step(self, points: Tensor, centers: Tensor,
             prev_assignments: Optional[Tensor] = None) -> StepResult:
        n_points = points.shape[0]
        n_clusters = centers.shape[0]
        n_calcs = 0

        if self._bounds_valid_for(points, centers, prev_assignments):
            movement = center_movement(self._centers, centers)
            assignments = self._assignments.clone()
            upper = self._upper + movement[assignments]
            lower = torch.clamp(self._lower - self._max_other_movement(movement, assignments),
                                min=0.0)

            stale = (prev_assignments != assignments).nonzero().squeeze(1)
            if stale.numel() > 0:
                n_calcs += self._exact_rows(points, centers, stale, assignments, upper, lower)
        else:
            assignments = torch.zeros(n_points, dtype=torch.long, device=points.device)
            upper = torch.empty(n_points, dtype=points.dtype, device=points.device)
            lower = torch.empty(n_points, dtype=points.dtype, device=points.device)
            all_rows = torch.arange(n_points, device=points.device)
            n_calcs += self._exact_rows(points, centers, all_rows, assignments, upper, lower)

        cc = center_distances(centers)
        n_calcs += n_clusters * n_clusters
        s = 0.5 * cc.min(dim=1).values

        bound = torch.maximum(s[assignments], lower)
        rows = (loosen(upper) >= bound).nonzero().squeeze(1)

        if rows.numel() > 0:
            a = assignments[rows]
            d_sq = paired_squared_distances(points[rows], centers[a])
            n_calcs += rows.numel()
            exact = torch.sqrt(d_sq)
            violated = exact > loosen(upper[rows])
            if violated.any():
                warnings.warn(f"Hamerly bounds were stale for {int(violated.sum())} points; "
                              f"recomputing them exactly")
            upper[rows] = exact

            full = rows[(loosen(exact) >= bound[rows]) | violated]
            if full.numel() > 0:
                n_calcs += self._exact_rows(points, centers, full, assignments, upper, lower)

        new_centers, counts = compute_centroids(points, assignments, centers)
        shift = center_movement(centers, new_centers).sum().item()

        self._points = points
        self._centers = centers.clone()
        self._assignments = assignments.clone()
        self._upper = upper
        self._lower = lower

        return StepResult(
            assignments=assignments,
            centers=new_centers,
            counts=counts,
            shift=shift,
            n_distance_calcs=n_calcs
        )
