"""
Elkan's accelerated Lloyd step.

C. Elkan. Using the triangle inequality to accelerate k-means. ICML 2003.

Each point carries an upper bound on the distance to its assigned center and
a lower bound on the distance to every other center. When centers move, the
bounds are shifted by the movement instead of being recomputed, and a center
is only evaluated for a point when the bounds cannot rule it out.
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


class ElkanUpdate(UpdateStrategy):
    """Lloyd step pruned with one upper and k lower bounds per point.

    The bounds are valid for the centers passed to the previous ``step``.
    Whatever happens to the centers in between (a regular update, an
    empty-cluster relocation) is absorbed by shifting the bounds by the
    displacement of each center. Points whose assignment was changed by the
    caller are recomputed exactly, and a change in the number of centers
    discards all bounds.
    """

    name = 'elkan'

    def __init__(self):
        self.reset()

    def reset(self) -> None:
        self._points = None
        self._centers = None       # centers the bounds refer to
        self._assignments = None
        self._upper = None         # (n,) distance to assigned center
        self._lower = None         # (n, k) distance to each center

    def _bounds_valid_for(self, points: Tensor, centers: Tensor,
                          prev_assignments: Optional[Tensor]) -> bool:
        return (prev_assignments is not None
                and self._centers is not None
                and self._points is points
                and self._centers.shape == centers.shape)

    def _exact_rows(self, points: Tensor, centers: Tensor, rows: Tensor,
                    assignments: Tensor, upper: Tensor, lower: Tensor,
                    best_sq: Tensor, tight: Tensor) -> int:
        """Recompute assignment and all bounds for ``rows`` from scratch."""
        sq = squared_distances(points[rows], centers)
        min_sq, nearest = torch.min(sq, dim=1)
        assignments[rows] = nearest
        best_sq[rows] = min_sq
        upper[rows] = torch.sqrt(min_sq)
        lower[rows] = torch.sqrt(sq)
        tight[rows] = True
        return sq.numel()

    def step(self, points: Tensor, centers: Tensor,
             prev_assignments: Optional[Tensor] = None) -> StepResult:
        n_points = points.shape[0]
        n_clusters = centers.shape[0]
        n_calcs = 0

        best_sq = torch.full((n_points,), float('nan'), dtype=points.dtype, device=points.device)
        tight = torch.zeros(n_points, dtype=torch.bool, device=points.device)

        if self._bounds_valid_for(points, centers, prev_assignments):
            movement = center_movement(self._centers, centers)
            assignments = self._assignments.clone()
            upper = self._upper + movement[assignments]
            lower = torch.clamp(self._lower - movement.unsqueeze(0), min=0.0)

            stale = (prev_assignments != assignments).nonzero().squeeze(1)
            if stale.numel() > 0:
                n_calcs += self._exact_rows(points, centers, stale, assignments,
                                            upper, lower, best_sq, tight)
        else:
            assignments = torch.zeros(n_points, dtype=torch.long, device=points.device)
            upper = torch.empty(n_points, dtype=points.dtype, device=points.device)
            lower = torch.empty(n_points, n_clusters, dtype=points.dtype, device=points.device)
            all_rows = torch.arange(n_points, device=points.device)
            n_calcs += self._exact_rows(points, centers, all_rows, assignments,
                                        upper, lower, best_sq, tight)

        cc = center_distances(centers)
        n_calcs += n_clusters * n_clusters
        half_cc = 0.5 * cc
        s = half_cc.min(dim=1).values

        # Points whose assigned center is closer than half the distance to
        # any other center cannot change cluster.
        active = loosen(upper) >= s[assignments]
        stale_rows = []

        for j in range(n_clusters):
            candidates = (active
                          & (assignments != j)
                          & (loosen(upper) >= lower[:, j])
                          & (loosen(upper) >= half_cc[assignments, j]))
            rows = candidates.nonzero().squeeze(1)
            if rows.numel() == 0:
                continue

            loose_rows = rows[~tight[rows]]
            if loose_rows.numel() > 0:
                a = assignments[loose_rows]
                d_sq = paired_squared_distances(points[loose_rows], centers[a])
                n_calcs += loose_rows.numel()
                exact = torch.sqrt(d_sq)
                violated = exact > loosen(upper[loose_rows])
                if violated.any():
                    stale_rows.append(loose_rows[violated])
                upper[loose_rows] = exact
                lower[loose_rows, a] = exact
                best_sq[loose_rows] = d_sq
                tight[loose_rows] = True

                still = ((loosen(upper[rows]) >= lower[rows, j])
                         & (loosen(upper[rows]) >= half_cc[assignments[rows], j]))
                rows = rows[still]
                if rows.numel() == 0:
                    continue

            dj_sq = paired_squared_distances(points[rows], centers[j].expand(rows.numel(), -1))
            n_calcs += rows.numel()
            dj = torch.sqrt(dj_sq)
            violated = lower[rows, j] > loosen(dj)
            if violated.any():
                stale_rows.append(rows[violated])
            lower[rows, j] = dj

            better = (dj_sq < best_sq[rows]) | ((dj_sq == best_sq[rows]) & (j < assignments[rows]))
            if better.any():
                moved = rows[better]
                assignments[moved] = j
                upper[moved] = dj[better]
                best_sq[moved] = dj_sq[better]

        if stale_rows:
            stale = torch.unique(torch.cat(stale_rows))
            warnings.warn(f"Elkan bounds were stale for {stale.numel()} points; "
                          f"recomputing them exactly")
            n_calcs += self._exact_rows(points, centers, stale, assignments,
                                        upper, lower, best_sq, tight)

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
