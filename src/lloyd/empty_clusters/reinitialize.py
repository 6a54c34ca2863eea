"""
Default empty-cluster handling: re-seed each empty cluster with the point
that is currently worst served by its own center.
"""

import warnings
import torch
from torch import Tensor

from ..base.interfaces import EmptyClusterPolicy
from ..base.data_structures import PolicyOutcome
from ..utils.distances import paired_squared_distances


class ReinitializeEmpty(EmptyClusterPolicy):
    """Move each empty center onto the farthest point of a populated cluster.

    Empty clusters are processed in index order. For each one, the point
    with the largest squared distance to its assigned center, among clusters
    with more than one member, is moved into the empty cluster and becomes
    its center. The donor cluster's center is recomputed from its remaining
    members. No cluster is left empty.

    ``centers_moved`` is only set when some center actually changed
    position. Re-seeding onto a duplicate of the point already sitting there
    moves nothing and must not hold off convergence.
    """

    def handle(self, points: Tensor, centers: Tensor,
               assignments: Tensor) -> PolicyOutcome:
        n_clusters = centers.shape[0]
        counts = torch.bincount(assignments, minlength=n_clusters)
        empty = (counts == 0).nonzero().squeeze(1).tolist()
        if not empty:
            return PolicyOutcome(centers=centers, assignments=assignments)

        input_centers = centers
        centers = centers.clone()
        assignments = assignments.clone()
        distances = paired_squared_distances(points, centers[assignments])

        for j in empty:
            eligible = counts[assignments] > 1
            if not eligible.any():
                warnings.warn(f"No point available to re-seed empty cluster {j}")
                break
            masked = torch.where(eligible, distances, torch.full_like(distances, -1.0))
            p = int(torch.argmax(masked))
            donor = int(assignments[p])

            assignments[p] = j
            counts[donor] -= 1
            counts[j] = 1
            centers[j] = points[p]
            distances[p] = 0.0

            members = (assignments == donor).nonzero().squeeze(1)
            centers[donor] = points[members].mean(dim=0)
            distances[members] = paired_squared_distances(
                points[members], centers[donor].expand(members.numel(), -1)
            )

        return PolicyOutcome(centers=centers, assignments=assignments,
                             centers_moved=not torch.equal(centers, input_centers))
