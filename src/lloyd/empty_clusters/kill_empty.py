"""
Remove empty clusters and renumber the survivors.
"""

import torch
from torch import Tensor

from ..base.interfaces import EmptyClusterPolicy
from ..base.data_structures import PolicyOutcome


class KillEmpty(EmptyClusterPolicy):
    """Drop every empty cluster.

    Remaining clusters keep their relative order and are renumbered
    contiguously from 0, so the run continues with fewer clusters.
    """

    @property
    def changes_cluster_count(self) -> bool:
        return True

    def handle(self, points: Tensor, centers: Tensor,
               assignments: Tensor) -> PolicyOutcome:
        counts = torch.bincount(assignments, minlength=centers.shape[0])
        keep = counts > 0
        n_removed = int((~keep).sum())
        if n_removed == 0:
            return PolicyOutcome(centers=centers, assignments=assignments)

        new_index = torch.cumsum(keep.long(), dim=0) - 1
        return PolicyOutcome(
            centers=centers[keep].clone(),
            assignments=new_index[assignments],
            n_removed=n_removed
        )
