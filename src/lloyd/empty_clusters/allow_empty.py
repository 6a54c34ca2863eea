"""
Leave empty clusters in place.
"""

from torch import Tensor

from ..base.interfaces import EmptyClusterPolicy
from ..base.data_structures import PolicyOutcome


class AllowEmpty(EmptyClusterPolicy):
    """Keep empty clusters with their last center; the cluster count is fixed."""

    def handle(self, points: Tensor, centers: Tensor,
               assignments: Tensor) -> PolicyOutcome:
        return PolicyOutcome(centers=centers, assignments=assignments)
