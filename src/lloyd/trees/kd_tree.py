"""
Binary space-partitioning tree with axis-aligned bounding boxes.
"""

from typing import List, Optional
import torch
from torch import Tensor

from ..base.interfaces import SpatialTree


class KDTree(SpatialTree):
    """kd-tree node holding a bounding box over a subset of rows.

    Nodes are split at the median of their widest dimension until they hold
    at most ``leaf_size`` rows or all their rows coincide.
    """

    def __init__(self, data: Tensor, leaf_size: int = 8,
                 indices: Optional[Tensor] = None):
        """
        Args:
            data: (n, d) rows to index; the tree keeps a reference, not a copy
            leaf_size: Maximum number of rows in a leaf
            indices: Rows covered by this node (all rows for the root)
        """
        if indices is None:
            indices = torch.arange(data.shape[0], device=data.device)

        self.data = data
        self.leaf_size = leaf_size
        self._indices = indices
        self._children: List['KDTree'] = []

        subset = data[indices]
        self.lo = subset.min(dim=0).values
        self.hi = subset.max(dim=0).values

        if indices.numel() > leaf_size:
            widths = self.hi - self.lo
            split_dim = int(torch.argmax(widths))
            if widths[split_dim] > 0:
                order = torch.argsort(subset[:, split_dim], stable=True)
                half = order.numel() // 2
                self._children = [
                    KDTree(data, leaf_size, indices[order[:half]]),
                    KDTree(data, leaf_size, indices[order[half:]])
                ]

    @classmethod
    def build(cls, data: Tensor, leaf_size: int = 8) -> 'KDTree':
        return cls(data, leaf_size=leaf_size)

    @property
    def children(self) -> List['KDTree']:
        return self._children

    @property
    def indices(self) -> Tensor:
        return self._indices

    def min_distance(self, other: 'KDTree') -> float:
        """Distance between the two boxes, zero if they overlap."""
        gap = torch.clamp(torch.maximum(other.lo - self.hi, self.lo - other.hi), min=0.0)
        return torch.sqrt(torch.sum(gap * gap)).item()

    def max_distance(self, other: 'KDTree') -> float:
        """Distance between the farthest corners of the two boxes."""
        span = torch.maximum(self.hi - other.lo, other.hi - self.lo)
        return torch.sqrt(torch.sum(span * span)).item()

    def __repr__(self) -> str:
        return f"KDTree(n_points={self._indices.numel()}, n_children={len(self._children)})"
