"""
Cover tree over a set of rows.

A. Beygelzimer, S. Kakade, J. Langford. Cover trees for nearest neighbor.
ICML 2006.

Built with the batch construction: a node at scale ``base**i`` keeps its own
point in a self-child that covers everything within ``base**(i-1)``, and the
remaining points are covered greedily by new children whose centers are more
than ``base**(i-1)`` apart. Each node stores its exact furthest-descendant
distance, which gives ball bounds for the dual-tree traversal.
"""

import math
from typing import List
import torch
from torch import Tensor

from ..base.interfaces import SpatialTree


class CoverTree(SpatialTree):
    """Cover tree node: a center row, a covering radius and its children."""

    def __init__(self, data: Tensor, point: int, members: Tensor,
                 leaf_size: int = 1, base: float = 2.0):
        """
        Args:
            data: (n, d) rows to index
            point: Row used as this node's center
            members: Rows covered by this node, including ``point``
            leaf_size: Maximum number of rows in a leaf
            base: Expansion constant between scales
        """
        self.data = data
        self.point = point
        self.base = base
        self._indices = members
        self._children: List['CoverTree'] = []

        self.center = data[point]
        distances = torch.norm(data[members] - self.center, dim=1)
        self.radius = distances.max().item()

        if members.numel() > leaf_size and self.radius > 0:
            scale = math.ceil(math.log(self.radius, base))
            child_radius = base ** (scale - 1)
            # Guard against rounding in the logarithm.
            while child_radius >= self.radius:
                child_radius /= base

            near = distances <= child_radius
            self._children.append(CoverTree(data, point, members[near], leaf_size, base))

            rest = members[~near]
            while rest.numel() > 0:
                q = int(rest[0])
                dq = torch.norm(data[rest] - data[q], dim=1)
                covered = dq <= child_radius
                self._children.append(CoverTree(data, q, rest[covered], leaf_size, base))
                rest = rest[~covered]

    @classmethod
    def build(cls, data: Tensor, leaf_size: int = 1, base: float = 2.0) -> 'CoverTree':
        """Build a tree over every row of ``data``, rooted at row 0."""
        members = torch.arange(data.shape[0], device=data.device)
        return cls(data, 0, members, leaf_size=leaf_size, base=base)

    @property
    def children(self) -> List['CoverTree']:
        return self._children

    @property
    def indices(self) -> Tensor:
        return self._indices

    def _center_distance(self, other: 'CoverTree') -> float:
        return torch.norm(self.center - other.center).item()

    def min_distance(self, other: 'CoverTree') -> float:
        return max(0.0, self._center_distance(other) - self.radius - other.radius)

    def max_distance(self, other: 'CoverTree') -> float:
        return self._center_distance(other) + self.radius + other.radius

    def __repr__(self) -> str:
        return (f"CoverTree(point={self.point}, radius={self.radius:.3f}, "
                f"n_points={self._indices.numel()}, n_children={len(self._children)})")
