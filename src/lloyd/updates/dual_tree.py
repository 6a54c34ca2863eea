"""
Dual-tree Lloyd step.

The points and the centers are both indexed by a spatial tree. The two trees
are walked together: for a node of points, any node of centers whose closest
possible distance exceeds the farthest possible distance to some other node
of centers cannot hold the nearest center of any of those points and is
dropped. Leaves of the point tree are then resolved exactly against the
centers that survived.
"""

from typing import List, Optional
import warnings
import torch
from torch import Tensor

from ..base.interfaces import UpdateStrategy, SpatialTree
from ..base.data_structures import StepResult
from ..base.errors import AlgorithmInvariantViolation, ConfigError
from ..trees import TREE_TYPES
from ..utils.distances import (
    BOUND_RTOL, BOUND_ATOL, squared_distances, nearest_centers,
    compute_centroids, center_movement
)


class DualTreeUpdate(UpdateStrategy):
    """Exact Lloyd step by simultaneous traversal of a point and a center tree.

    Args:
        tree: 'kd' for a kd-tree with bounding boxes, 'cover' for a cover
            tree with ball bounds
        leaf_size: Leaf capacity of both trees

    The point tree is built on the first call and reused as long as the same
    point tensor is passed in. The center tree is rebuilt on every call since
    centers move between steps, so no pruning state outlives a step.
    """

    def __init__(self, tree: str = 'kd', leaf_size: int = 8):
        if tree not in TREE_TYPES:
            raise ConfigError(f"Unknown tree type '{tree}'")
        self.tree = tree
        self.tree_type = TREE_TYPES[tree]
        self.leaf_size = leaf_size
        self.name = 'dualtree' if tree == 'kd' else 'dualtree-covertree'
        self.reset()

    def reset(self) -> None:
        self._points = None
        self._point_tree = None
        self._n_calcs = 0

    def step(self, points: Tensor, centers: Tensor,
             prev_assignments: Optional[Tensor] = None) -> StepResult:
        if self._points is not points:
            self._points = points
            self._point_tree = self.tree_type.build(points, leaf_size=self.leaf_size)

        center_tree = self.tree_type.build(centers, leaf_size=self.leaf_size)
        assignments = torch.empty(points.shape[0], dtype=torch.long, device=points.device)
        self._n_calcs = 0

        self._traverse(points, centers, self._point_tree, [center_tree], assignments)

        new_centers, counts = compute_centroids(points, assignments, centers)
        shift = center_movement(centers, new_centers).sum().item()

        return StepResult(
            assignments=assignments,
            centers=new_centers,
            counts=counts,
            shift=shift,
            n_distance_calcs=self._n_calcs
        )

    def _prune(self, query: SpatialTree, references: List[SpatialTree]) -> List[SpatialTree]:
        """Drop reference nodes that cannot contain the nearest center."""
        bounds = [(ref.min_distance(query), ref.max_distance(query)) for ref in references]
        self._n_calcs += 2 * len(references)
        best_max = min(upper for _, upper in bounds)
        cutoff = best_max * (1.0 + BOUND_RTOL) + BOUND_ATOL
        return [ref for ref, (lower, _) in zip(references, bounds) if lower <= cutoff]

    @staticmethod
    def _expand(references: List[SpatialTree]) -> List[SpatialTree]:
        expanded = []
        for ref in references:
            if ref.is_leaf:
                expanded.append(ref)
            else:
                expanded.extend(ref.children)
        return expanded

    def _traverse(self, points: Tensor, centers: Tensor, query: SpatialTree,
                  references: List[SpatialTree], assignments: Tensor) -> None:
        references = self._prune(query, references)

        if not query.is_leaf:
            references = self._expand(references)
            for child in query.children:
                self._traverse(points, centers, child, references, assignments)
            return

        while not all(ref.is_leaf for ref in references):
            references = self._prune(query, self._expand(references))

        try:
            self._assign_leaf(points, centers, query, references, assignments)
        except AlgorithmInvariantViolation as e:
            warnings.warn(f"{e}; falling back to exact assignment for {query.indices.numel()} points")
            rows = query.indices
            nearest, _ = nearest_centers(points[rows], centers)
            assignments[rows] = nearest
            self._n_calcs += rows.numel() * centers.shape[0]

    def _assign_leaf(self, points: Tensor, centers: Tensor, query: SpatialTree,
                     references: List[SpatialTree], assignments: Tensor) -> None:
        """Resolve a leaf of points against the surviving centers exactly."""
        if not references:
            raise AlgorithmInvariantViolation("Dual-tree traversal pruned every center")

        # Sorted candidates keep ties resolving to the lowest center index.
        candidates = torch.sort(torch.cat([ref.indices for ref in references])).values
        if candidates.numel() != torch.unique(candidates).numel():
            raise AlgorithmInvariantViolation("Center tree nodes overlap")

        rows = query.indices
        distances = squared_distances(points[rows], centers[candidates])
        self._n_calcs += distances.numel()
        _, local = torch.min(distances, dim=1)
        assignments[rows] = candidates[local]
