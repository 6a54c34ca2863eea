"""
Refined start initialization.

P. S. Bradley and U. M. Fayyad. Refining initial points for k-means
clustering. ICML 1998.

Many small random sub-samples of the data are clustered independently; the
centers they produce are pooled and clustered once more, and the result is
used as the starting point of the full run. This costs extra computation but
is far less sensitive to an unlucky random start.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..config import DEFAULT_SAMPLINGS, DEFAULT_MAX_ITERATIONS
from ..utils.validation import check_percentage, check_n_clusters


class RefinedStartInit(InitializationStrategy):
    """Initialize from the clustering of sub-sample clusterings.

    Args:
        percentage: Fraction of the data in each sub-sample, in (0, 1]
        samplings: Number of sub-samples
        max_iter: Iteration cap of every nested run (0 for unlimited)
    """

    def __init__(self, percentage: float = 0.02, samplings: int = DEFAULT_SAMPLINGS,
                 max_iter: int = DEFAULT_MAX_ITERATIONS):
        check_percentage(percentage)
        self.percentage = percentage
        self.samplings = samplings
        self.max_iter = max_iter

    def sample_size(self, n_points: int, n_clusters: int) -> int:
        """Points per sub-sample: a fraction of the data, never fewer than k."""
        return min(n_points, max(n_clusters, int(self.percentage * n_points)))

    def _cluster(self, points: Tensor, n_clusters: int,
                 generator: torch.Generator) -> Tensor:
        # Nested naive run with its own controller and strategy.
        from ..algorithms.kmeans import KMeans

        model = KMeans(
            n_clusters=n_clusters,
            algorithm='naive',
            init='random',
            max_iter=self.max_iter,
            random_state=generator,
            device=points.device
        )
        return model.run(points).centers

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Produce refined initial centers.

        Args:
            points: (n, d) data points
            n_clusters: Number of clusters
            generator: Random generator of the current run

        Returns:
            (n_clusters, d) tensor of centers
        """
        n_points = points.shape[0]
        check_n_clusters(n_clusters, n_points)
        if generator is None:
            generator = torch.Generator()
            generator.seed()

        size = self.sample_size(n_points, n_clusters)
        pooled = []
        for _ in range(self.samplings):
            sample = torch.randperm(n_points, generator=generator)[:size]
            pooled.append(self._cluster(points[sample.to(points.device)], n_clusters, generator))

        candidates = torch.cat(pooled, dim=0)
        return self._cluster(candidates, n_clusters, generator)
