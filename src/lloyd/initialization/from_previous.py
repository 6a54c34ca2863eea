"""
Initialization from caller-supplied centers.

Useful for warm starts, for reproducing a run, or for comparing update
strategies from identical starting points.
"""

from typing import Optional
import torch
from torch import Tensor

from ..base.interfaces import InitializationStrategy
from ..utils.validation import check_initial_centers


class FromPreviousInit(InitializationStrategy):
    """Initialize from a fixed (n_clusters, dimension) matrix of centers."""

    def __init__(self, initial_centers):
        """
        Args:
            initial_centers: Tensor, ndarray or nested list of centers
        """
        self.initial_centers = initial_centers

    def initialize(self, points: Tensor, n_clusters: int,
                   generator: Optional[torch.Generator] = None,
                   **kwargs) -> Tensor:
        """Return a validated copy of the stored centers.

        Raises:
            ConfigError: If the centers do not have shape (n_clusters, d)
        """
        centers = check_initial_centers(self.initial_centers, n_clusters, points.shape[1],
                                        dtype=points.dtype, device=points.device)
        return centers.clone()
