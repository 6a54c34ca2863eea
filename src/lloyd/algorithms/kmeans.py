"""
K-means clustering with a selectable update strategy.

The classic Lloyd algorithm assembled from the modular components: any of
the five update strategies, random / refined / caller-supplied starts, and
one of three empty-cluster policies.
"""

from typing import Optional, Union
import torch
from torch import Tensor
import numpy as np

from ..base.clustering_base import BaseClusteringAlgorithm
from ..base.errors import ConfigError
from ..config import (
    KMeansConfig, DEFAULT_MAX_ITERATIONS, DEFAULT_SAMPLINGS, DEFAULT_LEAF_SIZE,
    DEFAULT_SHIFT_TOLERANCE
)
from ..updates import get_update_strategy
from ..empty_clusters import get_empty_cluster_policy
from ..initialization.random import RandomInit
from ..initialization.refined_start import RefinedStartInit
from ..initialization.from_previous import FromPreviousInit
from ..utils.convergence import CentroidShift


class KMeans(BaseClusteringAlgorithm):
    """K-means clustering.

    Partitions data into K clusters by minimizing the within-cluster sum of
    squared distances. All update strategies produce the same clustering
    from the same starting centers; they only differ in speed.

    Parameters
    ----------
    n_clusters : int
        Number of clusters
    algorithm : str, default='naive'
        Update strategy: 'naive', 'elkan', 'hamerly', 'dualtree' or
        'dualtree-covertree'
    init : str or array-like, default='random'
        Initialization method:
        - 'random' : K distinct data points
        - 'refined' : Bradley-Fayyad refined start
        - array of shape (n_clusters, n_features) : Use as initial centers
    empty_clusters : str, default='reinitialize'
        What to do with clusters that lose all their points:
        - 'reinitialize' : re-seed them with far-away points
        - 'allow' : leave them empty
        - 'kill' : remove them, reducing n_clusters
    percentage : float, default=0.02
        Sub-sample fraction for the refined start
    samplings : int, default=100
        Number of sub-samples for the refined start
    max_iter : int, default=1000
        Maximum number of iterations, 0 for no limit
    tol : float, default=0.0
        Convergence tolerance on the summed center shift
    leaf_size : int, default=8
        Leaf capacity of the trees used by the dual-tree strategies
    verbose : int, default=0
        Verbosity level
    random_state : int or torch.Generator, optional
        Random seed for reproducibility
    device : torch.device, optional
        Device for computation

    Attributes
    ----------
    cluster_centers_ : Tensor of shape (n_clusters, n_features)
        Cluster centers; fewer rows than n_clusters after 'kill'
    labels_ : Tensor of shape (n_samples,)
        Cluster assignments for training data
    inertia_ : float
        Sum of squared distances to the assigned centers
    n_iter_ : int
        Number of iterations run
    status_ : RunStatus
        Whether the run converged or hit max_iter
    """

    def __init__(self,
                 n_clusters: int,
                 algorithm: str = 'naive',
                 init: Union[str, Tensor, np.ndarray] = 'random',
                 empty_clusters: str = 'reinitialize',
                 percentage: float = 0.02,
                 samplings: int = DEFAULT_SAMPLINGS,
                 max_iter: int = DEFAULT_MAX_ITERATIONS,
                 tol: float = DEFAULT_SHIFT_TOLERANCE,
                 leaf_size: int = DEFAULT_LEAF_SIZE,
                 verbose: int = 0,
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 device: Optional[Union[str, torch.device]] = None):
        """Initialize K-means algorithm."""
        super().__init__(
            n_clusters=n_clusters,
            max_iter=max_iter,
            tol=tol,
            verbose=verbose,
            random_state=random_state,
            device=device
        )
        self.algorithm = algorithm
        self.init = init
        self.empty_clusters = empty_clusters
        self.percentage = percentage
        self.samplings = samplings
        self.leaf_size = leaf_size

    @classmethod
    def from_config(cls, config: KMeansConfig) -> 'KMeans':
        """Build an estimator from a validated run configuration."""
        if config.initial_centroids is not None:
            init = config.initial_centroids
        elif config.refined_start:
            init = 'refined'
        else:
            init = 'random'

        return cls(
            n_clusters=int(config.clusters),
            algorithm=config.algorithm,
            init=init,
            empty_clusters=config.empty_clusters,
            percentage=config.percentage,
            samplings=config.samplings,
            max_iter=int(config.max_iterations),
            tol=config.tol,
            leaf_size=config.leaf_size,
            verbose=config.verbose,
            random_state=config.random_state,
            device=config.device
        )

    def _create_components(self) -> None:
        """Create K-means specific components."""
        self.update_strategy = get_update_strategy(self.algorithm, leaf_size=self.leaf_size)
        self.empty_cluster_policy = get_empty_cluster_policy(self.empty_clusters)

        if isinstance(self.init, str):
            if self.init == 'random':
                self.initialization_strategy = RandomInit()
            elif self.init == 'refined':
                self.initialization_strategy = RefinedStartInit(
                    percentage=self.percentage,
                    samplings=self.samplings,
                    max_iter=self.max_iter
                )
            else:
                raise ConfigError(f"Unknown init method: {self.init}")
        else:
            self.initialization_strategy = FromPreviousInit(self.init)

        self.convergence_criterion = CentroidShift(tol=self.tol)

    def get_params(self, deep: bool = True):
        params = super().get_params(deep)
        params.update({
            'algorithm': self.algorithm,
            'init': self.init,
            'empty_clusters': self.empty_clusters,
            'percentage': self.percentage,
            'samplings': self.samplings,
            'leaf_size': self.leaf_size
        })
        return params
