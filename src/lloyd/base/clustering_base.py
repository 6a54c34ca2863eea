"""
Base class for the iteration controller.

Provides the algorithmic skeleton shared by every configuration of the
engine: initialize once, then alternate update steps and empty-cluster
handling until the centers stop moving or the iteration budget runs out.
"""

from abc import abstractmethod
from typing import Optional, Dict, Any, List, Union
import torch
from torch import Tensor
import numpy as np
import time
import warnings

from .interfaces import (
    UpdateStrategy, InitializationStrategy, EmptyClusterPolicy, ConvergenceCriterion
)
from .data_structures import AlgorithmState, RunResult, RunStatus
from .errors import ConfigError
from ..config import DEFAULT_MAX_ITERATIONS, DEFAULT_SHIFT_TOLERANCE
from ..utils.distances import nearest_centers
from ..utils.metrics import inertia, score_samples
from ..utils.validation import validate_data, check_n_clusters, check_random_state


class BaseClusteringAlgorithm:
    """Base class implementing the iterate-until-stable loop.

    State machine: ``INITIALIZED -> ITERATING -> CONVERGED`` or
    ``ITERATION_LIMIT_REACHED``. Reaching the iteration limit is not an
    error; it is reported through ``status_`` and the returned RunResult.

    Subclasses need to specify:
    - Update strategy
    - Initialization strategy
    - Empty cluster policy
    - Convergence criterion
    """

    def __init__(self,
                 n_clusters: int,
                 max_iter: int = DEFAULT_MAX_ITERATIONS,
                 tol: float = DEFAULT_SHIFT_TOLERANCE,
                 verbose: int = 0,
                 random_state: Optional[Union[int, torch.Generator]] = None,
                 device: Optional[Union[str, torch.device]] = None):
        """
        Args:
            n_clusters: Number of clusters K
            max_iter: Maximum iterations, 0 for no limit
            tol: Convergence tolerance on the summed center shift
            verbose: Verbosity level (0=silent, 1=progress, 2=detailed)
            random_state: Seed or generator for this model's runs
            device: Torch device (None for CPU)
        """
        self.n_clusters = n_clusters
        self.max_iter = max_iter
        self.tol = tol
        self.verbose = verbose
        self.random_state = random_state
        self.device = torch.device('cpu') if device is None else torch.device(device)

        # These will be set by subclasses
        self.update_strategy: Optional[UpdateStrategy] = None
        self.initialization_strategy: Optional[InitializationStrategy] = None
        self.empty_cluster_policy: Optional[EmptyClusterPolicy] = None
        self.convergence_criterion: Optional[ConvergenceCriterion] = None

        # Run state
        self.fitted_ = False
        self.status_ = RunStatus.INITIALIZED
        self.n_iter_ = 0
        self.history_: List[AlgorithmState] = []
        self.result_: Optional[RunResult] = None

    @abstractmethod
    def _create_components(self) -> None:
        """Create configuration-specific components.

        Subclasses must implement this to instantiate:
        - self.update_strategy
        - self.initialization_strategy
        - self.empty_cluster_policy
        - self.convergence_criterion
        """
        pass

    def fit(self, X: Union[Tensor, np.ndarray], y: Optional[Tensor] = None) -> 'BaseClusteringAlgorithm':
        """Fit the clustering model.

        Args:
            X: (n, d) data
            y: Ignored (for sklearn compatibility)

        Returns:
            Self
        """
        self.run(X)
        return self

    def fit_predict(self, X: Union[Tensor, np.ndarray], y: Optional[Tensor] = None) -> Tensor:
        """Fit and return the final assignments of the training data."""
        return self.run(X).assignments

    def predict(self, X: Union[Tensor, np.ndarray]) -> Tensor:
        """Assign new data to the nearest fitted center.

        Args:
            X: (n, d) data

        Returns:
            (n,) tensor of cluster indices
        """
        if not self.fitted_:
            raise RuntimeError("Model must be fitted before calling predict")

        X = self._validate_data(X)
        assignments, _ = nearest_centers(X, self.cluster_centers_)
        return assignments

    def score(self, X: Union[Tensor, np.ndarray], y: Optional[Tensor] = None) -> float:
        """Negative sum of squared distances of X to the nearest center."""
        if not self.fitted_:
            raise RuntimeError("Model must be fitted before calling score")
        X = self._validate_data(X)
        return -score_samples(X, self.cluster_centers_).sum().item()

    def run(self, X: Union[Tensor, np.ndarray]) -> RunResult:
        """Cluster X and return the full run result."""
        X = self._validate_data(X)
        n_points, dimension = X.shape
        check_n_clusters(self.n_clusters, n_points)
        if isinstance(self.max_iter, bool) or not isinstance(self.max_iter, int) or self.max_iter < 0:
            raise ConfigError(f"max_iter must be a non-negative int, got {self.max_iter!r}")

        self._create_components()
        generator = check_random_state(self.random_state)

        if self.verbose:
            print(f"Initializing {self.n_clusters} clusters...")

        start_time = time.time()
        self.status_ = RunStatus.INITIALIZED
        centers = self.initialization_strategy.initialize(X, self.n_clusters, generator=generator)
        assignments: Optional[Tensor] = None

        self.n_iter_ = 0
        self.history_ = []
        self.convergence_criterion.reset()
        self.update_strategy.reset()

        n_distance_calcs = 0
        converged = False
        self.status_ = RunStatus.ITERATING

        while self.max_iter == 0 or self.n_iter_ < self.max_iter:
            iter_start_time = time.time()
            iteration = self.n_iter_

            step = self.update_strategy.step(X, centers, assignments)
            n_distance_calcs += step.n_distance_calcs

            if assignments is None:
                n_changed = n_points
            else:
                n_changed = int((step.assignments != assignments).sum())

            centers, new_assignments = step.centers, step.assignments
            centers_moved = False
            n_empty = int((step.counts == 0).sum())
            if n_empty:
                outcome = self.empty_cluster_policy.handle(X, centers, new_assignments)
                centers, new_assignments = outcome.centers, outcome.assignments
                centers_moved = outcome.centers_moved
                if self.empty_cluster_policy.changes_cluster_count and outcome.n_removed:
                    # Cached bounds are indexed by cluster.
                    self.update_strategy.reset()
                if self.verbose >= 2:
                    print(f"Iteration {iteration:3d}: {n_empty} empty clusters "
                          f"({outcome.n_removed} removed)")

            assignments = new_assignments
            self.n_iter_ = iteration + 1

            objective_value = inertia(X, assignments, centers)
            self.history_.append(AlgorithmState(
                iteration=iteration,
                n_clusters=centers.shape[0],
                shift=step.shift,
                objective_value=objective_value,
                n_changed=n_changed,
                n_empty=n_empty,
                metadata={'n_distance_calcs': step.n_distance_calcs}
            ))

            converged = self.convergence_criterion.check({
                'iteration': iteration,
                'shift': step.shift,
                'centers_moved': centers_moved,
                'objective': objective_value
            })

            iter_time = time.time() - iter_start_time
            if self.verbose >= 2 or (self.verbose >= 1 and iteration % 10 == 0):
                print(f"Iteration {iteration:3d}: objective = {objective_value:.6f} "
                      f"shift = {step.shift:.6g} ({iter_time:.3f}s)")

            if converged:
                if self.verbose:
                    print(f"Converged at iteration {iteration}")
                break

        self.status_ = RunStatus.CONVERGED if converged else RunStatus.ITERATION_LIMIT_REACHED
        total_time = time.time() - start_time

        if self.verbose:
            if not converged:
                warnings.warn(f"Failed to converge after {self.max_iter} iterations")
            print(f"Total fitting time: {total_time:.3f}s")

        self.result_ = RunResult(
            centers=centers.clone(),
            assignments=assignments.clone(),
            n_iter=self.n_iter_,
            status=self.status_,
            inertia=self.history_[-1].objective_value if self.history_ else float('nan'),
            n_distance_calcs=n_distance_calcs
        )
        self.fitted_ = True
        return self.result_

    def _validate_data(self, X: Union[Tensor, np.ndarray]) -> Tensor:
        """Validate and prepare input data."""
        return validate_data(X, device=self.device)

    @property
    def cluster_centers_(self) -> Tensor:
        """Get cluster centers."""
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return self.result_.centers

    @property
    def labels_(self) -> Tensor:
        """Get assignments of the training data."""
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return self.result_.assignments

    @property
    def inertia_(self) -> float:
        """Get final within-cluster sum of squares."""
        if not self.fitted_:
            raise RuntimeError("Model must be fitted first")
        return self.result_.inertia

    def get_params(self, deep: bool = True) -> Dict[str, Any]:
        """Get parameters (sklearn compatibility)."""
        return {
            'n_clusters': self.n_clusters,
            'max_iter': self.max_iter,
            'tol': self.tol,
            'verbose': self.verbose,
            'random_state': self.random_state,
            'device': self.device
        }

    def set_params(self, **params) -> 'BaseClusteringAlgorithm':
        """Set parameters (sklearn compatibility)."""
        for key, value in params.items():
            setattr(self, key, value)
        return self
