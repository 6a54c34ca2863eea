"""
Input validation utilities.

``validate_config`` is the validation pass run before any clustering work:
it collects every problem into a ``ValidationReport`` instead of stopping at
the first one. The smaller helpers raise ``ConfigError`` directly and are
used by components that are handed inputs without a full config.
"""

from dataclasses import dataclass, field
from typing import Optional, Union, List, Any
import torch
from torch import Tensor
import numpy as np

from ..base.errors import ConfigError
from ..config import KMeansConfig, ALGORITHMS


def validate_data(X: Union[Tensor, np.ndarray, list],
                  dtype: torch.dtype = torch.float64,
                  device: Optional[torch.device] = None,
                  ensure_finite: bool = True,
                  ensure_min_samples: int = 1,
                  ensure_min_features: int = 1) -> Tensor:
    """Validate and convert input data to a 2D tensor.

    Args:
        X: Input data (tensor, numpy array, or list)
        dtype: Target data type
        device: Target device
        ensure_finite: Whether to check for inf/nan
        ensure_min_samples: Minimum number of samples required
        ensure_min_features: Minimum number of features required

    Returns:
        Validated tensor. Never aliases a caller tensor of a different
        dtype or device; may alias one that already matches.

    Raises:
        ConfigError: If validation fails
    """
    if isinstance(X, Tensor):
        X = X.detach().to(dtype=dtype, device=device)
    elif isinstance(X, np.ndarray):
        X = torch.from_numpy(np.ascontiguousarray(X)).to(dtype=dtype, device=device)
    elif isinstance(X, (list, tuple)):
        try:
            X = torch.tensor(X, dtype=dtype, device=device)
        except (TypeError, ValueError) as e:
            raise ConfigError(f"Cannot convert input to a matrix: {e}")
    else:
        raise ConfigError(f"Cannot convert {type(X).__name__} to tensor")

    if X.dim() != 2:
        raise ConfigError(f"Expected 2D array, got {X.dim()}D")

    n_samples, n_features = X.shape
    if n_samples < ensure_min_samples:
        raise ConfigError(f"Found {n_samples} samples, but need at least "
                          f"{ensure_min_samples}")
    if n_features < ensure_min_features:
        raise ConfigError(f"Found {n_features} features, but need at least "
                          f"{ensure_min_features}")

    if ensure_finite and not torch.isfinite(X).all():
        raise ConfigError("Input contains NaN or infinite values")

    return X


def check_n_clusters(n_clusters: Any, n_samples: int) -> None:
    """Validate number of clusters.

    Raises:
        ConfigError: If invalid
    """
    if isinstance(n_clusters, bool) or not isinstance(n_clusters, (int, np.integer)):
        raise ConfigError(f"clusters must be int, got {type(n_clusters).__name__}")

    if n_clusters <= 0:
        raise ConfigError(f"clusters must be positive, got {n_clusters}")

    if n_clusters > n_samples:
        raise ConfigError(f"clusters ({n_clusters}) cannot be larger than "
                          f"the number of points ({n_samples})")


def check_percentage(percentage: Any) -> None:
    """Validate the refined-start sampling fraction."""
    if percentage is None:
        raise ConfigError("percentage must be specified when refined_start is set")
    if isinstance(percentage, bool) or not isinstance(percentage, (int, float, np.floating)):
        raise ConfigError(f"percentage must be a number, got {type(percentage).__name__}")
    if not 0.0 < percentage <= 1.0:
        raise ConfigError(f"percentage must be in (0, 1], got {percentage}")


def check_random_state(random_state: Optional[Union[int, torch.Generator]]) -> torch.Generator:
    """Create a generator from a random state.

    Args:
        random_state: Seed, generator, or None for a fresh nondeterministic seed

    Returns:
        Generator owned by the caller
    """
    if isinstance(random_state, torch.Generator):
        return random_state

    generator = torch.Generator()
    if random_state is None:
        generator.seed()
    elif isinstance(random_state, (int, np.integer)) and not isinstance(random_state, bool):
        generator.manual_seed(int(random_state))
    else:
        raise ConfigError(f"random_state must be int or Generator, got {type(random_state).__name__}")
    return generator


def check_initial_centers(centers: Any, n_clusters: int, dimension: int,
                          dtype: torch.dtype = torch.float64,
                          device: Optional[torch.device] = None) -> Tensor:
    """Validate caller-supplied starting centers."""
    centers = validate_data(centers, dtype=dtype, device=device)
    if centers.shape != (n_clusters, dimension):
        raise ConfigError(f"initial_centroids has shape {tuple(centers.shape)}, "
                          f"expected ({n_clusters}, {dimension})")
    return centers


def check_in_place_target(X: Any) -> None:
    """Make sure the input storage can be grown by one column."""
    if isinstance(X, Tensor):
        if X.requires_grad:
            raise ConfigError("in_place requires an input tensor that does not require grad")
        return
    if isinstance(X, np.ndarray):
        if not (X.flags.owndata and X.flags.c_contiguous):
            raise ConfigError("in_place requires a C-contiguous ndarray that owns its data")
        return
    raise ConfigError(f"in_place requires a tensor or ndarray input, got {type(X).__name__}")


@dataclass
class ValidationReport:
    """Outcome of a validation pass."""

    errors: List[str] = field(default_factory=list)
    warnings: List[str] = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.errors

    def add(self, message: str) -> None:
        self.errors.append(message)

    def raise_if_invalid(self) -> None:
        """Turn collected problems into a single ConfigError."""
        if self.errors:
            raise ConfigError("; ".join(self.errors))


def validate_config(config: KMeansConfig) -> ValidationReport:
    """Check a run configuration without performing any clustering.

    Every independent problem is reported; checks that depend on a valid
    input matrix are skipped when the input itself is invalid.
    """
    report = ValidationReport()

    if config.input is None:
        report.add("input required")
    if config.clusters is None:
        report.add("clusters required")

    if config.algorithm not in ALGORITHMS:
        report.add(f"Unknown algorithm '{config.algorithm}'; "
                   f"expected one of {', '.join(ALGORITHMS)}")

    max_iter = config.max_iterations
    if isinstance(max_iter, bool) or not isinstance(max_iter, (int, np.integer)) or max_iter < 0:
        report.add(f"max_iterations must be a non-negative int, got {max_iter!r}")

    if config.allow_empty_clusters and config.kill_empty_clusters:
        report.add("allow_empty_clusters and kill_empty_clusters are mutually exclusive")

    if config.refined_start:
        try:
            check_percentage(config.percentage)
        except ConfigError as e:
            report.add(str(e))
        if isinstance(config.samplings, bool) or not isinstance(config.samplings, int) \
                or config.samplings < 1:
            report.add(f"samplings must be a positive int, got {config.samplings!r}")
        if config.initial_centroids is not None:
            report.warnings.append("refined_start is ignored because initial_centroids "
                                   "were given")

    if not isinstance(config.tol, (int, float)) or config.tol < 0:
        report.add(f"tol must be non-negative, got {config.tol!r}")
    if isinstance(config.leaf_size, bool) or not isinstance(config.leaf_size, int) \
            or config.leaf_size < 1:
        report.add(f"leaf_size must be a positive int, got {config.leaf_size!r}")

    if config.labels_only and config.in_place:
        report.warnings.append("labels_only is ignored when in_place is set")

    if config.input is None:
        return report

    try:
        X = validate_data(config.input)
    except ConfigError as e:
        report.add(str(e))
        return report

    if config.in_place:
        try:
            check_in_place_target(config.input)
        except ConfigError as e:
            report.add(str(e))

    if config.clusters is not None:
        try:
            check_n_clusters(config.clusters, X.shape[0])
        except ConfigError as e:
            report.add(str(e))
            return report

        if config.initial_centroids is not None:
            try:
                check_initial_centers(config.initial_centroids, int(config.clusters), X.shape[1])
            except ConfigError as e:
                report.add(str(e))

    return report
