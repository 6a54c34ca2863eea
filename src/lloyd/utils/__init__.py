"""Utility functions for the lloyd clustering engine."""

from .distances import (
    BOUND_RTOL,
    BOUND_ATOL,
    squared_distances,
    paired_squared_distances,
    nearest_centers,
    center_distances,
    compute_centroids,
    center_movement,
    loosen
)

from .validation import (
    validate_data,
    check_n_clusters,
    check_percentage,
    check_random_state,
    check_initial_centers,
    check_in_place_target,
    validate_config,
    ValidationReport
)

from .convergence import CentroidShift

from .metrics import inertia, score_samples

__all__ = [
    # Distance kernels
    'BOUND_RTOL',
    'BOUND_ATOL',
    'squared_distances',
    'paired_squared_distances',
    'nearest_centers',
    'center_distances',
    'compute_centroids',
    'center_movement',
    'loosen',

    # Validation
    'validate_data',
    'check_n_clusters',
    'check_percentage',
    'check_random_state',
    'check_initial_centers',
    'check_in_place_target',
    'validate_config',
    'ValidationReport',

    # Convergence criteria
    'CentroidShift',

    # Metrics
    'inertia',
    'score_samples'
]
