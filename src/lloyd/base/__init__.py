"""Base classes and interfaces for the lloyd clustering engine."""

from .errors import ConfigError, AlgorithmInvariantViolation

from .data_structures import (
    RunStatus,
    StepResult,
    PolicyOutcome,
    AlgorithmState,
    RunResult
)

from .interfaces import (
    UpdateStrategy,
    InitializationStrategy,
    EmptyClusterPolicy,
    ConvergenceCriterion,
    SpatialTree
)

from .clustering_base import BaseClusteringAlgorithm

__all__ = [
    # Errors
    'ConfigError',
    'AlgorithmInvariantViolation',

    # Interfaces
    'UpdateStrategy',
    'InitializationStrategy',
    'EmptyClusterPolicy',
    'ConvergenceCriterion',
    'SpatialTree',

    # Data structures
    'RunStatus',
    'StepResult',
    'PolicyOutcome',
    'AlgorithmState',
    'RunResult',

    # Base algorithm
    'BaseClusteringAlgorithm'
]
