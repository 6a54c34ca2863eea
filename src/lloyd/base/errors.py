"""
Exception types raised by the clustering engine.

Only ``ConfigError`` is meant to reach callers. ``AlgorithmInvariantViolation``
is raised and caught inside the update strategies when cached pruning state
turns out to be inconsistent.
"""


class ConfigError(ValueError):
    """Invalid or missing configuration, detected before clustering starts."""


class AlgorithmInvariantViolation(RuntimeError):
    """Cached bounds or tree state contradict an exact computation."""
