"""Policies for clusters that end up with no points after a step."""

from ..base.errors import ConfigError
from ..base.interfaces import EmptyClusterPolicy
from .reinitialize import ReinitializeEmpty
from .allow_empty import AllowEmpty
from .kill_empty import KillEmpty


def get_empty_cluster_policy(name: str = 'reinitialize') -> EmptyClusterPolicy:
    """Create an empty-cluster policy by name ('reinitialize', 'allow', 'kill')."""
    if name == 'reinitialize':
        return ReinitializeEmpty()
    elif name == 'allow':
        return AllowEmpty()
    elif name == 'kill':
        return KillEmpty()
    else:
        raise ConfigError(f"Unknown empty cluster policy: {name}")


__all__ = [
    'ReinitializeEmpty',
    'AllowEmpty',
    'KillEmpty',
    'get_empty_cluster_policy'
]
