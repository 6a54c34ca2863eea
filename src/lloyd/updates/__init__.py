"""Update strategies: interchangeable implementations of one Lloyd step."""

from ..base.errors import ConfigError
from ..base.interfaces import UpdateStrategy
from ..config import DEFAULT_LEAF_SIZE
from .naive import NaiveUpdate
from .elkan import ElkanUpdate
from .hamerly import HamerlyUpdate
from .dual_tree import DualTreeUpdate


def get_update_strategy(name: str, leaf_size: int = DEFAULT_LEAF_SIZE) -> UpdateStrategy:
    """Create a fresh update strategy by algorithm name.

    Every call returns a new instance, so no cached bounds are shared
    between runs.
    """
    if name == 'naive':
        return NaiveUpdate()
    elif name == 'elkan':
        return ElkanUpdate()
    elif name == 'hamerly':
        return HamerlyUpdate()
    elif name == 'dualtree':
        return DualTreeUpdate(tree='kd', leaf_size=leaf_size)
    elif name == 'dualtree-covertree':
        return DualTreeUpdate(tree='cover', leaf_size=leaf_size)
    else:
        raise ConfigError(f"Unknown algorithm: {name}")


__all__ = [
    'NaiveUpdate',
    'ElkanUpdate',
    'HamerlyUpdate',
    'DualTreeUpdate',
    'get_update_strategy'
]
