"""Spatial trees used by the dual-tree update strategies."""

from .kd_tree import KDTree
from .cover_tree import CoverTree

TREE_TYPES = {
    'kd': KDTree,
    'cover': CoverTree
}

__all__ = [
    'KDTree',
    'CoverTree',
    'TREE_TYPES'
]
