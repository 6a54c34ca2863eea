"""Initialization strategies for the clustering engine."""

from .random import RandomInit
from .refined_start import RefinedStartInit
from .from_previous import FromPreviousInit

__all__ = [
    'RandomInit',
    'RefinedStartInit',
    'FromPreviousInit'
]
