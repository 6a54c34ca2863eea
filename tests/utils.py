# tests/utils.py
"""
Small, reusable helpers used across the lloyd test suite.

Functions:
- to_numpy(x): convert a tensor or array-like to a numpy array.
- perm_invariant_accuracy(y_pred, y_true): best accuracy over relabelings.
- run_config(X, C, **overrides): build a KMeansConfig and run it.
"""

from __future__ import annotations

import itertools
from typing import Any, Union

import numpy as np
import torch

from lloyd import KMeansConfig, run_kmeans

ArrayLike = Union[np.ndarray, torch.Tensor]


def to_numpy(x: ArrayLike) -> np.ndarray:
    if isinstance(x, torch.Tensor):
        return x.detach().cpu().numpy()
    return np.asarray(x)


def perm_invariant_accuracy(y_pred: ArrayLike, y_true: ArrayLike) -> float:
    """
    Fraction of points whose predicted label matches the true one under the
    best one-to-one relabeling. Exhaustive over permutations, so only for a
    handful of clusters.
    """
    y_pred = to_numpy(y_pred).ravel()
    y_true = to_numpy(y_true).ravel()
    labels = np.unique(np.concatenate([y_pred, y_true]))
    best = 0
    for perm in itertools.permutations(labels):
        mapping = dict(zip(labels, perm))
        mapped = np.array([mapping[v] for v in y_pred])
        best = max(best, int((mapped == y_true).sum()))
    return best / y_true.size


def run_config(X: Any, clusters: int, **overrides: Any):
    """Run the engine on X with a fixed seed unless one is given."""
    overrides.setdefault("random_state", 0)
    return run_kmeans(KMeansConfig(input=X, clusters=clusters, **overrides))
