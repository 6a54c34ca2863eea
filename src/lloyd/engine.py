"""
Boundary of the clustering engine.

``run_kmeans`` takes one ``KMeansConfig``, validates all of it before any
computation, runs the clustering and shapes the output the way the caller
asked for: labels only, points with a trailing label column, or that
augmented matrix written back into the caller's own input storage.
"""

from dataclasses import dataclass
from typing import Optional, Union
import warnings
import torch
from torch import Tensor
import numpy as np

from .algorithms.kmeans import KMeans
from .base.data_structures import RunResult
from .config import KMeansConfig
from .utils.validation import validate_config, validate_data


@dataclass
class KMeansOutput:
    """What the engine hands back to its caller.

    Attributes:
        output: (n, 1) int64 labels, or (n, d + 1) points with a trailing
            label column; None when the input was augmented in place
        centroid: (k, d) final centers
        result: Full run result (status, iterations, inertia)
    """

    output: Optional[Tensor]
    centroid: Tensor
    result: RunResult


def augment_with_labels(points: Tensor, labels: Tensor) -> Tensor:
    """Append the labels to the points as a trailing column."""
    label_column = labels.to(dtype=points.dtype, device=points.device).unsqueeze(1)
    return torch.cat([points, label_column], dim=1)


def augment_in_place(target: Union[Tensor, np.ndarray], labels: Tensor) -> None:
    """Grow the caller's (n, d) storage to (n, d + 1) holding the labels.

    A tensor is re-pointed at new storage with ``set_``; views taken from it
    earlier keep the old (n, d) storage and stay valid. An ndarray is resized
    in place, which reallocates its buffer: views of it taken before the call
    point at freed memory afterwards and must not be used. Take views only
    after the call returns.
    """
    if isinstance(target, Tensor):
        augmented = augment_with_labels(target.detach(), labels)
        with torch.no_grad():
            target.set_(augmented)
    else:
        column = labels.cpu().numpy().astype(target.dtype)[:, None]
        augmented = np.hstack([target, column])
        target.resize(augmented.shape, refcheck=False)
        target[...] = augmented


def run_kmeans(config: KMeansConfig) -> KMeansOutput:
    """Validate a configuration, cluster, and assemble the output.

    Raises:
        ConfigError: If the configuration is invalid. Nothing is computed
            in that case.
    """
    report = validate_config(config)
    report.raise_if_invalid()
    for message in report.warnings:
        warnings.warn(message)

    model = KMeans.from_config(config)
    points = validate_data(config.input, device=model.device)
    if config.in_place and isinstance(config.input, np.ndarray):
        # resize may reallocate the buffer a from_numpy tensor still points at
        points = points.clone()
    result = model.run(points)

    if config.in_place:
        augment_in_place(config.input, result.assignments)
        output = None
    elif config.labels_only:
        output = result.assignments.unsqueeze(1).clone()
    else:
        output = augment_with_labels(points, result.assignments)

    return KMeansOutput(output=output, centroid=result.centers, result=result)
