# tests/test_output_shapes.py
"""
Output shaping at the engine boundary.

With N points of dimension D and C clusters:
- default output is (N, D+1): the points with a trailing label column
- labels-only output is (N, 1)
- in-place output grows the caller's own storage to (N, D+1)
- the centroid matrix is always (C, D)
"""

from __future__ import annotations

import numpy as np
import pytest
import torch

from lloyd import ALGORITHMS, KMeansConfig, RunStatus, run_kmeans

from data_gen import make_uniform
from utils import run_config


N, D, C = 10, 4, 2


@pytest.fixture
def X():
    return make_uniform(N, D, seed=1)


@pytest.mark.parametrize("algorithm", ALGORITHMS)
def test_default_output_appends_label_column(X, algorithm):
    out = run_config(X, C, algorithm=algorithm)

    assert out.output.shape == (N, D + 1)
    assert out.centroid.shape == (C, D)
    assert out.output.dtype == torch.float64
    # Leading columns are the input points, untouched.
    assert torch.equal(out.output[:, :D], torch.as_tensor(X))
    labels = out.output[:, D]
    assert torch.equal(labels, labels.round())
    assert labels.min() >= 0 and labels.max() < C


def test_labels_only_output(X):
    out = run_config(X, C, labels_only=True)

    assert out.output.shape == (N, 1)
    assert out.output.dtype == torch.int64
    assert out.centroid.shape == (C, D)
    assert torch.equal(out.output[:, 0], out.result.assignments)


def test_label_column_matches_labels_only(X):
    full = run_config(X, C)
    labels = run_config(X, C, labels_only=True)
    assert torch.equal(full.output[:, D].long(), labels.output[:, 0])


def test_in_place_tensor_is_augmented(X):
    data = torch.as_tensor(X).clone()
    original = data.clone()

    out = run_config(data, C, in_place=True)

    assert out.output is None
    assert data.shape == (N, D + 1)
    assert torch.equal(data[:, :D], original)
    assert torch.equal(data[:, D].long(), out.result.assignments)
    assert out.centroid.shape == (C, D)


def test_in_place_ndarray_is_augmented(X):
    data = np.array(X, dtype=np.float64, copy=True)
    original = data.copy()

    out = run_config(data, C, in_place=True)

    assert out.output is None
    assert data.shape == (N, D + 1)
    np.testing.assert_array_equal(data[:, :D], original)
    np.testing.assert_array_equal(data[:, D].astype(np.int64),
                                  out.result.assignments.numpy())


def test_in_place_rejects_views(X):
    from lloyd import ConfigError

    base = np.array(X, copy=True)
    view = base[:, :D]
    with pytest.raises(ConfigError):
        run_kmeans(KMeansConfig(input=view[::2], clusters=C, in_place=True))


def test_list_input_is_accepted(X):
    out = run_config(X.tolist(), C, labels_only=True)
    assert out.output.shape == (N, 1)


def test_input_is_not_modified_without_in_place(X):
    data = torch.as_tensor(X).clone()
    before = data.clone()
    run_config(data, C)
    assert torch.equal(data, before)


def test_result_reports_status_and_iterations(X):
    out = run_config(X, C)
    assert out.result.status is RunStatus.CONVERGED
    assert out.result.converged
    assert out.result.n_iter >= 1
    assert int(out.result.counts().sum()) == N


def test_single_cluster_centroid_is_the_mean(X):
    out = run_config(X, 1, labels_only=True)
    assert torch.all(out.output == 0)
    assert torch.allclose(out.centroid[0], torch.as_tensor(X).mean(dim=0))


def test_one_cluster_per_point(X):
    out = run_config(X, N, labels_only=True)
    assert sorted(out.output[:, 0].tolist()) == list(range(N))


def test_in_place_ndarray_grows_the_same_object(X):
    data = np.array(X, dtype=np.float64, copy=True)
    held = data

    out = run_config(data, C, in_place=True)

    # The caller's array object itself is resized; views taken before the
    # call would not see the new buffer, so only look at it afterwards.
    assert held is data
    assert held.shape == (N, D + 1)
    assert held.flags["C_CONTIGUOUS"] and held.flags["OWNDATA"]
    np.testing.assert_array_equal(held[:, :D], X)
    np.testing.assert_array_equal(held[:, D].astype(np.int64),
                                  out.result.assignments.numpy())
