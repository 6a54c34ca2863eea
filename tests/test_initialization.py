# tests/test_initialization.py
"""
Initialization strategies: random data points, caller-supplied centers and
the refined start built from clusterings of sub-samples.
"""

from __future__ import annotations

import pytest
import torch

from lloyd import ConfigError, KMeans
from lloyd.initialization import RandomInit, FromPreviousInit, RefinedStartInit

from data_gen import make_blobs, make_uniform
from utils import perm_invariant_accuracy, run_config


@pytest.fixture
def X(torch_device):
    return torch.as_tensor(make_uniform(50, 3, seed=8), device=torch_device)


def _generator(seed):
    g = torch.Generator()
    g.manual_seed(seed)
    return g


def test_random_init_picks_distinct_data_points(X):
    centers = RandomInit().initialize(X, 7, generator=_generator(0))

    assert centers.shape == (7, 3)
    matches = (centers.unsqueeze(1) == X.unsqueeze(0)).all(dim=2)
    rows = matches.float().argmax(dim=1)
    assert matches.any(dim=1).all()
    assert torch.unique(rows).numel() == 7


def test_random_init_is_driven_by_the_generator(X):
    a = RandomInit().initialize(X, 5, generator=_generator(42))
    b = RandomInit().initialize(X, 5, generator=_generator(42))
    c = RandomInit().initialize(X, 5, generator=_generator(43))
    assert torch.equal(a, b)
    assert not torch.equal(a, c)


def test_random_init_rejects_too_many_clusters(X):
    with pytest.raises(ConfigError):
        RandomInit().initialize(X, 51, generator=_generator(0))


def test_from_previous_returns_a_copy(X):
    given = X[:4].clone()
    centers = FromPreviousInit(given).initialize(X, 4)
    assert torch.equal(centers, given)
    centers += 1.0
    assert torch.equal(given, X[:4])


def test_from_previous_accepts_lists_and_checks_shape(X):
    centers = FromPreviousInit([[0.0, 0.0, 0.0], [1.0, 1.0, 1.0]]).initialize(X, 2)
    assert centers.dtype == torch.float64

    with pytest.raises(ConfigError):
        FromPreviousInit([[0.0, 0.0], [1.0, 1.0]]).initialize(X, 2)
    with pytest.raises(ConfigError):
        FromPreviousInit([[0.0, 0.0, 0.0]]).initialize(X, 2)


def test_initial_centroids_are_used_as_given(X):
    # Starting at a fixed point of the iteration converges immediately.
    first = KMeans(n_clusters=3, random_state=0).run(X)
    out = run_config(X, 3, initial_centroids=first.centers, labels_only=True)

    assert out.result.n_iter == 1
    assert torch.equal(out.centroid, first.centers)
    assert torch.equal(out.output[:, 0], first.assignments)


def test_refined_sample_size():
    init = RefinedStartInit(percentage=0.1, samplings=5)
    assert init.sample_size(1000, 4) == 100
    # Never fewer points than clusters, never more than the data.
    assert init.sample_size(20, 5) == 5
    assert RefinedStartInit(percentage=1.0).sample_size(30, 3) == 30


@pytest.mark.parametrize("percentage", [None, 0.0, 1.5, "half"])
def test_refined_rejects_bad_percentage(percentage):
    with pytest.raises(ConfigError):
        RefinedStartInit(percentage=percentage)


def test_refined_start_produces_valid_centers(X):
    init = RefinedStartInit(percentage=0.2, samplings=4)
    centers = init.initialize(X, 3, generator=_generator(0))

    assert centers.shape == (3, 3)
    assert torch.isfinite(centers).all()
    # Centers are averages of data points, so they stay inside the data's box.
    assert (centers >= X.min(dim=0).values - 1e-12).all()
    assert (centers <= X.max(dim=0).values + 1e-12).all()


def test_refined_start_is_reproducible(X):
    cfg = dict(refined_start=True, percentage=0.2, samplings=3, labels_only=True)
    a = run_config(X, 4, random_state=7, **cfg)
    b = run_config(X, 4, random_state=7, **cfg)
    assert torch.equal(a.output, b.output)
    assert torch.equal(a.centroid, b.centroid)


def test_refined_start_runs_to_a_full_clustering():
    X, _, _ = make_blobs(n_per=50, d=3, n_blobs=4, spread=0.2, seed=6)

    out = run_config(X, 4, refined_start=True, percentage=0.1, samplings=10,
                     labels_only=True, random_state=3)

    assert out.result.converged
    assert torch.unique(out.output[:, 0]).numel() == 4


def test_start_near_blob_means_recovers_the_blobs():
    X, y, means = make_blobs(n_per=50, d=3, n_blobs=4, spread=0.2, seed=6)

    out = run_config(X, 4, initial_centroids=means + 0.1, labels_only=True)

    assert out.result.converged
    assert perm_invariant_accuracy(out.output[:, 0], y) == pytest.approx(1.0)
    assert torch.allclose(out.centroid, torch.as_tensor(means), atol=0.2)
