# tests/test_update_strategies.py
"""
Update strategies called outside a clean controller loop.

Bound-based strategies cache bounds between steps. These tests change the
centers, the caller's assignments or the number of clusters behind their
back and check the result still matches a naive step on the same input.
"""

from __future__ import annotations

import warnings

import pytest
import torch

from lloyd import ConfigError, get_update_strategy
from lloyd.base.errors import AlgorithmInvariantViolation
from lloyd.updates import DualTreeUpdate, ElkanUpdate, HamerlyUpdate, NaiveUpdate
from lloyd.utils.distances import center_distances, squared_distances

from data_gen import make_uniform


BOUNDED = ["elkan", "hamerly"]


@pytest.fixture
def X():
    return torch.as_tensor(make_uniform(120, 3, seed=21))


@pytest.fixture
def init(X):
    return X[[0, 30, 60, 90]].clone()


def _naive(X, centers):
    return NaiveUpdate().step(X, centers)


def test_factory_rejects_unknown_names():
    with pytest.raises(ConfigError):
        get_update_strategy("kmeans++")
    with pytest.raises(ConfigError):
        DualTreeUpdate(tree="ball")


def test_factory_returns_fresh_instances():
    assert get_update_strategy("elkan") is not get_update_strategy("elkan")
    assert isinstance(get_update_strategy("hamerly"), HamerlyUpdate)
    assert get_update_strategy("dualtree-covertree").tree == "cover"


def test_naive_step_counts_every_pair(X, init):
    step = _naive(X, init)
    assert step.n_distance_calcs == X.shape[0] * init.shape[0]
    assert int(step.counts.sum()) == X.shape[0]


@pytest.mark.parametrize("algorithm", BOUNDED)
def test_arbitrary_center_jump_is_absorbed(X, init, algorithm):
    strategy = get_update_strategy(algorithm)
    first = strategy.step(X, init)

    # Hand the strategy centers it has never seen.
    jumped = first.centers.flip(0) + 0.05
    out = strategy.step(X, jumped, first.assignments)
    ref = _naive(X, jumped)

    assert torch.equal(out.assignments, ref.assignments)
    assert torch.equal(out.centers, ref.centers)


@pytest.mark.parametrize("algorithm", BOUNDED)
def test_externally_changed_assignments_are_recomputed(X, init, algorithm):
    strategy = get_update_strategy(algorithm)
    first = strategy.step(X, init)

    tampered = first.assignments.clone()
    tampered[:10] = (tampered[:10] + 1) % init.shape[0]
    out = strategy.step(X, first.centers, tampered)
    ref = _naive(X, first.centers)

    assert torch.equal(out.assignments, ref.assignments)


@pytest.mark.parametrize("algorithm", BOUNDED)
def test_cluster_count_change_resets_bounds(X, init, algorithm):
    strategy = get_update_strategy(algorithm)
    first = strategy.step(X, init)

    fewer = first.centers[:3].clone()
    remapped = torch.clamp(first.assignments, max=2)
    out = strategy.step(X, fewer, remapped)
    ref = _naive(X, fewer)

    assert torch.equal(out.assignments, ref.assignments)
    assert out.centers.shape == (3, 3)


@pytest.mark.parametrize("algorithm", BOUNDED)
def test_new_point_tensor_resets_bounds(X, init, algorithm):
    strategy = get_update_strategy(algorithm)
    first = strategy.step(X, init)

    other = X.flip(0).clone()
    out = strategy.step(other, first.centers, first.assignments)
    ref = _naive(other, first.centers)

    assert torch.equal(out.assignments, ref.assignments)


@pytest.mark.parametrize("strategy_cls", [ElkanUpdate, HamerlyUpdate])
def test_corrupted_bounds_fall_back_to_exact(X, init, strategy_cls):
    strategy = strategy_cls()
    first = strategy.step(X, init)

    # Pretend the bounds refer to the new centers and claim every point is
    # within half the gap to the nearest other center. That is false for
    # the points near a cluster boundary.
    centers = first.centers
    s = 0.5 * center_distances(centers).min(dim=1).values
    strategy._centers = centers.clone()
    strategy._upper = s[strategy._assignments].clone()
    strategy._lower = torch.zeros_like(strategy._lower)

    with warnings.catch_warnings(record=True) as caught:
        warnings.simplefilter("always")
        out = strategy.step(X, first.centers, first.assignments)

    ref = _naive(X, first.centers)
    assert torch.equal(out.assignments, ref.assignments)
    assert any("stale" in str(w.message) for w in caught)


def test_reset_discards_cached_bounds(X, init):
    strategy = ElkanUpdate()
    strategy.step(X, init)
    strategy.reset()
    assert strategy._upper is None

    # Without bounds the next step is a cold exact pass.
    step = strategy.step(X, init, torch.zeros(X.shape[0], dtype=torch.long))
    assert step.n_distance_calcs >= X.shape[0] * init.shape[0]


@pytest.mark.parametrize("kind", ["kd", "cover"])
def test_dual_tree_reuses_the_point_tree(X, init, kind):
    strategy = DualTreeUpdate(tree=kind, leaf_size=4)
    strategy.step(X, init)
    tree = strategy._point_tree

    strategy.step(X, init)
    assert strategy._point_tree is tree

    strategy.step(X.clone(), init)
    assert strategy._point_tree is not tree


def test_dual_tree_invariant_violation_falls_back(X, init, monkeypatch):
    strategy = DualTreeUpdate(tree="kd", leaf_size=8)

    def broken(*args, **kwargs):
        raise AlgorithmInvariantViolation("Center tree nodes overlap")

    monkeypatch.setattr(strategy, "_assign_leaf", broken)
    with pytest.warns(UserWarning, match="falling back"):
        out = strategy.step(X, init)

    ref = _naive(X, init)
    assert torch.equal(out.assignments, ref.assignments)


@pytest.mark.parametrize("kind", ["kd", "cover"])
@pytest.mark.parametrize("leaf_size", [1, 3, 50])
def test_dual_tree_leaf_size_does_not_change_result(X, kind, leaf_size):
    centers = X[torch.arange(0, 120, 6)].clone() + 0.01
    out = DualTreeUpdate(tree=kind, leaf_size=leaf_size).step(X, centers)
    ref = _naive(X, centers)
    assert torch.equal(out.assignments, ref.assignments)


def test_single_center(X):
    center = X[:1].clone()
    for name in ["naive", "elkan", "hamerly", "dualtree", "dualtree-covertree"]:
        strategy = get_update_strategy(name)
        first = strategy.step(X, center)
        second = strategy.step(X, first.centers, first.assignments)
        assert torch.all(second.assignments == 0)
        assert torch.allclose(second.centers[0], X.mean(dim=0))
        assert second.shift == pytest.approx(0.0, abs=1e-12)


def test_step_distances_agree_with_kernel(X, init):
    step = _naive(X, init)
    sq = squared_distances(X, init)
    assert torch.equal(sq.argmin(dim=1), step.assignments)
