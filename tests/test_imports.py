
import importlib
import pytest

@pytest.mark.parametrize("module", [
    "lloyd",
    "lloyd.algorithms",
    "lloyd.base",
    "lloyd.config",
    "lloyd.engine",
    "lloyd.empty_clusters",
    "lloyd.initialization",
    "lloyd.trees",
    "lloyd.updates",
    "lloyd.utils",
])
def test_submodules_exist(module):
    mod = importlib.import_module(module)
    assert mod is not None


def test_every_algorithm_name_resolves():
    from lloyd import ALGORITHMS, get_update_strategy

    for name in ALGORITHMS:
        strategy = get_update_strategy(name)
        assert strategy.name == name
