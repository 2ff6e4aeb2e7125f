import numpy as np
import pytest

from stagger.driver import GaussianInit, ImpulseInit, InitializerSelector, UniformInit
from stagger.util import ConfigurationError


INDEX_RANGE = (range(4, 8), range(0, 3), range(0, 1))


@pytest.fixture
def target():
    return np.full((4, 3, 1), np.nan)


def test_uniform(target):
    init = UniformInit(values={"rho": 2.0}, default=-1.0)
    init.populate_scalar_field("rho", INDEX_RANGE, target)
    np.testing.assert_array_equal(target, 2.0)
    init.populate_scalar_field("tracer", INDEX_RANGE, target)
    np.testing.assert_array_equal(target, -1.0)


def test_gaussian_uses_global_indices(target):
    init = GaussianInit(amplitude=2.0, center_x=5.0, center_y=1.0, background=0.5)
    init.populate_scalar_field("tracer", INDEX_RANGE, target)
    assert target[1, 1, 0] == 2.5
    np.testing.assert_allclose(target[0, 1, 0], 0.5 + 2.0 * np.exp(-0.5))
    assert np.argmax(target) == np.ravel_multi_index((1, 1, 0), target.shape)


def test_gaussian_named_fields(target):
    init = GaussianInit(names=["tracer"], background=1.0)
    init.populate_scalar_field("rho", INDEX_RANGE, target)
    np.testing.assert_array_equal(target, 0.0)


def test_gaussian_invalid_width():
    with pytest.raises(ConfigurationError, match="width"):
        GaussianInit(width=0.0)


def test_impulse_inside_subdomain(target):
    init = ImpulseInit(index=[6, 2], value=3.0, background=0.1)
    init.populate_scalar_field("tracer", INDEX_RANGE, target)
    assert target[2, 2, 0] == 3.0
    assert np.sum(target == 3.0) == 1
    assert np.sum(target == 0.1) == target.size - 1


def test_impulse_outside_subdomain(target):
    init = ImpulseInit(index=[2, 2], background=0.1)
    init.populate_scalar_field("tracer", INDEX_RANGE, target)
    np.testing.assert_array_equal(target, 0.1)


@pytest.mark.parametrize("index", [[], [1, 2, 3, 4]])
def test_impulse_invalid_index(index):
    with pytest.raises(ConfigurationError, match="index"):
        ImpulseInit(index=index)


def test_selector_defers_to_config(target):
    selector = InitializerSelector.from_dict(
        {"type": "impulse", "config": {"index": [4], "value": 7.0}}
    )
    assert selector.type == "impulse"
    selector.populate_scalar_field("tracer", INDEX_RANGE, target)
    assert target[0, 0, 0] == 7.0
    assert np.sum(target) == 7.0
