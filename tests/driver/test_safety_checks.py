import numpy as np
import pytest

from stagger.driver.safety_checks import SafetyChecker
from stagger.util import Field, Grid, NonFiniteError


@pytest.fixture
def checker():
    return SafetyChecker()


def make_fields(value=15.0, halo_value=None):
    field = Field("u", Grid(nx=4, ny=4), n_halo=1, time_levels=2)
    field.level(0).data[:] = value if halo_value is None else halo_value
    field.level(0).view[:] = value
    return {"u": field}


def test_register_variable(checker):
    checker.register_variable("u", minimum_value=10)
    assert len(checker.checks) == 1
    checker.clear_all_checks()
    assert len(checker.checks) == 0


def test_double_register(checker):
    checker.register_variable("u", minimum_value=10)
    with pytest.raises(NotImplementedError):
        checker.register_variable("u", maximum_value=20)


def test_checkers_are_independent(checker):
    checker.register_variable("u", minimum_value=10)
    assert len(SafetyChecker().checks) == 0


def test_check_fields(checker):
    checker.register_variable("u", minimum_value=10, maximum_value=20)
    checker.check_fields(make_fields())


@pytest.mark.parametrize(
    "bounds",
    [
        pytest.param({"minimum_value": 16}, id="min"),
        pytest.param({"maximum_value": 14}, id="max"),
    ],
)
def test_check_fields_failing(checker, bounds):
    checker.register_variable("u", **bounds)
    with pytest.raises(RuntimeError, match="outside of its specified bounds"):
        checker.check_fields(make_fields())


def test_zero_bound_is_checked(checker):
    checker.register_variable("u", minimum_value=0.0)
    with pytest.raises(RuntimeError):
        checker.check_fields(make_fields(value=-1.0))


def test_check_fields_domain_only(checker):
    checker.register_variable("u", maximum_value=10, compute_domain_only=True)
    checker.check_fields(make_fields(value=1.0, halo_value=11.0))
    checker.clear_all_checks()
    checker.register_variable("u", maximum_value=10)
    with pytest.raises(RuntimeError):
        checker.check_fields(make_fields(value=1.0, halo_value=11.0))


def test_non_finite_value(checker):
    checker.register_variable("u")
    fields = make_fields()
    fields["u"].level(0).view[1, 2, 0] = np.nan
    with pytest.raises(NonFiniteError, match="NaN"):
        checker.check_fields(fields)


def test_only_current_level_is_checked(checker):
    checker.register_variable("u", maximum_value=20)
    fields = make_fields()
    fields["u"].level(1).data[:] = 100.0
    checker.check_fields(fields)


def test_missing_field(checker):
    checker.register_variable("v")
    with pytest.raises(NotImplementedError):
        checker.check_fields(make_fields())
