import numpy as np
import pytest

from stagger.advection import (
    ConstantVelocity,
    CourantFields,
    DiagnosedVelocity,
    VelocityTerm,
)
from stagger.util import Axis, ConfigurationError, Field, Grid, NonFiniteError


def test_courant_fields_shapes():
    grid = Grid(nx=4, ny=3)
    courants = CourantFields(grid, n_halo=1)
    assert courants[Axis.X].data.shape == (7, 5, 1)
    assert courants[Axis.Y].data.shape == (6, 6, 1)
    assert courants[Axis.Z].data.shape == (6, 5, 2)
    assert len(courants) == 3
    assert len(courants.active) == 2
    assert courants.active[1] is courants[Axis.Y]


def test_uniform_velocity(communicator):
    grid = Grid(nx=4, ny=3, dx=2.0, dy=0.5)
    courants = CourantFields(grid, n_halo=1)
    velocity = ConstantVelocity(lambda axis, x, y, z: [2.0, -1.0, 0.0][axis])
    assert velocity.is_constant
    velocity.populate_courant_fields(courants, dt=0.5)
    communicator.halo_update(courants.active)
    np.testing.assert_allclose(courants[Axis.X].data, 0.5)
    np.testing.assert_allclose(courants[Axis.Y].data, -1.0)
    np.testing.assert_array_equal(courants[Axis.Z].view[:], 0.0)
    assert courants.max_abs() == 1.0


def test_rotation_is_non_divergent():
    grid = Grid(nx=10, ny=10)
    courants = CourantFields(grid, n_halo=1)
    omega = 0.05

    def rotation(axis, x, y, z):
        return [-omega * (y - 5.0), omega * (x - 5.0), np.zeros_like(z)][axis]

    ConstantVelocity(rotation).populate_courant_fields(courants, dt=1.0)
    cx = courants[Axis.X].view[:]
    cy = courants[Axis.Y].view[:]
    np.testing.assert_allclose(cx[0, :, 0], -omega * (np.arange(10) - 5.0))
    np.testing.assert_allclose(cy[:, 0, 0], omega * (np.arange(10) - 5.0))
    divergence = np.diff(cx, axis=0) + np.diff(cy, axis=1)
    np.testing.assert_allclose(divergence, 0.0, atol=1e-15)


def test_non_finite_velocity_raises():
    grid = Grid(nx=4, ny=4)
    velocity = ConstantVelocity(lambda axis, x, y, z: np.nan)
    with pytest.raises(NonFiniteError):
        velocity.populate_courant_fields(CourantFields(grid, n_halo=1), dt=1.0)


@pytest.fixture
def grid():
    return Grid(nx=6, ny=1)


@pytest.fixture
def fields(grid):
    rhou = Field("rhou", grid, n_halo=2, time_levels=2)
    rho = Field("rho", grid, n_halo=2, time_levels=2)
    rhou.level(0).data[:, 0, 0] = np.arange(10)
    rho.level(0).data[:] = 1.0
    return {"rhou": rhou, "rho": rho}


@pytest.fixture
def diagnosed():
    return DiagnosedVelocity(
        {Axis.X: [VelocityTerm("rhou"), VelocityTerm("rho", power=-1)]}
    )


def test_diagnosed_velocity_properties(diagnosed):
    assert not diagnosed.is_constant
    assert diagnosed.dynamic_fields == {"rhou", "rho"}


def test_diagnosed_velocity_averages_neighbor_cells(grid, fields, diagnosed):
    courants = CourantFields(grid, n_halo=1)
    diagnosed.populate_courant_fields(courants, dt=1.0)
    diagnosed.update(fields, courants, dt=1.0)
    np.testing.assert_allclose(courants[Axis.X].data[:, 0, 0], np.arange(9) + 0.5)


def test_diagnosed_velocity_divides_by_density(grid, fields, diagnosed):
    fields["rho"].level(0).data[:] = 2.0
    courants = CourantFields(grid, n_halo=1)
    diagnosed.update(fields, courants, dt=0.5)
    np.testing.assert_allclose(
        courants[Axis.X].data[:, 0, 0], 0.25 * (np.arange(9) + 0.5)
    )


def test_diagnosed_velocity_extrapolates_in_time(grid, fields, diagnosed):
    courants = CourantFields(grid, n_halo=1)
    diagnosed.update(fields, courants, dt=1.0)
    fields["rhou"].level(0).data[:] *= 2.0
    diagnosed.update(fields, courants, dt=1.0)
    # 1.5 * 2 - 0.5 * 1 times the first ratio
    np.testing.assert_allclose(
        courants[Axis.X].data[:, 0, 0], 2.5 * (np.arange(9) + 0.5)
    )


def test_zero_density_gives_zero_velocity(grid, fields, diagnosed):
    fields["rho"].level(0).data[:] = 0.0
    courants = CourantFields(grid, n_halo=1)
    with np.errstate(divide="raise", invalid="raise"):
        diagnosed.update(fields, courants, dt=1.0)
    np.testing.assert_array_equal(courants[Axis.X].data, 0.0)


def test_narrow_halo_raises(grid, diagnosed):
    fields = {
        name: Field(name, grid, n_halo=1, time_levels=2) for name in ("rhou", "rho")
    }
    with pytest.raises(ConfigurationError, match="too narrow"):
        diagnosed.update(fields, CourantFields(grid, n_halo=1), dt=1.0)


@pytest.mark.parametrize(
    "terms",
    [
        pytest.param([VelocityTerm("rho", power=-1)], id="divisor_first"),
        pytest.param(
            [VelocityTerm("rhou"), VelocityTerm("rho", power=1)], id="two_numerators"
        ),
        pytest.param(
            [VelocityTerm("rhou"), VelocityTerm("rho", power=2)], id="squared"
        ),
    ],
)
def test_invalid_powers_raise(terms):
    with pytest.raises(ConfigurationError, match="power"):
        DiagnosedVelocity({Axis.X: terms})


def test_non_finite_ratio_raises(grid, fields, diagnosed):
    fields["rhou"].level(0).data[4, 0, 0] = np.inf
    with pytest.raises(NonFiniteError):
        diagnosed.update(fields, CourantFields(grid, n_halo=1), dt=1.0)


def test_axes_without_terms_have_zero_velocity(grid, fields):
    courants = CourantFields(grid, n_halo=1)
    courants[Axis.Y].data[:] = 3.0
    velocity = DiagnosedVelocity({Axis.X: [VelocityTerm("rhou")], Axis.Y: []})
    velocity.populate_courant_fields(courants, dt=1.0)
    velocity.update(fields, courants, dt=1.0)
    np.testing.assert_array_equal(courants[Axis.Y].data, 0.0)
    np.testing.assert_allclose(courants[Axis.X].data[:, 0, 0], np.arange(9) + 0.5)
