import numpy as np
import pytest

from stagger.advection import ConstantVelocity, CourantFields, Leapfrog, Upstream
from stagger.util import Field, Grid


def get_courants(grid, communicator, courant_x, dt=1.0):
    courants = CourantFields(grid, n_halo=1)
    ConstantVelocity(
        lambda axis, x, y, z: courant_x if axis == 0 else 0.0
    ).populate_courant_fields(courants, dt)
    communicator.halo_update(courants.active)
    return courants


def test_leapfrog_step_by_hand(communicator):
    grid = Grid(nx=5, ny=1)
    field = Field("psi", grid, n_halo=1, time_levels=3)
    field.level(0).view[:, 0, 0] = [0.0, 1.0, 0.0, 0.0, 0.0]
    communicator.fill_halos(field, level=0)
    courants = get_courants(grid, communicator, 0.5)
    scheme = Leapfrog()
    scheme.prepare(field)
    scheme.apply(field, courants, 1)
    np.testing.assert_allclose(
        field.level(1).view[:, 0, 0], [-0.5, 0.0, 0.5, 0.0, 0.0]
    )


def test_leapfrog_centered_difference_wraps(communicator):
    grid = Grid(nx=5, ny=1)
    field = Field("psi", grid, n_halo=1, time_levels=3)
    field.level(0).view[:, 0, 0] = [1.0, 0.0, 0.0, 0.0, 0.0]
    field.level(-1).view[:] = 2.0
    communicator.fill_halos(field, level=0)
    courants = get_courants(grid, communicator, 0.25)
    scheme = Leapfrog()
    scheme.prepare(field)
    scheme.apply(field, courants, 1)
    np.testing.assert_allclose(
        field.level(1).view[:, 0, 0], [2.0, 2.25, 2.0, 2.0, 1.75]
    )


def test_startup_scheme_is_upstream():
    scheme = Leapfrog()
    assert isinstance(scheme.startup_scheme, Upstream)
    assert scheme.startup_scheme.time_levels == scheme.time_levels == 3


def test_leapfrog_conserves_sum(communicator, advect):
    np.random.seed(1)
    grid = Grid(nx=12, ny=10)
    field = Field("psi", grid, n_halo=1, time_levels=3)
    field.level(0).view[:] = np.random.uniform(size=grid.extent)
    communicator.fill_halos(field, level=0)
    initial_sum = np.sum(field.level(0).view[:])
    courants = get_courants(grid, communicator, 0.3)
    advect(field, Leapfrog(), courants, n_steps=10)
    np.testing.assert_allclose(
        np.sum(field.level(0).view[:]), initial_sum, rtol=1e-12
    )


def test_leapfrog_rejects_two_level_field():
    grid = Grid(nx=4, ny=4)
    field = Field("psi", grid, n_halo=1, time_levels=2)
    with pytest.raises(AssertionError, match="time levels"):
        Leapfrog().apply(field, CourantFields(grid, n_halo=1), 1)


def test_leapfrog_has_a_single_pass():
    grid = Grid(nx=4, ny=4)
    field = Field("psi", grid, n_halo=1, time_levels=3)
    with pytest.raises(AssertionError, match="out of range"):
        Leapfrog().apply(field, CourantFields(grid, n_halo=1), 2)
