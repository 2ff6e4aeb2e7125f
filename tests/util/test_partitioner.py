import numpy as np
import pytest

from stagger.util import (
    BOTTOM,
    EAST,
    NORTH,
    SOUTH,
    TOP,
    WEST,
    X_DIM,
    X_INTERFACE_DIM,
    Y_DIM,
    CartesianPartitioner,
    ConfigurationError,
    Grid,
    Quantity,
    QuantityHaloSpec,
)


@pytest.fixture
def partitioner():
    return CartesianPartitioner(layout=(3, 2))


def test_ranks_numbered_along_x_first(partitioner):
    assert partitioner.total_ranks == 6
    assert partitioner.subdomain_index(0) == (0, 0)
    assert partitioner.subdomain_index(2) == (2, 0)
    assert partitioner.subdomain_index(4) == (1, 1)
    for rank in range(partitioner.total_ranks):
        assert partitioner.rank_at(*partitioner.subdomain_index(rank)) == rank


@pytest.mark.parametrize(
    "rank, boundary_type, to_rank",
    [
        pytest.param(0, WEST, 2, id="west_wraps"),
        pytest.param(0, EAST, 1, id="east"),
        pytest.param(0, SOUTH, 3, id="south_wraps"),
        pytest.param(0, NORTH, 3, id="north"),
        pytest.param(5, EAST, 3, id="east_wraps"),
        pytest.param(4, WEST, 3, id="west"),
        pytest.param(4, BOTTOM, 4, id="bottom_is_self"),
        pytest.param(4, TOP, 4, id="top_is_self"),
    ],
)
def test_boundary_neighbors(partitioner, rank, boundary_type, to_rank):
    boundary = partitioner.boundary(boundary_type, rank)
    assert boundary.from_rank == rank
    assert boundary.to_rank == to_rank
    assert boundary.boundary_type == boundary_type


def test_subdomain_grid(partitioner):
    global_grid = Grid(nx=12, ny=8, nz=3, dx=2.0)
    grid = partitioner.subdomain_grid(global_grid, 5)
    assert grid.extent == (4, 4, 3)
    assert grid.offset == (8, 4, 0)
    assert grid.dx == 2.0


def test_uneven_layout_raises(partitioner):
    with pytest.raises(ConfigurationError, match="evenly divide"):
        partitioner.subdomain_grid(Grid(nx=10, ny=8), 0)


@pytest.mark.parametrize("layout", [(0, 1), (2,), (1, -1)])
def test_invalid_layout_raises(layout):
    with pytest.raises(ConfigurationError):
        CartesianPartitioner(layout=layout)


def test_rank_out_of_range(partitioner):
    with pytest.raises(ValueError):
        partitioner.subdomain_index(6)


def test_boundary_slices_scalar(partitioner):
    quantity = Quantity(
        np.zeros((8, 8)), dims=(X_DIM, Y_DIM), units="", origin=(2, 2), extent=(4, 4)
    )
    spec = QuantityHaloSpec.from_quantity(quantity, n_points=2)
    west = partitioner.boundary(WEST, 0)
    east = partitioner.boundary(EAST, 0)
    # x is exchanged first, so only the compute domain along y is sent
    assert west.send_slice(spec) == (slice(2, 4), slice(2, 6))
    assert west.recv_slice(spec) == (slice(0, 2), slice(2, 6))
    assert east.send_slice(spec) == (slice(4, 6), slice(2, 6))
    assert east.recv_slice(spec) == (slice(6, 8), slice(2, 6))
    assert west.send_tag == east.recv_tag


def test_boundary_slices_interface(partitioner):
    quantity = Quantity(
        np.zeros((7, 6)),
        dims=(X_INTERFACE_DIM, Y_DIM),
        units="",
        origin=(1, 1),
        extent=(5, 4),
    )
    spec = QuantityHaloSpec.from_quantity(quantity, n_points=1)
    west = partitioner.boundary(WEST, 0)
    east = partitioner.boundary(EAST, 0)
    # the faces at either end of the compute domain are shared with neighbors
    assert west.send_slice(spec)[0] == slice(2, 3)
    assert east.recv_slice(spec)[0] == slice(6, 7)
    assert east.send_slice(spec)[0] == slice(4, 5)
    assert west.recv_slice(spec)[0] == slice(0, 1)


def test_spec_rejects_too_many_points():
    quantity = Quantity(
        np.zeros((6, 6)), dims=(X_DIM, Y_DIM), units="", origin=(1, 1), extent=(4, 4)
    )
    with pytest.raises(ValueError, match="halo points"):
        QuantityHaloSpec.from_quantity(quantity, n_points=2)
