import functools
from typing import Tuple

from . import constants
from ._exceptions import ConfigurationError
from .boundary import Boundary
from .grid import Grid


class CartesianPartitioner:
    """
    Splits a periodic domain into equal subdomains along x and y.

    Ranks are numbered along x first, so rank = j * layout[0] + i for the
    subdomain with index (i, j). The vertical is never decomposed: the
    bottom and top neighbors of every rank are the rank itself.
    """

    def __init__(self, layout: Tuple[int, int]):
        """
        Create an object for subdomain decomposition.

        Args:
            layout: the number of ranks along x and along y
        """
        if len(layout) != 2 or layout[0] < 1 or layout[1] < 1:
            raise ConfigurationError(
                f"layout must be two positive rank counts, got {layout}"
            )
        self.layout = tuple(layout)

    def __repr__(self):
        return f"CartesianPartitioner(layout={self.layout})"

    @property
    def total_ranks(self) -> int:
        return self.layout[0] * self.layout[1]

    def subdomain_index(self, rank: int) -> Tuple[int, int]:
        """return the (x, y) position of the subdomain owned by rank"""
        if not 0 <= rank < self.total_ranks:
            raise ValueError(
                f"rank {rank} out of range for layout {self.layout}"
            )
        return (rank % self.layout[0], rank // self.layout[0])

    def rank_at(self, i: int, j: int) -> int:
        """rank owning subdomain (i, j), with periodic wrap-around"""
        return (j % self.layout[1]) * self.layout[0] + (i % self.layout[0])

    def subdomain_extent(self, global_extent: Tuple[int, int, int]):
        """
        Extent of each subdomain for a global extent.

        Raises:
            ConfigurationError: if the layout does not divide the global extent
        """
        extent = []
        for axis, n in enumerate(global_extent):
            n_ranks = self.layout[axis] if axis < 2 else 1
            if n % n_ranks != 0:
                raise ConfigurationError(
                    f"{n_ranks} ranks cannot evenly divide {n} cells "
                    f"along axis {axis}"
                )
            extent.append(n // n_ranks)
        return tuple(extent)

    def subdomain_grid(self, global_grid: Grid, rank: int) -> Grid:
        """the Grid owned by rank when global_grid is decomposed"""
        nx, ny, nz = self.subdomain_extent(global_grid.extent)
        i, j = self.subdomain_index(rank)
        return Grid(
            nx=nx,
            ny=ny,
            nz=nz,
            dx=global_grid.dx,
            dy=global_grid.dy,
            dz=global_grid.dz,
            offset=(
                global_grid.offset[0] + i * nx,
                global_grid.offset[1] + j * ny,
                global_grid.offset[2],
            ),
        )

    @functools.lru_cache()
    def boundary(self, boundary_type: int, rank: int) -> Boundary:
        """Returns a boundary of the requested type for a given rank.

        Args:
            boundary_type: one of the six boundary type constants
            rank: processor rank

        Returns:
            boundary
        """
        i, j = self.subdomain_index(rank)
        to_rank = {
            constants.WEST: lambda: self.rank_at(i - 1, j),
            constants.EAST: lambda: self.rank_at(i + 1, j),
            constants.SOUTH: lambda: self.rank_at(i, j - 1),
            constants.NORTH: lambda: self.rank_at(i, j + 1),
            constants.BOTTOM: lambda: rank,
            constants.TOP: lambda: rank,
        }[boundary_type]()
        return Boundary(from_rank=rank, to_rank=to_rank, boundary_type=boundary_type)
