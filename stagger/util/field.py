import logging
from typing import List

import numpy as np

from ._exceptions import ConfigurationError
from .grid import Grid
from .quantity import Quantity


logger = logging.getLogger(__name__)

SUPPORTED_TIME_LEVELS = (2, 3)


def halo_extent(stencil_extent: int, dynamic: bool, constant_velocity: bool) -> int:
    """
    Halo width needed by a field.

    Args:
        stencil_extent: number of points spanned by the advection stencil
        dynamic: whether the field is used to diagnose the velocity
        constant_velocity: whether the velocity is fixed for the whole run

    Returns:
        n_halo: half the stencil width, plus one point for dynamic fields
            when the velocity is diagnosed
    """
    n_halo = (stencil_extent - 1) // 2
    if dynamic and not constant_velocity:
        # face values of the diagnosed velocity need one more cell
        n_halo += 1
    return n_halo


class Field:
    """
    A named advected quantity held at several time levels.

    Levels are addressed relative to a rolling current index n, so
    ``field.level(0)`` is the current state, ``field.level(1)`` the state being
    computed and ``field.level(-1)`` the previous state of three-level schemes.
    Cycling relabels storage, it never copies data, so any array fetched
    through ``level`` must be fetched again after ``cycle``.
    """

    def __init__(
        self,
        name: str,
        grid: Grid,
        n_halo: int,
        time_levels: int,
        units: str = "",
        dtype=np.float64,
    ):
        if time_levels not in SUPPORTED_TIME_LEVELS:
            raise ConfigurationError(
                f"time_levels must be one of {SUPPORTED_TIME_LEVELS}, "
                f"got {time_levels} for field {name}"
            )
        grid.check_halo(n_halo)
        self.name = name
        self.grid = grid
        self.n_halo = n_halo
        self._levels: List[Quantity] = [
            Quantity(
                np.zeros(grid.scalar_shape(n_halo), dtype=dtype),
                dims=grid.dims(),
                units=units,
                origin=grid.halo_widths(n_halo),
                extent=grid.extent,
            )
            for _ in range(time_levels)
        ]
        self._n = 0

    def __repr__(self):
        return (
            f"Field(name={self.name}, time_levels={self.time_levels}, "
            f"n_halo={self.n_halo}, extent={self.grid.extent})"
        )

    @property
    def time_levels(self) -> int:
        return len(self._levels)

    @property
    def units(self) -> str:
        return self._levels[0].units

    def level(self, offset: int) -> Quantity:
        """quantity stored for time level n + offset"""
        if abs(offset) >= self.time_levels:
            raise IndexError(
                f"level offset {offset} out of range for a field "
                f"with {self.time_levels} time levels"
            )
        return self._levels[(self._n + offset) % self.time_levels]

    def cycle(self):
        """
        Advance the current time level by relabelling storage.

        With two levels this swaps n and n+1, with three levels the storage of
        (n-1, n, n+1) becomes (n, n+1, n-1), so the oldest buffer is reused as
        the next future level.
        """
        if self.time_levels not in SUPPORTED_TIME_LEVELS:
            raise ConfigurationError(
                f"cannot cycle a field with {self.time_levels} time levels"
            )
        self._n = (self._n + 1) % self.time_levels

    def copy_level(self, source: int, target: int):
        """copy data, including halo, from level n + source to n + target"""
        self.level(target).data[:] = self.level(source).data

