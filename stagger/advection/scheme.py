import abc
from typing import Optional, Sequence, Tuple

import numpy as np

from stagger.util import M_HALF, P_HALF, Field, Grid, Quantity, shift

from .courant import CourantFields


def cell_slices(quantity: Quantity, grid: Grid) -> Tuple[slice, ...]:
    """
    Slices of quantity.data aligned with the owned cells of grid.

    For a face-centered quantity the slices select the faces i - 1/2 of each
    owned cell i, shifting them by P_HALF along the face axis gives the faces
    i + 1/2.
    """
    return tuple(
        slice(origin, origin + n) for origin, n in zip(quantity.origin, grid.extent)
    )


def donor_cell_flux(psi_left, psi_right, courant):
    """upwind flux through a face with Courant number courant"""
    return np.maximum(courant, 0.0) * psi_left + np.minimum(courant, 0.0) * psi_right


def donor_cell_divergence(
    psi: np.ndarray,
    psi_cells: Tuple[slice, ...],
    velocities: Sequence[Quantity],
    grid: Grid,
) -> np.ndarray:
    """
    Net upwind flux out of each owned cell.

    Args:
        psi: advected field including halo
        psi_cells: slices of psi covering the owned cells
        velocities: face-centered Courant numbers (or antidiffusive
            velocities) along each axis
        grid: grid of the owned subdomain

    Returns:
        divergence: array shaped like the owned cells
    """
    divergence = np.zeros(grid.extent, dtype=psi.dtype)
    for axis in grid.active_axes:
        velocity = velocities[axis]
        faces = cell_slices(velocity, grid)
        divergence += donor_cell_flux(
            psi[psi_cells],
            psi[shift(psi_cells, axis, 1)],
            velocity.data[shift(faces, axis, P_HALF)],
        ) - donor_cell_flux(
            psi[shift(psi_cells, axis, -1)],
            psi[psi_cells],
            velocity.data[shift(faces, axis, -M_HALF)],
        )
    return divergence


class AdvectionScheme(abc.ABC):
    """
    An advection operator advancing a field from level n to level n + 1.

    Operators update level n + 1 in place, so the caller seeds it with
    ``prepare`` before every pass. A scheme with several passes is called
    once per pass, with the result of the previous pass cycled into level n
    and its halo refreshed in between.
    """

    @property
    @abc.abstractmethod
    def stencil_extent(self) -> int:
        """number of points along an axis read by the stencil"""
        ...

    @property
    @abc.abstractmethod
    def time_levels(self) -> int:
        """number of time levels the advected fields must hold"""
        ...

    @property
    @abc.abstractmethod
    def num_steps(self) -> int:
        """number of passes making up one advection"""
        ...

    @property
    def startup_scheme(self) -> Optional["AdvectionScheme"]:
        """scheme used for the first time step, when the scheme needs
        a past time level which does not exist yet"""
        return None

    def prepare(self, field: Field):
        """seed level n + 1 with the state the flux divergence is taken from"""
        field.copy_level(0, 1)

    @abc.abstractmethod
    def apply(self, field: Field, courants: CourantFields, step: int):
        """
        Perform one pass, updating level n + 1 of field in place.

        Args:
            field: advected field, halo of level n must be up to date
            courants: face-centered Courant numbers, including halo
            step: pass number, starting at 1
        """
        ...

    def _check_call(self, field: Field, step: int):
        assert (
            1 <= step <= self.num_steps
        ), f"pass {step} out of range for {self} with {self.num_steps} passes"
        assert field.time_levels == self.time_levels, (
            f"{self} requires {self.time_levels} time levels, "
            f"field {field.name} has {field.time_levels}"
        )

    def __repr__(self):
        return f"{type(self).__name__}()"
