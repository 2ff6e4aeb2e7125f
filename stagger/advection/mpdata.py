import logging
from typing import Callable, Dict, List, Mapping, Optional, Tuple, Union

import numpy as np

from stagger.util import (
    M_HALF,
    P_HALF,
    ConfigurationError,
    Field,
    Quantity,
    shift,
    widen,
)

from .courant import CourantFields
from .scheme import AdvectionScheme, cell_slices, donor_cell_divergence


logger = logging.getLogger(__name__)

HaloUpdate = Callable[[List[Quantity]], None]
Velocities = Union[CourantFields, Mapping[int, Quantity]]


def normalized_difference(high: np.ndarray, low: np.ndarray) -> np.ndarray:
    """
    (high - low) / (high + low), or exactly 0 where the sum is not positive.
    """
    total = high + low
    return np.divide(high - low, total, out=np.zeros_like(total), where=total > 0)


class MPDATA(AdvectionScheme):
    """
    Multidimensional positive definite advection transport algorithm.

    The first pass is the upstream scheme. Each later pass estimates the
    numerical diffusion of the pass before it as an antidiffusive
    pseudo-velocity on every face,

        V = (|U| - U^2) A - U * sum_b(mean(U_b) B_b)

    where U are the previous pass's velocities (the Courant numbers for the
    second pass), A the normalized difference of the field across the face
    and B_b the normalized difference across the face's neighbors along each
    other axis b, and applies the upstream scheme with V.

    Antidiffusive velocities are halo-exchanged after each pass so the next
    pass can average them across faces. They are kept in arrays allocated on
    first use; with caching enabled those arrays live as long as the scheme,
    otherwise they are dropped at the start of every advection.
    """

    def __init__(
        self,
        iord: int = 2,
        cache: bool = True,
        positive_definite: bool = True,
        halo_update: Optional[HaloUpdate] = None,
    ):
        """
        Args:
            iord: number of passes, 1 is the upstream scheme
            cache: reuse antidiffusive velocity arrays across advections
            positive_definite: if False, gradients are taken of the absolute
                value of the field so that signed fields can be advected
            halo_update: function filling the halo of a list of face-centered
                quantities, required when iord > 2
        """
        if iord <= 0:
            raise ConfigurationError(f"iord must be positive, got {iord}")
        if iord > 2 and halo_update is None:
            raise ConfigurationError(
                "MPDATA with more than two passes needs a halo update "
                "for its antidiffusive velocities"
            )
        self.iord = iord
        self.cache = cache
        self.positive_definite = positive_definite
        self._halo_update = halo_update
        self._velocities: Dict[Tuple[int, int], Quantity] = {}

    def __repr__(self):
        return (
            f"MPDATA(iord={self.iord}, cache={self.cache}, "
            f"positive_definite={self.positive_definite})"
        )

    @property
    def stencil_extent(self) -> int:
        return 3

    @property
    def time_levels(self) -> int:
        return 2

    @property
    def num_steps(self) -> int:
        return self.iord

    def antidiffusive_velocity(self, step: int, axis: int, like: Quantity) -> Quantity:
        """
        Array holding the antidiffusive velocity of a pass along an axis,
        allocated on first use and reallocated if like has another shape.
        """
        key = (step, axis)
        velocity = self._velocities.get(key)
        if velocity is None or velocity.data.shape != like.data.shape:
            logger.debug("allocating antidiffusive velocity for pass %d", step)
            velocity = Quantity(
                np.zeros_like(like.data),
                dims=like.dims,
                units=like.units,
                origin=like.origin,
                extent=like.extent,
            )
            self._velocities[key] = velocity
        return velocity

    def apply(self, field: Field, courants: CourantFields, step: int):
        self._check_call(field, step)
        if step == 1:
            if not self.cache:
                self._velocities.clear()
            velocities: Velocities = courants
        else:
            if step == 2:
                previous: Velocities = courants
            else:
                previous = {
                    axis: self._velocities[(step - 1, axis)]
                    for axis in field.grid.active_axes
                }
            velocities = self._compute_antidiffusive_velocities(field, previous, step)
        psi = field.level(0)
        psi_cells = cell_slices(psi, field.grid)
        field.level(1).data[psi_cells] -= donor_cell_divergence(
            psi.data, psi_cells, velocities, field.grid
        )

    def _compute_antidiffusive_velocities(
        self, field: Field, previous: Velocities, step: int
    ) -> Dict[int, Quantity]:
        grid = field.grid
        psi = field.level(0)
        values = psi.data if self.positive_definite else np.abs(psi.data)
        psi_cells = cell_slices(psi, grid)
        result = {}
        for axis in grid.active_axes:
            # the faces between cells i and i + 1 for i in -1 .. n - 1
            left = widen(psi_cells, axis, 1, 0)
            right = shift(left, axis, 1)
            courant = previous[axis]
            faces = shift(widen(cell_slices(courant, grid), axis, 1, 0), axis, P_HALF)
            u = courant.data[faces]
            gradient = normalized_difference(values[right], values[left])
            cross = np.zeros_like(u)
            for other in grid.active_axes:
                if other == axis:
                    continue
                above = values[shift(right, other, 1)] + values[shift(left, other, 1)]
                below = values[shift(right, other, -1)] + values[shift(left, other, -1)]
                transverse_gradient = 0.5 * normalized_difference(above, below)
                transverse = previous[other]
                left_cells = widen(cell_slices(transverse, grid), axis, 1, 0)
                right_cells = shift(left_cells, axis, 1)
                mean_velocity = 0.25 * (
                    transverse.data[shift(right_cells, other, P_HALF)]
                    + transverse.data[shift(left_cells, other, P_HALF)]
                    + transverse.data[shift(right_cells, other, -M_HALF)]
                    + transverse.data[shift(left_cells, other, -M_HALF)]
                )
                cross += mean_velocity * transverse_gradient
            velocity = self.antidiffusive_velocity(step, axis, courant)
            velocity.data[faces] = (np.abs(u) - u ** 2) * gradient - u * cross
            result[axis] = velocity
        if step < self.num_steps and self._halo_update is not None:
            self._halo_update([result[axis] for axis in grid.active_axes])
        return result
