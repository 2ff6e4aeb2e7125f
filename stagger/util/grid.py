import dataclasses
import enum
from typing import Optional, Sequence, Tuple

import numpy as np

from . import constants
from ._exceptions import ConfigurationError


class Axis(enum.IntEnum):
    X = 0
    Y = 1
    Z = 2

    @property
    def dim(self) -> str:
        """name of the cell-centered dimension along this axis"""
        return constants.SCALAR_DIMS[self]

    @property
    def interface_dim(self) -> str:
        """name of the face-centered dimension along this axis"""
        return constants.INTERFACE_DIMS[self]


def shift(slices: Sequence[slice], axis: int, offset: int) -> Tuple[slice, ...]:
    """
    Move a tuple of slices by offset points along one axis.

    Every stencil in this package is written once against a generic axis;
    this is the only place the (i, j, k) permutation happens.

    Args:
        slices: one slice with integer start and stop per dimension
        axis: index of the dimension to move
        offset: number of points to move by, may be negative

    Returns:
        shifted: slices with the entry for axis moved by offset
    """
    shifted = list(slices)
    entry = shifted[axis]
    shifted[axis] = slice(entry.start + offset, entry.stop + offset)
    return tuple(shifted)


def widen(slices: Sequence[slice], axis: int, n_before: int, n_after: int):
    """Extend the slice along axis by n_before points at the start and
    n_after points at the end."""
    widened = list(slices)
    entry = widened[axis]
    widened[axis] = slice(entry.start - n_before, entry.stop + n_after)
    return tuple(widened)


@dataclasses.dataclass(frozen=True)
class Grid:
    """
    Index geometry of one subdomain of an Arakawa-C staggered grid.

    Scalars live at cell centers, the velocity component along each axis
    lives on the cell faces normal to that axis. Face arrays are indexed so
    that index f holds the face at position f - 1/2, which means the face
    i + 1/2 of cell i is found at ``i + P_HALF`` and the face i - 1/2 at
    ``i - M_HALF``. Along its own axis a face array has one more point than
    the matching scalar array.

    Axes with a single point are degenerate: they never carry a halo and
    stencils skip them, which is how 1D and 2D runs reuse the 3D code.

    Attributes:
        nx: number of cells in x owned by this subdomain
        ny: number of cells in y owned by this subdomain
        nz: number of cells in z owned by this subdomain
        dx: cell width in x
        dy: cell width in y
        dz: cell width in z
        offset: global index of the first owned cell along each axis
    """

    nx: int
    ny: int
    nz: int = 1
    dx: float = 1.0
    dy: float = 1.0
    dz: float = 1.0
    offset: Tuple[int, int, int] = (0, 0, 0)

    def __post_init__(self):
        for axis in Axis:
            if self.extent[axis] < 1:
                raise ConfigurationError(
                    f"extent in {axis.dim} must be positive, got {self.extent[axis]}"
                )
            if self.spacing[axis] <= 0:
                raise ConfigurationError(
                    f"spacing in {axis.dim} must be positive, "
                    f"got {self.spacing[axis]}"
                )

    @property
    def extent(self) -> Tuple[int, int, int]:
        """number of owned cells along each axis"""
        return (self.nx, self.ny, self.nz)

    @property
    def spacing(self) -> Tuple[float, float, float]:
        """cell width along each axis"""
        return (self.dx, self.dy, self.dz)

    @property
    def active_axes(self) -> Tuple[Axis, ...]:
        """axes with more than one cell"""
        return tuple(axis for axis in Axis if not self.is_degenerate(axis))

    def is_degenerate(self, axis: int) -> bool:
        return self.extent[axis] == 1

    def halo_widths(self, n_halo: int) -> Tuple[int, int, int]:
        """halo actually allocated along each axis for a requested width"""
        return tuple(0 if self.is_degenerate(axis) else n_halo for axis in Axis)

    def check_halo(self, n_halo: int):
        """
        Raise ConfigurationError if a halo of n_halo points cannot be filled
        from a single neighbor along every non-degenerate axis.
        """
        for axis in self.active_axes:
            if n_halo > self.extent[axis]:
                raise ConfigurationError(
                    f"halo length ({n_halo}) may not exceed domain extent "
                    f"in {axis.dim} ({self.extent[axis]})"
                )

    def scalar_range(self, axis: int, index_range: range, n_halo: int) -> range:
        """
        Storage range of cell-centered points for a logical range.

        Args:
            axis: axis of the range
            index_range: logical cell indices, 0 being the first owned cell
            n_halo: halo width to extend the range by, ignored on
                degenerate axes

        Returns:
            extended: logical indices including the halo
        """
        halo = self.halo_widths(n_halo)[axis]
        return range(index_range.start - halo, index_range.stop + halo)

    def vector_range(
        self, axis: int, index_range: range, velocity_axis: int, n_halo: int
    ) -> range:
        """
        Face-centered range matching a logical scalar range.

        Along velocity_axis the range spans the faces from
        ``start - 1/2`` to ``stop - 1/2`` inclusive, so it is one point wider
        than the scalar range. Along other axes it equals the scalar range.
        """
        scalar = self.scalar_range(axis, index_range, n_halo)
        if axis == velocity_axis:
            return range(
                scalar.start + constants.M_HALF, scalar.stop + constants.P_HALF
            )
        else:
            return scalar

    def domain(self, axis: int) -> range:
        """logical range of owned cells along axis"""
        return range(0, self.extent[axis])

    def scalar_shape(self, n_halo: int) -> Tuple[int, int, int]:
        return tuple(
            len(self.scalar_range(axis, self.domain(axis), n_halo)) for axis in Axis
        )

    def vector_shape(self, velocity_axis: int, n_halo: int) -> Tuple[int, int, int]:
        return tuple(
            len(self.vector_range(axis, self.domain(axis), velocity_axis, n_halo))
            for axis in Axis
        )

    def dims(self, velocity_axis: Optional[int] = None) -> Tuple[str, str, str]:
        """dimension names of a scalar array, or of a face array if
        velocity_axis is given"""
        return tuple(
            axis.interface_dim if axis == velocity_axis else axis.dim for axis in Axis
        )

    def cell_centers(self, axis: int, n_halo: int) -> np.ndarray:
        """physical position of every stored cell center along axis,
        cell 0 of the global domain being at position 0"""
        indices = np.asarray(self.scalar_range(axis, self.domain(axis), n_halo))
        return (indices + self.offset[axis]) * self.spacing[axis]

    def face_positions(self, axis: int, n_halo: int) -> np.ndarray:
        """physical position of every stored face along axis"""
        indices = np.asarray(
            self.vector_range(axis, self.domain(axis), axis, n_halo)
        )
        return (indices + self.offset[axis] - 0.5) * self.spacing[axis]
