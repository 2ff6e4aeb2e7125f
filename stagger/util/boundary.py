import dataclasses
from typing import Tuple

from . import constants
from .halo_spec import QuantityHaloSpec


_BOUNDARY_AXIS = {
    constants.WEST: 0,
    constants.EAST: 0,
    constants.SOUTH: 1,
    constants.NORTH: 1,
    constants.BOTTOM: 2,
    constants.TOP: 2,
}

_LOWER_BOUNDARIES = (constants.WEST, constants.SOUTH, constants.BOTTOM)


@dataclasses.dataclass
class Boundary:
    """
    One entry of the halo map: the rank on the other side of one of the six
    faces of a subdomain.

    Exchanges happen axis by axis. The slices along axes exchanged before this
    boundary's axis cover the whole array including halo, the slices along
    later axes cover only the compute domain. Exchanging x, then y, then z
    therefore fills edges and corners of the halo too.

    Attributes:
        from_rank: rank owning the subdomain this boundary belongs to
        to_rank: rank across the boundary, possibly from_rank itself
        boundary_type: one of the constants WEST, EAST, SOUTH, NORTH,
            BOTTOM or TOP
    """

    from_rank: int
    to_rank: int
    boundary_type: int

    @property
    def axis(self) -> int:
        """axis normal to the boundary"""
        return _BOUNDARY_AXIS[self.boundary_type]

    @property
    def is_lower(self) -> bool:
        """whether the boundary is at the low-index end of its axis"""
        return self.boundary_type in _LOWER_BOUNDARIES

    @property
    def recv_tag(self) -> int:
        """tag of messages filling this side's halo"""
        return self.boundary_type

    @property
    def send_tag(self) -> int:
        """tag of messages sent across this boundary, which fill the
        opposite side of the neighbor's halo"""
        return constants.OPPOSITE_BOUNDARY[self.boundary_type]

    def send_slice(self, spec: QuantityHaloSpec) -> Tuple[slice, ...]:
        """slices of the compute domain sent across this boundary"""
        n_halo = spec.n_halo[self.axis]
        origin = spec.origin[self.axis]
        n_cells = spec.n_cells[self.axis]
        if self.is_lower:
            # the far halo of a face array starts after the shared face
            start = origin + 1 if spec.interface[self.axis] else origin
        else:
            start = origin + n_cells - n_halo
        return self._slices(spec, slice(start, start + n_halo))

    def recv_slice(self, spec: QuantityHaloSpec) -> Tuple[slice, ...]:
        """slices of the halo filled from across this boundary"""
        n_halo = spec.n_halo[self.axis]
        origin = spec.origin[self.axis]
        if self.is_lower:
            start = origin - n_halo
        else:
            start = origin + spec.extent[self.axis]
        return self._slices(spec, slice(start, start + n_halo))

    def _slices(self, spec: QuantityHaloSpec, normal: slice) -> Tuple[slice, ...]:
        slices = []
        for axis in range(len(spec.shape)):
            if axis == self.axis:
                slices.append(normal)
            elif axis < self.axis:
                slices.append(slice(0, spec.shape[axis]))
            else:
                slices.append(
                    slice(spec.origin[axis], spec.origin[axis] + spec.extent[axis])
                )
        return tuple(slices)
