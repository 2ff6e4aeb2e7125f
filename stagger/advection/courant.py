import abc
import dataclasses
import logging
from typing import Callable, Dict, Iterator, List, Mapping, Sequence, Set

import numpy as np

from stagger.util import (
    Axis,
    ConfigurationError,
    Field,
    Grid,
    Quantity,
    ensure_finite,
)


logger = logging.getLogger(__name__)

# velocity along an axis as a function of (axis, x, y, z) face positions
VelocityFunction = Callable[[int, np.ndarray, np.ndarray, np.ndarray], np.ndarray]


class CourantFields:
    """
    Face-centered Courant numbers along the three axes.

    Each array is one point wider than the scalar grid along its own axis and
    carries a halo of n_halo points on non-degenerate axes.
    """

    def __init__(self, grid: Grid, n_halo: int, dtype=np.float64):
        grid.check_halo(n_halo)
        self.grid = grid
        self.n_halo = n_halo
        self._quantities = tuple(
            Quantity(
                np.zeros(grid.vector_shape(axis, n_halo), dtype=dtype),
                dims=grid.dims(velocity_axis=axis),
                units="",
                origin=grid.halo_widths(n_halo),
                extent=grid.vector_shape(axis, 0),
            )
            for axis in Axis
        )

    def __getitem__(self, axis: int) -> Quantity:
        return self._quantities[axis]

    def __iter__(self) -> Iterator[Quantity]:
        return iter(self._quantities)

    def __len__(self) -> int:
        return len(self._quantities)

    @property
    def active(self) -> List[Quantity]:
        """Courant fields along non-degenerate axes"""
        return [self._quantities[axis] for axis in self.grid.active_axes]

    def max_abs(self) -> float:
        """largest Courant number magnitude in the compute domain"""
        values = [float(np.max(np.abs(courant.view[:]))) for courant in self.active]
        return max(values, default=0.0)


class VelocitySource(abc.ABC):
    """Provides the Courant numbers used to advect the fields."""

    @property
    @abc.abstractmethod
    def is_constant(self) -> bool:
        """whether the Courant numbers are fixed for the whole run"""
        ...

    @property
    def dynamic_fields(self) -> Set[str]:
        """names of fields the velocity is diagnosed from"""
        return set()

    @abc.abstractmethod
    def populate_courant_fields(self, courants: CourantFields, dt: float):
        """set the Courant numbers before the first step"""
        ...

    def update(self, fields: Mapping[str, Field], courants: CourantFields, dt: float):
        """recompute the Courant numbers from the current fields"""
        pass


class ConstantVelocity(VelocitySource):
    """
    Courant numbers computed once from an analytic velocity.

    Only the compute domain is populated, the halo must then be filled by
    a halo update so that it matches the periodic images.
    """

    def __init__(self, velocity: VelocityFunction):
        """
        Args:
            velocity: function of (axis, x, y, z) returning the velocity
                component along axis at the given face positions
        """
        self._velocity = velocity

    @property
    def is_constant(self) -> bool:
        return True

    def populate_courant_fields(self, courants: CourantFields, dt: float):
        grid = courants.grid
        for axis in Axis:
            positions = [
                grid.face_positions(other, 0)
                if other == axis
                else grid.cell_centers(other, 0)
                for other in Axis
            ]
            x, y, z = np.meshgrid(*positions, indexing="ij")
            velocity = np.broadcast_to(self._velocity(axis, x, y, z), x.shape)
            courants[axis].view[:] = velocity * dt / grid.spacing[axis]
            ensure_finite(courants[axis].view[:], f"Courant numbers along {axis.dim}")
        logger.info("maximum Courant number: %.3g", courants.max_abs())


@dataclasses.dataclass
class VelocityTerm:
    """
    One factor of a diagnosed velocity.

    Attributes:
        name: name of the advected field
        power: 1 for the momentum-like numerator, -1 for density-like divisors
    """

    name: str
    power: int = 1


class DiagnosedVelocity(VelocitySource):
    """
    Courant numbers diagnosed every step from advected fields.

    Along each axis the velocity is the ratio of a momentum-like field to
    the product of density-like fields, taken as 0 where the density is 0.
    The face value is extrapolated to time n + 1/2 from the ratios at n and
    n - 1, the ratio at n - 1 being the one computed on the previous step.
    """

    def __init__(self, velocity_map: Mapping[int, Sequence[VelocityTerm]]):
        """
        Args:
            velocity_map: terms of the velocity for each axis, the first with
                power 1 and any further ones with power -1; axes absent from
                the map have zero velocity
        """
        for axis, terms in velocity_map.items():
            if len(terms) == 0:
                continue
            if terms[0].power != 1:
                raise ConfigurationError(
                    f"first velocity term along {Axis(axis).dim} must have power 1, "
                    f"got {terms[0].power} for {terms[0].name}"
                )
            for term in terms[1:]:
                if term.power != -1:
                    raise ConfigurationError(
                        f"velocity divisor {term.name} along {Axis(axis).dim} must "
                        f"have power -1, got {term.power}"
                    )
        self._velocity_map = {
            Axis(axis): list(terms)
            for axis, terms in velocity_map.items()
            if len(terms) > 0
        }
        self._previous_ratio: Dict[Axis, np.ndarray] = {}

    @property
    def is_constant(self) -> bool:
        return False

    @property
    def dynamic_fields(self) -> Set[str]:
        return {
            term.name for terms in self._velocity_map.values() for term in terms
        }

    def populate_courant_fields(self, courants: CourantFields, dt: float):
        for courant in courants:
            courant.data[:] = 0.0

    def _ratio(self, fields: Mapping[str, Field], terms: List[VelocityTerm]):
        numerator = fields[terms[0].name].level(0).data
        if len(terms) == 1:
            return numerator.copy()
        denominator = np.ones_like(numerator)
        for term in terms[1:]:
            denominator = denominator * fields[term.name].level(0).data
        return np.divide(
            numerator,
            denominator,
            out=np.zeros_like(numerator),
            where=denominator != 0,
        )

    def update(self, fields: Mapping[str, Field], courants: CourantFields, dt: float):
        grid = courants.grid
        n_vector = grid.halo_widths(courants.n_halo)
        for axis, terms in self._velocity_map.items():
            if grid.is_degenerate(axis):
                continue
            ratio = self._ratio(fields, terms)
            ensure_finite(ratio, f"diagnosed velocity along {axis.dim}")
            previous = self._previous_ratio.get(axis, ratio)
            extrapolated = 1.5 * ratio - 0.5 * previous
            self._previous_ratio[axis] = ratio

            n_scalar = fields[terms[0].name].level(0).origin
            left = []
            for other in Axis:
                if n_scalar[other] < n_vector[other] + (1 if other == axis else 0):
                    raise ConfigurationError(
                        f"halo of {terms[0].name} is too narrow to diagnose "
                        f"Courant numbers with a halo of {courants.n_halo}"
                    )
                start = n_scalar[other] - n_vector[other]
                n_points = grid.extent[other] + 2 * n_vector[other]
                if other == axis:
                    # faces -h .. n + h lie between cells -h - 1 .. n + h
                    start -= 1
                    n_points += 1
                left.append(slice(start, start + n_points))
            right = list(left)
            right[axis] = slice(left[axis].start + 1, left[axis].stop + 1)

            courant = courants[axis]
            courant.data[:] = (
                dt
                / grid.spacing[axis]
                * 0.5
                * (extrapolated[tuple(left)] + extrapolated[tuple(right)])
            )
            ensure_finite(courant.data, f"Courant numbers along {axis.dim}")
