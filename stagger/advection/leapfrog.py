from stagger.util import M_HALF, P_HALF, Field, shift

from .courant import CourantFields
from .scheme import AdvectionScheme, cell_slices
from .upstream import Upstream


class _UpstreamStartup(Upstream):
    """donor-cell step for three-level fields which have no past level yet"""

    @property
    def time_levels(self) -> int:
        return 3


class Leapfrog(AdvectionScheme):
    """
    Centered-in-time, centered-in-space scheme.

    Level n + 1 is computed from level n - 1 and the centered difference of
    level n, using the average of the Courant numbers on the two faces of
    each cell. The first step of a run has no level n - 1 and is taken with
    the upstream scheme instead.
    """

    def __init__(self):
        self._startup_scheme = _UpstreamStartup()

    @property
    def stencil_extent(self) -> int:
        return 3

    @property
    def time_levels(self) -> int:
        return 3

    @property
    def num_steps(self) -> int:
        return 1

    @property
    def startup_scheme(self) -> Upstream:
        return self._startup_scheme

    def prepare(self, field: Field):
        field.copy_level(-1, 1)

    def apply(self, field: Field, courants: CourantFields, step: int):
        self._check_call(field, step)
        assert self.num_steps == 1, "leapfrog is only valid as a single pass"
        grid = field.grid
        psi = field.level(0)
        psi_cells = cell_slices(psi, grid)
        result = field.level(1).data
        for axis in grid.active_axes:
            courant = courants[axis]
            faces = cell_slices(courant, grid)
            mean_courant = 0.5 * (
                courant.data[shift(faces, axis, P_HALF)]
                + courant.data[shift(faces, axis, -M_HALF)]
            )
            result[psi_cells] -= mean_courant * (
                psi.data[shift(psi_cells, axis, 1)]
                - psi.data[shift(psi_cells, axis, -1)]
            )
