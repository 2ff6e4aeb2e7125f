from stagger.util import Field

from .courant import CourantFields
from .scheme import AdvectionScheme, cell_slices, donor_cell_divergence


class Upstream(AdvectionScheme):
    """
    First-order donor-cell scheme in flux form.

    Conserves the domain sum under periodic boundaries and keeps a
    non-negative field non-negative for Courant numbers of magnitude up to 1.
    """

    @property
    def stencil_extent(self) -> int:
        return 3

    @property
    def time_levels(self) -> int:
        return 2

    @property
    def num_steps(self) -> int:
        return 1

    def apply(self, field: Field, courants: CourantFields, step: int):
        self._check_call(field, step)
        psi = field.level(0)
        psi_cells = cell_slices(psi, field.grid)
        field.level(1).data[psi_cells] -= donor_cell_divergence(
            psi.data, psi_cells, courants, field.grid
        )
