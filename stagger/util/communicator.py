import logging
from typing import Dict, List, Mapping, Optional, Tuple, Union

from . import constants
from ._exceptions import ConfigurationError
from ._timing import NullTimer, Timer
from .boundary import Boundary
from .comm import Comm
from .field import Field
from .grid import Grid
from .halo_spec import QuantityHaloSpec
from .halo_updater import HaloUpdater
from .partitioner import CartesianPartitioner
from .quantity import Quantity


logger = logging.getLogger(__name__)


class Communicator:
    """
    Performs halo exchange for the subdomain of one rank.

    With a single rank every boundary points back at the same rank, so
    a halo update is a periodic wrap of the subdomain onto itself.
    """

    def __init__(
        self,
        comm: Comm,
        partitioner: CartesianPartitioner,
        timer: Optional[Timer] = None,
    ):
        """Initialize a Communicator.

        Args:
            comm: mpi4py.Comm-like object
            partitioner: domain partitioner
            timer: Timer which halo exchange timings are recorded into
        """
        if comm.Get_size() != partitioner.total_ranks:
            raise ConfigurationError(
                f"was given a partitioner for {partitioner.total_ranks} ranks but a "
                f"comm object with only {comm.Get_size()} ranks, are we running "
                "with mpi and the correct number of ranks?"
            )
        self.comm = comm
        self.partitioner = partitioner
        self.timer: Timer = timer if timer is not None else NullTimer()
        self._boundaries: Optional[Dict[int, Boundary]] = None
        self._halo_updaters: Dict[Tuple[QuantityHaloSpec, ...], HaloUpdater] = {}
        self._last_halo_tag = 0

    @classmethod
    def from_layout(
        cls, comm: Comm, layout: Tuple[int, int], timer: Optional[Timer] = None
    ) -> "Communicator":
        partitioner = CartesianPartitioner(layout=layout)
        return cls(comm=comm, partitioner=partitioner, timer=timer)

    @property
    def rank(self) -> int:
        """rank of the current process within this communicator"""
        return self.comm.Get_rank()

    @property
    def boundaries(self) -> Mapping[int, Boundary]:
        """the halo map: neighbor across each of the six boundaries"""
        if self._boundaries is None:
            self._boundaries = {
                boundary_type: self.partitioner.boundary(boundary_type, self.rank)
                for boundary_type in constants.BOUNDARY_TYPES
            }
        return self._boundaries

    def subdomain_grid(self, global_grid: Grid) -> Grid:
        """the part of global_grid owned by this rank"""
        return self.partitioner.subdomain_grid(global_grid, self.rank)

    def _get_halo_tag(self) -> int:
        self._last_halo_tag += 1
        return self._last_halo_tag

    def get_halo_updater(
        self, quantities: List[Quantity], n_points: Optional[int] = None
    ) -> HaloUpdater:
        """
        Get an updater for quantities laid out like the given ones.

        Updaters are cached by memory layout, all ranks must request them
        in the same order so their message tags agree.

        Args:
            quantities: quantities to be exchanged together
            n_points: number of halo points to update, by default the whole
                halo of each quantity
        """
        specifications = tuple(
            QuantityHaloSpec.from_quantity(
                quantity,
                n_points if n_points is not None else max(quantity.origin),
            )
            for quantity in quantities
        )
        if specifications not in self._halo_updaters:
            logger.debug(
                "creating halo updater for %d quantities on rank %s",
                len(specifications),
                self.rank,
            )
            self._halo_updaters[specifications] = HaloUpdater(
                self.comm,
                specifications,
                self.boundaries,
                tag=self._get_halo_tag(),
                timer=self.timer,
            )
        return self._halo_updaters[specifications]

    def halo_update(
        self,
        quantity: Union[Quantity, List[Quantity]],
        n_points: Optional[int] = None,
    ):
        """Perform a halo update on a quantity or quantities

        Args:
            quantity: the quantity to be updated
            n_points: how many halo points to update, starting from the interior,
                by default the whole halo
        """
        if isinstance(quantity, Quantity):
            quantities = [quantity]
        else:
            quantities = quantity
        halo_updater = self.get_halo_updater(quantities, n_points)
        halo_updater.update([q.data for q in quantities])

    def fill_halos(self, field: Field, level: int = 0):
        """Refresh the halo of time level n + level of field from its
        neighbors, or from its own opposite edges under periodic wrap."""
        self.halo_update(field.level(level))
