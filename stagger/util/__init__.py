from ._exceptions import ConfigurationError, NonFiniteError, ensure_finite
from ._timing import NullTimer, Timer
from .boundary import Boundary
from .comm import Comm, Request
from .communicator import Communicator
from .constants import (
    BOTTOM,
    BOUNDARY_TYPES,
    EAST,
    INTERFACE_DIMS,
    M_HALF,
    NORTH,
    P_HALF,
    SOUTH,
    TOP,
    WEST,
    X_DIM,
    X_INTERFACE_DIM,
    Y_DIM,
    Y_INTERFACE_DIM,
    Z_DIM,
    Z_INTERFACE_DIM,
)
from .field import Field, halo_extent
from .grid import Axis, Grid, shift, widen
from .halo_spec import QuantityHaloSpec
from .halo_updater import HALO_PHASES, HaloUpdater
from .local_comm import ConcurrencyError, LocalComm
from .mpi import MPIComm
from .null_comm import NullComm
from .partitioner import CartesianPartitioner
from .quantity import Quantity, QuantityMetadata


__version__ = "0.1.0"
