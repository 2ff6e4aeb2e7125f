from typing import List, Mapping, Optional, Sequence, Tuple

import numpy as np

from . import constants
from ._timing import NullTimer, Timer
from .boundary import Boundary
from .comm import Comm, Request
from .halo_spec import QuantityHaloSpec


# axes are exchanged one after the other so later axes carry the halo of
# earlier ones, filling edges and corners
HALO_PHASES = (
    constants.X_BOUNDARY_TYPES,
    constants.Y_BOUNDARY_TYPES,
    constants.Z_BOUNDARY_TYPES,
)

_MAX_QUANTITIES_PER_TAG = 100

_HaloRecvTuple = Tuple[Request, np.ndarray, np.ndarray, Tuple[slice, ...]]


class HaloUpdater:
    """Exchange halo information between ranks.

    The updater is built once for a list of memory specifications and reused
    for every exchange of arrays matching them. Each phase of the exchange
    (x, y, then z) posts receives first, then packs and sends the edges of the
    compute domain, and unpacks received data into the halo on wait.

    Arrays are held between start and wait, so every start must be followed
    by a wait before the next start.
    """

    def __init__(
        self,
        comm: Comm,
        specifications: Sequence[QuantityHaloSpec],
        boundaries: Mapping[int, Boundary],
        tag: int = 0,
        timer: Optional[Timer] = None,
    ):
        """Build the updater.

        Args:
            comm: mpi4py-style comm responsible for send/recv commands
            specifications: memory layout of each array to exchange
            boundaries: neighbor of this rank for each boundary type
            tag: network tag distinguishing this updater's messages
            timer: timing operations
        """
        if len(specifications) > _MAX_QUANTITIES_PER_TAG:
            raise ValueError(
                f"cannot exchange more than {_MAX_QUANTITIES_PER_TAG} "
                f"quantities at once, got {len(specifications)}"
            )
        self._comm = comm
        self._specifications = tuple(specifications)
        self._boundaries = boundaries
        self._tag = tag
        self._timer: Timer = timer if timer is not None else NullTimer()
        self._recv_requests: Optional[List[_HaloRecvTuple]] = None
        self._send_requests: List[Request] = []
        self._send_buffers: List[np.ndarray] = []

    def _message_tag(self, i_quantity: int, boundary_tag: int) -> int:
        return (
            self._tag * _MAX_QUANTITIES_PER_TAG + i_quantity
        ) * len(constants.BOUNDARY_TYPES) + boundary_tag

    def update(self, arrays: Sequence[np.ndarray]):
        """Exchange the halos of all axes and block until finished."""
        for boundary_types in HALO_PHASES:
            self.start(arrays, boundary_types)
            self.wait()

    def start(
        self,
        arrays: Sequence[np.ndarray],
        boundary_types: Sequence[int],
    ):
        """
        Start the exchange across some boundaries.

        Args:
            arrays: one array for each specification given at construction
            boundary_types: boundaries to exchange across, normally the pair
                of boundaries of one axis
        """
        if self._recv_requests is not None:
            raise RuntimeError(
                "Previous exchange hasn't been properly finished, "
                "e.g. previous start() call didn't have a wait() call."
            )
        if len(arrays) != len(self._specifications):
            raise ValueError(
                f"received {len(arrays)} arrays for an updater built "
                f"for {len(self._specifications)}"
            )
        exchanges = []
        for i_quantity, (array, spec) in enumerate(zip(arrays, self._specifications)):
            if array.shape != spec.shape:
                raise ValueError(
                    f"array of shape {array.shape} does not match "
                    f"specification shape {spec.shape}"
                )
            for boundary_type in boundary_types:
                boundary = self._boundaries[boundary_type]
                if spec.n_halo[boundary.axis] > 0:
                    exchanges.append((i_quantity, array, spec, boundary))

        with self._timer.clock("Irecv"):
            self._recv_requests = []
            for i_quantity, array, spec, boundary in exchanges:
                recv_slice = boundary.recv_slice(spec)
                recv_buffer = np.empty_like(array[recv_slice])
                request = self._comm.Irecv(
                    recv_buffer,
                    source=boundary.to_rank,
                    tag=self._message_tag(i_quantity, boundary.recv_tag),
                )
                self._recv_requests.append((request, recv_buffer, array, recv_slice))

        with self._timer.clock("pack"):
            self._send_buffers = [
                np.ascontiguousarray(array[boundary.send_slice(spec)])
                for _, array, spec, boundary in exchanges
            ]

        with self._timer.clock("Isend"):
            self._send_requests = []
            for (i_quantity, _, _, boundary), send_buffer in zip(
                exchanges, self._send_buffers
            ):
                self._send_requests.append(
                    self._comm.Isend(
                        send_buffer,
                        dest=boundary.to_rank,
                        tag=self._message_tag(i_quantity, boundary.send_tag),
                    )
                )

    def wait(self):
        """Finalize the exchange started by the last call to start."""
        if self._recv_requests is None:
            raise RuntimeError('Halo update "wait" call before "start"')
        with self._timer.clock("wait"):
            for send_request in self._send_requests:
                send_request.wait()
            for request, _, _, _ in self._recv_requests:
                request.wait()

        with self._timer.clock("unpack"):
            for _, recv_buffer, array, recv_slice in self._recv_requests:
                array[recv_slice] = recv_buffer

        self._recv_requests = None
        self._send_requests = []
        self._send_buffers = []
