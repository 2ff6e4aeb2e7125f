try:
    from mpi4py import MPI
except ImportError:
    MPI = None
import logging
from typing import Optional, TypeVar, cast

from .comm import Comm, Request


T = TypeVar("T")

logger = logging.getLogger(__name__)


def world_rank() -> Optional[int]:
    """rank of this process in COMM_WORLD, or None without mpi4py"""
    if MPI is None:
        return None
    return MPI.COMM_WORLD.Get_rank()


class MPIComm(Comm):
    """
    Comm backed by an mpi4py communicator.

    Point-to-point calls are logged at debug level with the peer rank and tag,
    which is usually enough to find a halo exchange that never completes.
    """

    def __init__(self, comm=None):
        """
        Args:
            comm: mpi4py communicator to wrap, COMM_WORLD by default
        """
        if MPI is None:
            raise RuntimeError("MPI not available, is mpi4py installed?")
        if comm is None:
            comm = MPI.COMM_WORLD
        self._comm: Comm = cast(Comm, comm)
        self._rank = self._comm.Get_rank()

    def __repr__(self):
        return f"MPIComm(rank={self._rank}, size={self._comm.Get_size()})"

    def _trace(self, operation: str, peer: int, tag: int):
        logger.debug(
            "%s on rank %d with peer %d, tag %d", operation, self._rank, peer, tag
        )

    def Get_rank(self) -> int:
        return self._rank

    def Get_size(self) -> int:
        return self._comm.Get_size()

    def bcast(self, value: Optional[T], root=0) -> T:
        logger.debug("bcast from root %d on rank %d", root, self._rank)
        return self._comm.bcast(value, root=root)

    def barrier(self):
        logger.debug("barrier on rank %d", self._rank)
        self._comm.barrier()

    def Send(self, sendbuf, dest, tag: int = 0, **kwargs):
        self._trace("Send", dest, tag)
        self._comm.Send(sendbuf, dest, tag=tag, **kwargs)

    def Isend(self, sendbuf, dest, tag: int = 0, **kwargs) -> Request:
        self._trace("Isend", dest, tag)
        return self._comm.Isend(sendbuf, dest, tag=tag, **kwargs)

    def Recv(self, recvbuf, source, tag: int = 0, **kwargs):
        self._trace("Recv", source, tag)
        self._comm.Recv(recvbuf, source, tag=tag, **kwargs)

    def Irecv(self, recvbuf, source, tag: int = 0, **kwargs) -> Request:
        self._trace("Irecv", source, tag)
        return self._comm.Irecv(recvbuf, source, tag=tag, **kwargs)
