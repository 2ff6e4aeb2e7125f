import copy
import logging
from typing import Callable, Dict

from .comm import Comm, Request
from .utils import assign_array, ensure_contiguous


logger = logging.getLogger(__name__)


class ConcurrencyError(Exception):
    """Exception to denote that a rank cannot proceed because it is waiting on a
    call from another rank."""

    pass


class AsyncResult(Request):
    def __init__(self, result: Callable):
        self._result = result

    def wait(self):
        return self._result()


class LocalComm(Comm):
    """
    A Comm for several ranks living in one process.

    All ranks of a run must be constructed with the same buffer_dict. Sends
    are stored in the buffer immediately, receives are resolved when waited
    on, so ranks can be driven one after the other as long as every send
    happens before the matching wait.
    """

    def __init__(self, rank: int, total_ranks: int, buffer_dict: Dict):
        self.rank = rank
        self.total_ranks = total_ranks
        self._buffer = buffer_dict
        self._i_bcast = 0

    def __repr__(self):
        return f"LocalComm(rank={self.rank}, total_ranks={self.total_ranks})"

    def Get_rank(self):
        return self.rank

    def Get_size(self):
        return self.total_ranks

    def _get_send_recv(self, from_rank: int, tag: int):
        key = (from_rank, self.rank, tag)
        if "send_recv" not in self._buffer:
            raise ConcurrencyError(
                "buffer not initialized for send_recv, likely recv called before send"
            )
        elif len(self._buffer["send_recv"].get(key, [])) == 0:
            raise ConcurrencyError(
                f"rank-specific buffer not initialized for send_recv, likely "
                f"recv called before send from rank {from_rank} to rank "
                f"{self.rank} with tag {tag}"
            )
        return self._buffer["send_recv"][key].pop(0)

    def _put_send_recv(self, value, to_rank: int, tag: int):
        key = (self.rank, to_rank, tag)
        send_recv = self._buffer.setdefault("send_recv", {})
        send_recv.setdefault(key, []).append(copy.deepcopy(value))

    def bcast(self, value, root=0):
        if root != 0:
            raise NotImplementedError(
                "LocalComm assumes ranks are called in order, so root must be "
                "the bcast source"
            )
        values = self._buffer.setdefault("bcast", [])
        if self.rank == 0:
            values.append(value)
        elif self._i_bcast >= len(values):
            raise ConcurrencyError(f"bcast on rank {self.rank} called before root")
        value = values[self._i_bcast]
        self._i_bcast += 1
        logger.debug("bcast %s to rank %s", value, self.rank)
        return value

    def barrier(self):
        return

    def Send(self, sendbuf, dest, tag: int = 0, **kwargs):
        ensure_contiguous(sendbuf)
        self._put_send_recv(sendbuf, dest, tag)

    def Isend(self, sendbuf, dest, tag: int = 0, **kwargs):
        self.Send(sendbuf, dest, tag)
        return AsyncResult(lambda: None)

    def Recv(self, recvbuf, source, tag: int = 0, **kwargs):
        ensure_contiguous(recvbuf)
        assign_array(recvbuf, self._get_send_recv(source, tag))

    def Irecv(self, recvbuf, source, tag: int = 0, **kwargs):
        def receive():
            return self.Recv(recvbuf, source, tag)

        return AsyncResult(receive)
