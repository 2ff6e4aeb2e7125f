from .comm import Comm, Request


class NullAsyncResult(Request):
    def __init__(self, recvbuf=None, fill_value=0.0):
        self._recvbuf = recvbuf
        self._fill_value = fill_value

    def wait(self):
        if self._recvbuf is not None:
            self._recvbuf[:] = self._fill_value


class NullComm(Comm):
    """
    A class with a subset of the mpi4py Comm API, but which
    'receives' a fill value (default zero) instead of using MPI.

    Useful to check that a decomposed configuration runs in serial when
    the values in the halo do not matter.
    """

    def __init__(self, rank: int, total_ranks: int, fill_value: float = 0.0):
        """
        Args:
            rank: rank to mock
            total_ranks: number of total MPI ranks to mock
            fill_value: fill halos with this value when performing
                halo updates.
        """
        self.rank = rank
        self.total_ranks = total_ranks
        self._fill_value = fill_value

    def __repr__(self):
        return f"NullComm(rank={self.rank}, total_ranks={self.total_ranks})"

    def Get_rank(self):
        return self.rank

    def Get_size(self):
        return self.total_ranks

    def bcast(self, value, root=0):
        return value

    def barrier(self):
        return

    def Send(self, sendbuf, dest, tag: int = 0, **kwargs):
        pass

    def Isend(self, sendbuf, dest, tag: int = 0, **kwargs):
        return NullAsyncResult()

    def Recv(self, recvbuf, source, tag: int = 0, **kwargs):
        recvbuf[:] = self._fill_value

    def Irecv(self, recvbuf, source, tag: int = 0, **kwargs):
        return NullAsyncResult(recvbuf, self._fill_value)
