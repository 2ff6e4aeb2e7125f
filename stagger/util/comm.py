import abc
from typing import Optional, TypeVar


T = TypeVar("T")


class Request(abc.ABC):
    """Handle on a non-blocking send or receive."""

    @abc.abstractmethod
    def wait(self):
        ...


class Comm(abc.ABC):
    """
    The subset of the mpi4py Comm API used by halo exchange and the driver.

    Buffer-based methods (capitalized) take contiguous numpy arrays,
    lower-case methods take picklable Python objects.
    """

    @abc.abstractmethod
    def Get_rank(self) -> int:
        ...

    @abc.abstractmethod
    def Get_size(self) -> int:
        ...

    @abc.abstractmethod
    def bcast(self, value: Optional[T], root=0) -> T:
        ...

    @abc.abstractmethod
    def barrier(self):
        ...

    @abc.abstractmethod
    def Send(self, sendbuf, dest, tag: int = 0, **kwargs):
        ...

    @abc.abstractmethod
    def Isend(self, sendbuf, dest, tag: int = 0, **kwargs) -> Request:
        ...

    @abc.abstractmethod
    def Recv(self, recvbuf, source, tag: int = 0, **kwargs):
        ...

    @abc.abstractmethod
    def Irecv(self, recvbuf, source, tag: int = 0, **kwargs) -> Request:
        ...
