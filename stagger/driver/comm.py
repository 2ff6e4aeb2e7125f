import abc
import dataclasses
from typing import ClassVar

import stagger.util
from stagger.util import Comm

from .registry import Registry


class CreatesComm(abc.ABC):
    """
    Retrieves and does cleanup for a mpi4py-style Comm object.
    """

    @abc.abstractmethod
    def get_comm(self) -> Comm:
        """
        Get an mpi4py-style Comm object.
        """
        ...

    @abc.abstractmethod
    def cleanup(self, comm: Comm):
        """
        Perform any operations that must occur before exiting.
        """
        ...


@dataclasses.dataclass(frozen=True)
class CreatesCommSelector(CreatesComm):
    """
    Dataclass for selecting the CreatesComm implementation to use.

    Used to circumvent the issue that dacite expects static class definitions,
    but we would like to dynamically define which CreatesComm to use. Does this
    by representing the part of the yaml specification that asks which comm creator
    to use, but deferring to the implementation in that selected type when called.

    Attributes:
        config: type-specific configuration
        type: type of Comm object to create, should be one of "local" (default),
            "mpi", or "null_comm"
    """

    config: CreatesComm = dataclasses.field(default_factory=lambda: LocalCommConfig())
    type: str = "local"
    registry: ClassVar[Registry] = Registry(default_type="local")

    @classmethod
    def register(cls, type_name):
        return cls.registry.register(type_name)

    def get_comm(self) -> Comm:
        return self.config.get_comm()

    def cleanup(self, comm: Comm):
        return self.config.cleanup(comm)

    @classmethod
    def from_dict(cls, config: dict):
        creates_comm = cls.registry.from_dict(config)
        return cls(
            config=creates_comm, type=config.get("type", cls.registry.default_type)
        )


@CreatesCommSelector.register("local")
@dataclasses.dataclass
class LocalCommConfig(CreatesComm):
    """
    Configuration for a single-rank in-process comm, with which every halo
    update wraps the domain periodically onto itself.
    """

    def get_comm(self):
        return stagger.util.LocalComm(rank=0, total_ranks=1, buffer_dict={})

    def cleanup(self, comm):
        pass


@CreatesCommSelector.register("mpi")
@dataclasses.dataclass
class MPICommConfig(CreatesComm):
    """
    Configuration for a true mpi4py Comm object.
    """

    def get_comm(self):
        return stagger.util.MPIComm()

    def cleanup(self, comm):
        pass


@CreatesCommSelector.register("null_comm")
@dataclasses.dataclass
class NullCommConfig(CreatesComm):
    """
    Configuration for a NullComm object which does not perform halo updates,
    instead filling the halos with a constant value.

    Generally used to test whether the code crashes while running in serial when
    correctness of the answer is not important.

    Attributes:
        rank: rank of the comm
        total_ranks: the total number of ranks for the comm to pretend to have
        fill_value: the value to fill the halos with
    """

    rank: int
    total_ranks: int
    fill_value: float = 0.0

    def get_comm(self):
        return stagger.util.NullComm(
            rank=self.rank, total_ranks=self.total_ranks, fill_value=self.fill_value
        )

    def cleanup(self, comm):
        pass
