import abc
import dataclasses
from typing import Callable, ClassVar, List, Optional

import stagger.advection
from stagger.util import Quantity

from .registry import Registry


HaloUpdate = Callable[[List[Quantity]], None]


class CreatesScheme(abc.ABC):
    @abc.abstractmethod
    def build(
        self,
        halo_update: Optional[HaloUpdate] = None,
        positive_definite: bool = True,
    ) -> stagger.advection.AdvectionScheme:
        """
        Create the advection scheme.

        Args:
            halo_update: function filling the halos of face-centered quantities,
                used by schemes which exchange intermediate velocities
            positive_definite: whether the fields advected by the scheme never
                change sign, ignored by schemes without antidiffusion
        """
        ...


@dataclasses.dataclass(frozen=True)
class SchemeSelector(CreatesScheme):
    """
    Dataclass for selecting the advection scheme to use.

    Attributes:
        config: type-specific configuration
        type: one of "upstream", "leapfrog" or "mpdata" (default)
    """

    config: CreatesScheme = dataclasses.field(
        default_factory=lambda: MPDATAConfig()
    )
    type: str = "mpdata"
    registry: ClassVar[Registry] = Registry(default_type="mpdata")

    @classmethod
    def register(cls, type_name):
        return cls.registry.register(type_name)

    def build(self, halo_update=None, positive_definite=True):
        return self.config.build(halo_update, positive_definite)

    @classmethod
    def from_dict(cls, config: dict):
        instance = cls.registry.from_dict(config)
        return cls(config=instance, type=config.get("type", cls.registry.default_type))


@SchemeSelector.register("upstream")
@dataclasses.dataclass
class UpstreamConfig(CreatesScheme):
    def build(self, halo_update=None, positive_definite=True):
        return stagger.advection.Upstream()


@SchemeSelector.register("leapfrog")
@dataclasses.dataclass
class LeapfrogConfig(CreatesScheme):
    def build(self, halo_update=None, positive_definite=True):
        return stagger.advection.Leapfrog()


@SchemeSelector.register("mpdata")
@dataclasses.dataclass
class MPDATAConfig(CreatesScheme):
    """
    Attributes:
        iord: number of passes, 1 reduces to the upstream scheme
        cache: keep antidiffusive velocity arrays between steps
    """

    iord: int = 2
    cache: bool = True

    def build(self, halo_update=None, positive_definite=True):
        return stagger.advection.MPDATA(
            iord=self.iord,
            cache=self.cache,
            positive_definite=positive_definite,
            halo_update=halo_update,
        )
