import abc
import dataclasses
import logging
from typing import Callable, ClassVar, Dict, List, Sequence, Type, TypeVar

import numpy as np

from stagger.util import ConfigurationError

from .registry import Registry


logger = logging.getLogger(__name__)

IndexRange = Sequence[range]


class Initializer(abc.ABC):
    @abc.abstractmethod
    def populate_scalar_field(
        self, name: str, index_range: IndexRange, target: np.ndarray
    ):
        """
        Write the initial value of a field into target.

        Args:
            name: name of the advected or auxiliary field
            index_range: global cell indices covered by target along x, y and z
            target: array shaped like index_range, to be written in place
        """
        ...


IT = TypeVar("IT", bound=Type[Initializer])


def _global_indices(index_range: IndexRange):
    return np.meshgrid(*[np.asarray(r) for r in index_range], indexing="ij")


@dataclasses.dataclass
class InitializerSelector(Initializer):
    """
    Dataclass for selecting the implementation of Initializer to use.

    Used to circumvent the issue that dacite expects static class definitions,
    but we would like to dynamically define which Initializer to use. Does this
    by representing the part of the yaml specification that asks which initializer
    to use, but deferring to the implementation in that initializer when called.
    """

    type: str
    config: Initializer
    registry: ClassVar[Registry] = Registry()

    @classmethod
    def register(cls, type_name) -> Callable[[IT], IT]:
        return cls.registry.register(type_name)

    def populate_scalar_field(self, name, index_range, target):
        return self.config.populate_scalar_field(name, index_range, target)

    @classmethod
    def from_dict(cls, config: dict):
        instance = cls.registry.from_dict(config)
        return cls(config=instance, type=config["type"])


@InitializerSelector.register("uniform")
@dataclasses.dataclass
class UniformInit(Initializer):
    """
    Every field set to a constant.

    Attributes:
        values: value of each named field
        default: value of fields not named in values
    """

    values: Dict[str, float] = dataclasses.field(default_factory=dict)
    default: float = 0.0

    def populate_scalar_field(self, name, index_range, target):
        target[:] = self.values.get(name, self.default)


@InitializerSelector.register("gaussian")
@dataclasses.dataclass
class GaussianInit(Initializer):
    """
    A Gaussian bump on a constant background.

    Positions and width are given in cells of the global domain.

    Attributes:
        names: fields to initialize with the bump, all fields if empty,
            other fields are set to zero
        amplitude: height of the bump above the background
        center_x: x index of the bump center
        center_y: y index of the bump center
        center_z: z index of the bump center
        width: standard deviation of the bump
        background: value far from the bump
    """

    amplitude: float = 1.0
    center_x: float = 0.0
    center_y: float = 0.0
    center_z: float = 0.0
    width: float = 1.0
    background: float = 0.0
    names: List[str] = dataclasses.field(default_factory=list)

    def __post_init__(self):
        if self.width <= 0:
            raise ConfigurationError(f"width must be positive, got {self.width}")

    def populate_scalar_field(self, name, index_range, target):
        if len(self.names) > 0 and name not in self.names:
            target[:] = 0.0
            return
        x, y, z = _global_indices(index_range)
        r2 = (
            (x - self.center_x) ** 2
            + (y - self.center_y) ** 2
            + (z - self.center_z) ** 2
        )
        target[:] = self.background + self.amplitude * np.exp(
            -0.5 * r2 / self.width ** 2
        )


@InitializerSelector.register("impulse")
@dataclasses.dataclass
class ImpulseInit(Initializer):
    """
    A single cell set to a value on a constant background.

    Attributes:
        index: global (i, j, k) index of the cell, missing trailing
            indices are 0
        value: value of the cell
        background: value of every other cell
        names: fields to initialize with the impulse, all fields if empty,
            other fields are set to zero
    """

    index: List[int]
    value: float = 1.0
    background: float = 0.0
    names: List[str] = dataclasses.field(default_factory=list)

    def __post_init__(self):
        if not 1 <= len(self.index) <= 3:
            raise ConfigurationError(
                f"index must have one to three entries, got {self.index}"
            )

    def populate_scalar_field(self, name, index_range, target):
        if len(self.names) > 0 and name not in self.names:
            target[:] = 0.0
            return
        target[:] = self.background
        index = list(self.index) + [0] * (3 - len(self.index))
        local = []
        for i, axis_range in zip(index, index_range):
            if i not in axis_range:
                return
            local.append(i - axis_range.start)
        logger.debug("placing impulse of %s at local index %s", name, local)
        target[tuple(local)] = self.value
