import abc
import dataclasses
from typing import ClassVar, List

import numpy as np

from stagger.advection import (
    ConstantVelocity,
    DiagnosedVelocity,
    VelocitySource,
    VelocityTerm,
)
from stagger.util import Axis

from .registry import Registry


class CreatesVelocity(abc.ABC):
    @abc.abstractmethod
    def get_velocity_source(self) -> VelocitySource:
        ...


@dataclasses.dataclass(frozen=True)
class VelocitySelector(CreatesVelocity):
    """
    Dataclass for selecting how the advecting velocity is given.

    Attributes:
        config: type-specific configuration
        type: one of "uniform" (default), "rotation" or "diagnosed"
    """

    config: CreatesVelocity = dataclasses.field(
        default_factory=lambda: UniformVelocityConfig()
    )
    type: str = "uniform"
    registry: ClassVar[Registry] = Registry(default_type="uniform")

    @classmethod
    def register(cls, type_name):
        return cls.registry.register(type_name)

    def get_velocity_source(self) -> VelocitySource:
        return self.config.get_velocity_source()

    @classmethod
    def from_dict(cls, config: dict):
        instance = cls.registry.from_dict(config)
        return cls(config=instance, type=config.get("type", cls.registry.default_type))


@VelocitySelector.register("uniform")
@dataclasses.dataclass
class UniformVelocityConfig(CreatesVelocity):
    """
    Velocity constant in space and time.

    Attributes:
        u: velocity along x
        v: velocity along y
        w: velocity along z
    """

    u: float = 0.0
    v: float = 0.0
    w: float = 0.0

    def get_velocity_source(self):
        components = (self.u, self.v, self.w)

        def velocity(axis, x, y, z):
            return np.full_like(x, components[axis])

        return ConstantVelocity(velocity)


@VelocitySelector.register("rotation")
@dataclasses.dataclass
class RotationVelocityConfig(CreatesVelocity):
    """
    Solid-body rotation in the x-y plane.

    Attributes:
        angular_velocity: rotation rate, positive for counter-clockwise
        center_x: x position of the rotation axis
        center_y: y position of the rotation axis
    """

    angular_velocity: float
    center_x: float = 0.0
    center_y: float = 0.0

    def get_velocity_source(self):
        omega = self.angular_velocity

        def velocity(axis, x, y, z):
            if axis == Axis.X:
                return -omega * (y - self.center_y)
            elif axis == Axis.Y:
                return omega * (x - self.center_x)
            else:
                return np.zeros_like(z)

        return ConstantVelocity(velocity)


@VelocitySelector.register("diagnosed")
@dataclasses.dataclass
class DiagnosedVelocityConfig(CreatesVelocity):
    """
    Velocity diagnosed every step from the advected fields.

    Each axis is given as a list of terms, the first a momentum-like field with
    power 1 and any others density-like fields with power -1.

    Attributes:
        x: terms of the velocity along x
        y: terms of the velocity along y
        z: terms of the velocity along z
    """

    x: List[VelocityTerm] = dataclasses.field(default_factory=list)
    y: List[VelocityTerm] = dataclasses.field(default_factory=list)
    z: List[VelocityTerm] = dataclasses.field(default_factory=list)

    def get_velocity_source(self):
        return DiagnosedVelocity({Axis.X: self.x, Axis.Y: self.y, Axis.Z: self.z})
