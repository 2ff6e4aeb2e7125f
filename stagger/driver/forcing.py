import abc
import dataclasses
from typing import ClassVar, Dict, List

from stagger.advection import Relaxation, RHSTerm, harmonic_oscillator
from stagger.util import ConfigurationError

from .registry import Registry


class CreatesForcing(abc.ABC):
    @abc.abstractmethod
    def get_terms(self) -> Dict[str, List[RHSTerm]]:
        """right-hand-side terms to add, keyed by field name"""
        ...


@dataclasses.dataclass(frozen=True)
class ForcingSelector(CreatesForcing):
    """
    Dataclass for selecting one source of right-hand-side terms.

    Attributes:
        config: type-specific configuration
        type: one of "relaxation" or "harmonic_oscillator"
    """

    config: CreatesForcing
    type: str
    registry: ClassVar[Registry] = Registry()

    @classmethod
    def register(cls, type_name):
        return cls.registry.register(type_name)

    def get_terms(self):
        return self.config.get_terms()

    @classmethod
    def from_dict(cls, config: dict):
        instance = cls.registry.from_dict(config)
        return cls(config=instance, type=config["type"])


@ForcingSelector.register("relaxation")
@dataclasses.dataclass
class RelaxationConfig(CreatesForcing):
    """
    Attributes:
        field: name of the relaxed field
        target: value the field relaxes towards
        timescale: e-folding time of the relaxation
    """

    field: str
    target: float
    timescale: float

    def get_terms(self):
        return {
            self.field: [Relaxation(target=self.target, timescale=self.timescale)]
        }


@ForcingSelector.register("harmonic_oscillator")
@dataclasses.dataclass
class HarmonicOscillatorConfig(CreatesForcing):
    """
    Attributes:
        fields: names of the two coupled fields
        omega: oscillation frequency
    """

    fields: List[str]
    omega: float

    def __post_init__(self):
        if len(self.fields) != 2:
            raise ConfigurationError(
                f"harmonic oscillator couples two fields, got {self.fields}"
            )

    def get_terms(self):
        return harmonic_oscillator(self.omega, names=tuple(self.fields))
