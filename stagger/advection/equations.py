import dataclasses
from typing import Dict, List, Mapping, Sequence, Tuple

from stagger.util import ConfigurationError

from .forcing import RestoringForce, RHSTerm


@dataclasses.dataclass
class Variable:
    """
    An advected field and its equation.

    Attributes:
        name: name of the field
        units: units of the field
        dynamic: whether the field is used to diagnose the velocity
        positive_definite: whether the field never changes sign, signed
            fields are advected with gradients of their absolute value
        terms: right-hand-side terms, empty for a homogeneous equation
        output: whether the field is recorded by diagnostics
    """

    name: str
    units: str = ""
    dynamic: bool = False
    positive_definite: bool = True
    terms: List[RHSTerm] = dataclasses.field(default_factory=list)
    output: bool = True

    @property
    def homogeneous(self) -> bool:
        return len(self.terms) == 0


@dataclasses.dataclass
class AuxiliaryField:
    """
    A non-advected field shared with forcing terms and adjustments.

    Attributes:
        name: name of the field
        units: units of the field
        const: populated once by the initializer and never changed
        output: whether the field is recorded by diagnostics
    """

    name: str
    units: str = ""
    const: bool = False
    output: bool = False


class EquationSystem:
    """The set of advected variables and auxiliary fields of a run."""

    def __init__(
        self,
        variables: Sequence[Variable],
        aux_fields: Sequence[AuxiliaryField] = (),
    ):
        names = [v.name for v in variables] + [a.name for a in aux_fields]
        duplicates = sorted({name for name in names if names.count(name) > 1})
        if len(duplicates) > 0:
            raise ConfigurationError(f"field names must be unique, got {duplicates}")
        if len(variables) == 0:
            raise ConfigurationError("at least one advected variable is required")
        self.variables: Dict[str, Variable] = {v.name: v for v in variables}
        self.aux_fields: Dict[str, AuxiliaryField] = {a.name: a for a in aux_fields}

    def __repr__(self):
        return (
            f"EquationSystem(variables={list(self.variables)}, "
            f"aux_fields={list(self.aux_fields)})"
        )

    @property
    def names(self) -> Tuple[str, ...]:
        return tuple(self.variables)

    @property
    def terms(self) -> Mapping[str, List[RHSTerm]]:
        return {name: v.terms for name, v in self.variables.items()}

    def add_terms(self, name: str, terms: Sequence[RHSTerm]):
        if name not in self.variables:
            raise ConfigurationError(
                f"cannot add forcing to unknown variable {name}, "
                f"expected one of {list(self.variables)}"
            )
        self.variables[name].terms.extend(terms)

    def mark_dynamic(self, names):
        """flag variables the velocity is diagnosed from"""
        for name in names:
            if name not in self.variables:
                raise ConfigurationError(
                    f"velocity is diagnosed from unknown variable {name}"
                )
            self.variables[name].dynamic = True


def harmonic_oscillator(
    omega: float, names: Tuple[str, str] = ("psi", "phi")
) -> Dict[str, List[RHSTerm]]:
    """
    Right-hand sides of the oscillator d(psi)/dt = omega * phi,
    d(phi)/dt = -omega * psi.
    """
    psi, phi = names
    return {
        psi: [RestoringForce(source=phi, omega=omega, sign=1)],
        phi: [RestoringForce(source=psi, omega=omega, sign=-1)],
    }
