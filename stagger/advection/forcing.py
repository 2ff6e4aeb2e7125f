import abc
import logging
from typing import Dict, List, Mapping, Sequence

import numpy as np

from stagger.util import Field, Grid, NonFiniteError, Quantity, ensure_finite


logger = logging.getLogger(__name__)


class RHSTerm(abc.ABC):
    """
    A term of the right-hand side of a field's equation.

    The explicit part is evaluated from the fields before advection, the
    implicit part is a coefficient C such that the term contributes C * psi
    evaluated at the new time level.
    """

    @abc.abstractmethod
    def explicit_part(
        self,
        residual: np.ndarray,
        fields: Mapping[str, Field],
        aux_fields: Mapping[str, Quantity],
        level: int,
    ):
        """
        Add the explicit contribution of the term into residual.

        Args:
            residual: array shaped like the compute domain
            fields: all advected fields
            aux_fields: auxiliary fields
            level: time level offset to evaluate the fields at
        """
        ...

    def implicit_part(self, dt: float) -> float:
        """implicit coefficient of the term"""
        return 0.0


class RestoringForce(RHSTerm):
    """
    One half of a harmonic oscillator: d(psi)/dt = sign * omega * source.

    Pairing a field psi having RestoringForce(source="phi", sign=1) with
    a field phi having RestoringForce(source="psi", sign=-1) gives an
    oscillation of frequency omega. The implicit part damps the explicit
    update so the pair stays bounded for any time step.
    """

    def __init__(self, source: str, omega: float, sign: int = 1):
        if sign not in (-1, 1):
            raise ValueError(f"sign must be 1 or -1, got {sign}")
        self.source = source
        self.omega = omega
        self.sign = sign

    def __repr__(self):
        return (
            f"RestoringForce(source={self.source}, omega={self.omega}, "
            f"sign={self.sign})"
        )

    def explicit_part(self, residual, fields, aux_fields, level):
        residual += self.sign * self.omega * fields[self.source].level(level).view[:]

    def implicit_part(self, dt: float) -> float:
        return -dt * self.omega ** 2


class Relaxation(RHSTerm):
    """Newtonian relaxation, d(psi)/dt = (target - psi) / timescale, treated
    implicitly in psi."""

    def __init__(self, target: float, timescale: float):
        if timescale <= 0:
            raise ValueError(f"timescale must be positive, got {timescale}")
        self.target = target
        self.timescale = timescale

    def __repr__(self):
        return f"Relaxation(target={self.target}, timescale={self.timescale})"

    def explicit_part(self, residual, fields, aux_fields, level):
        residual += self.target / self.timescale

    def implicit_part(self, dt: float) -> float:
        return -1.0 / self.timescale


class ForcingApplier:
    """
    Applies the right-hand-side terms of each field after advection.

    Fields without terms are homogeneous and get no residual array at all.
    """

    def __init__(self, grid: Grid, terms: Mapping[str, Sequence[RHSTerm]]):
        self._terms: Dict[str, List[RHSTerm]] = {
            name: list(field_terms)
            for name, field_terms in terms.items()
            if len(field_terms) > 0
        }
        self._residuals: Dict[str, np.ndarray] = {
            name: np.zeros(grid.extent) for name in self._terms
        }
        for name, field_terms in self._terms.items():
            logger.debug("forcing %s with %s", name, field_terms)

    def is_homogeneous(self, name: str) -> bool:
        return name not in self._terms

    def residual(self, name: str) -> np.ndarray:
        """explicit right-hand side of a non-homogeneous field"""
        return self._residuals[name]

    def update_residuals(
        self,
        fields: Mapping[str, Field],
        aux_fields: Mapping[str, Quantity],
        level: int = 0,
    ):
        """
        Evaluate the explicit part of every field's right-hand side.

        Raises:
            NonFiniteError: if a residual contains NaN or Inf
        """
        for name, field_terms in self._terms.items():
            residual = self._residuals[name]
            residual[:] = 0.0
            for term in field_terms:
                term.explicit_part(residual, fields, aux_fields, level)
            ensure_finite(residual, f"right-hand side of {name}")

    def apply(self, field: Field, level: int, dt: float):
        """
        Add dt times the residual to time level n + level of field, then
        rescale by 1 / (1 - dt * C) where C is the sum of implicit coefficients.

        Raises:
            NonFiniteError: if the implicit coefficient is not finite
        """
        if self.is_homogeneous(field.name):
            return
        psi = field.level(level).view[:]
        psi += dt * self._residuals[field.name]
        implicit = sum(term.implicit_part(dt) for term in self._terms[field.name])
        if not np.isfinite(implicit):
            raise NonFiniteError(
                f"implicit coefficient of {field.name} is not finite: {implicit}"
            )
        if implicit != 0.0:
            psi /= 1.0 - dt * implicit
