from .courant import (
    ConstantVelocity,
    CourantFields,
    DiagnosedVelocity,
    VelocitySource,
    VelocityTerm,
)
from .equations import AuxiliaryField, EquationSystem, Variable, harmonic_oscillator
from .forcing import ForcingApplier, Relaxation, RestoringForce, RHSTerm
from .leapfrog import Leapfrog
from .mpdata import MPDATA, normalized_difference
from .scheme import AdvectionScheme, cell_slices, donor_cell_divergence, donor_cell_flux
from .upstream import Upstream


__version__ = "0.1.0"
