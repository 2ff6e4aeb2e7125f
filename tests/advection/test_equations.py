import pytest

from stagger.advection import (
    AuxiliaryField,
    EquationSystem,
    Relaxation,
    Variable,
    harmonic_oscillator,
)
from stagger.util import ConfigurationError


def test_homogeneous_until_terms_are_added():
    equations = EquationSystem([Variable("psi"), Variable("phi")])
    assert equations.names == ("psi", "phi")
    assert equations.variables["psi"].homogeneous
    equations.add_terms("psi", [Relaxation(target=0.0, timescale=1.0)])
    assert not equations.variables["psi"].homogeneous
    assert equations.variables["phi"].homogeneous
    assert len(equations.terms["psi"]) == 1


def test_oscillator_terms():
    equations = EquationSystem([Variable("psi"), Variable("phi")])
    for name, terms in harmonic_oscillator(omega=1.0).items():
        equations.add_terms(name, terms)
    assert all(not v.homogeneous for v in equations.variables.values())


def test_variables_do_not_share_terms():
    first, second = Variable("a"), Variable("b")
    first.terms.append(Relaxation(target=0.0, timescale=1.0))
    assert second.homogeneous


@pytest.mark.parametrize(
    "variables, aux_fields",
    [
        pytest.param([Variable("psi"), Variable("psi")], [], id="duplicate_variable"),
        pytest.param([Variable("psi")], [AuxiliaryField("psi")], id="aux_shadows"),
        pytest.param([], [AuxiliaryField("temperature")], id="no_variables"),
    ],
)
def test_invalid_system_raises(variables, aux_fields):
    with pytest.raises(ConfigurationError):
        EquationSystem(variables, aux_fields)


def test_unknown_variable_raises():
    equations = EquationSystem([Variable("psi")], [AuxiliaryField("temperature")])
    with pytest.raises(ConfigurationError, match="unknown variable"):
        equations.add_terms("temperature", [Relaxation(0.0, 1.0)])
    with pytest.raises(ConfigurationError, match="unknown variable"):
        equations.mark_dynamic(["rho"])


def test_mark_dynamic():
    equations = EquationSystem([Variable("rho"), Variable("rhou"), Variable("q")])
    equations.mark_dynamic({"rho", "rhou"})
    assert equations.variables["rho"].dynamic
    assert equations.variables["rhou"].dynamic
    assert not equations.variables["q"].dynamic
