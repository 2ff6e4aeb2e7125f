import dataclasses
import logging
from typing import Dict, Mapping, Optional

import numpy as np

from stagger.util import Field, NonFiniteError


logger = logging.getLogger(__name__)


@dataclasses.dataclass
class VariableBounds:
    minimum_value: Optional[float] = None
    maximum_value: Optional[float] = None
    compute_domain_only: bool = False


class SafetyChecker:
    """Safety-Checker that checks the fields for sanity of their values

    Raises:
        NotImplementedError: Doubly-registered variables
        NotImplementedError: Variables not among the fields
        RuntimeError: Variables outside the specified bounds
        NonFiniteError: Variables containing NaN or Inf
    """

    def __init__(self):
        self.checks: Dict[str, VariableBounds] = {}

    def register_variable(
        self,
        name: str,
        minimum_value: Optional[float] = None,
        maximum_value: Optional[float] = None,
        compute_domain_only: bool = False,
    ):
        """Register a variable in the checker

        Args:
            name (str): name of the advected field
            minimum_value (Optional[float], optional): Minimum value if specified.
                Defaults to None.
            maximum_value (Optional[float], optional): Maximum value if specified.
                Defaults to None.
            compute_domain_only (bool, optional): If evaluation should only happen
                on the compute or the entire domain. Defaults to False.

        Raises:
            NotImplementedError: If variables are doubly-registered
        """
        if name in self.checks:
            raise NotImplementedError("Can only register variables once")
        self.checks[name] = VariableBounds(
            minimum_value, maximum_value, compute_domain_only
        )

    def clear_all_checks(self):
        """Clear all the registered checks"""
        self.checks.clear()

    def check_fields(self, fields: Mapping[str, Field]):
        """check the current time level of the given fields with all the
        registered constraints

        Args:
            fields: advected fields by name

        Raises:
            NotImplementedError: If one of the registered variables is not a field
            NonFiniteError: If one of the variables contains NaN or Inf
            RuntimeError: If one of the variables exceeds its specified bounds
        """
        for variable, variable_bounds in self.checks.items():
            try:
                var = fields[variable].level(0)
            except KeyError:
                raise NotImplementedError(f"Variable {variable} is not a field")
            if variable_bounds.compute_domain_only:
                values = var.view[:]
            else:
                values = var.data
            if not np.all(np.isfinite(values)):
                raise NonFiniteError(f"Variable {variable} contains a NaN value")
            min_value = values.min()
            max_value = values.max()
            if (
                variable_bounds.minimum_value is not None
                and min_value < variable_bounds.minimum_value
            ):
                raise RuntimeError(
                    f"Variable {variable} is outside of its specified bounds: "
                    f"{variable_bounds.minimum_value} specified, {min_value} found"
                )
            if (
                variable_bounds.maximum_value is not None
                and max_value > variable_bounds.maximum_value
            ):
                raise RuntimeError(
                    f"Variable {variable} is outside of its specified bounds: "
                    f"{variable_bounds.maximum_value} specified, {max_value} found"
                )
