import dataclasses
import enum
import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Tuple

import dacite
import numpy as np

from stagger.advection import (
    AdvectionScheme,
    AuxiliaryField,
    CourantFields,
    EquationSystem,
    ForcingApplier,
    Variable,
)
from stagger.util import (
    Axis,
    Comm,
    Communicator,
    ConfigurationError,
    Field,
    Grid,
    NonFiniteError,
    Quantity,
    Timer,
    ensure_finite,
    halo_extent,
)

from .comm import CreatesCommSelector
from .diagnostics import Diagnostics, DiagnosticsConfig
from .forcing import ForcingSelector
from .initialization import Initializer, InitializerSelector, UniformInit
from .safety_checks import SafetyChecker, VariableBounds
from .schemes import SchemeSelector
from .velocity import VelocitySelector


logger = logging.getLogger(__name__)

# Courant numbers are only read one face beyond the compute domain
COURANT_HALO = 1

Adjustments = Callable[
    [int, Mapping[str, Field], Mapping[str, Quantity], CourantFields, float], None
]


class DriverState(enum.Enum):
    INIT = "Init"
    COMPUTING_COURANTS = "ComputingCourants"
    ADVECTING = "Advecting"
    APPLYING_FORCING = "ApplyingForcing"
    APPLYING_ADJUSTMENTS = "ApplyingAdjustments"
    CYCLING = "Cycling"
    REFRESHING_HALOS = "RefreshingHalos"
    DONE = "Done"


@dataclasses.dataclass
class FieldConfig:
    """
    Attributes:
        name: name of the advected field
        units: units of the field
        dynamic: whether the velocity is diagnosed from this field, also set
            automatically for fields named by a diagnosed velocity
        positive_definite: false for fields which change sign, such as momentum
        output: whether the field is recorded by diagnostics
    """

    name: str
    units: str = ""
    dynamic: bool = False
    positive_definite: bool = True
    output: bool = True


@dataclasses.dataclass
class AuxFieldConfig:
    """
    Attributes:
        name: name of the auxiliary field
        units: units of the field
        const: whether the field keeps its initial value for the whole run
        output: whether the field is recorded by diagnostics
    """

    name: str
    units: str = ""
    const: bool = False
    output: bool = False


@dataclasses.dataclass
class DriverConfig:
    """
    Configuration for a run of the advection model.

    Attributes:
        nx: number of cells along x in the global domain
        ny: number of cells along y in the global domain
        dt: time step
        nt: number of time steps to take
        fields: advected fields
        nz: number of cells along z in the global domain
        dx: cell width along x
        dy: cell width along y
        dz: cell width along z
        layout: number of ranks along the x and y dimensions
        aux_fields: non-advected fields shared with forcing and adjustments
        scheme: configuration of the advection scheme
        velocity: configuration of the advecting velocity
        initialization: configuration of the initial state
        forcing: right-hand-side terms added to the fields' equations
        comm_config: configuration of the communication object
        diagnostics_config: configuration for output diagnostics
        safety_checks: bounds checked on fields after every step
        check_finite: whether every field is checked for NaN and Inf
            after every step
    """

    nx: int
    ny: int
    dt: float
    nt: int
    fields: List[FieldConfig]
    nz: int = 1
    dx: float = 1.0
    dy: float = 1.0
    dz: float = 1.0
    layout: Tuple[int, int] = (1, 1)
    aux_fields: List[AuxFieldConfig] = dataclasses.field(default_factory=list)
    scheme: SchemeSelector = dataclasses.field(default_factory=SchemeSelector)
    velocity: VelocitySelector = dataclasses.field(default_factory=VelocitySelector)
    initialization: InitializerSelector = dataclasses.field(
        default_factory=lambda: InitializerSelector(
            type="uniform", config=UniformInit()
        )
    )
    forcing: List[ForcingSelector] = dataclasses.field(default_factory=list)
    comm_config: CreatesCommSelector = dataclasses.field(
        default_factory=CreatesCommSelector
    )
    diagnostics_config: DiagnosticsConfig = dataclasses.field(
        default_factory=DiagnosticsConfig
    )
    safety_checks: Dict[str, VariableBounds] = dataclasses.field(
        default_factory=dict
    )
    check_finite: bool = True

    def __post_init__(self):
        if self.dt <= 0:
            raise ConfigurationError(f"dt must be positive, got {self.dt}")
        if self.nt < 0:
            raise ConfigurationError(f"nt must not be negative, got {self.nt}")

    @property
    def global_grid(self) -> Grid:
        return Grid(
            nx=self.nx, ny=self.ny, nz=self.nz, dx=self.dx, dy=self.dy, dz=self.dz
        )

    def get_equation_system(self) -> EquationSystem:
        equations = EquationSystem(
            variables=[
                Variable(
                    name=field.name,
                    units=field.units,
                    dynamic=field.dynamic,
                    positive_definite=field.positive_definite,
                    output=field.output,
                )
                for field in self.fields
            ],
            aux_fields=[
                AuxiliaryField(
                    name=aux.name, units=aux.units, const=aux.const, output=aux.output
                )
                for aux in self.aux_fields
            ],
        )
        for forcing in self.forcing:
            for name, terms in forcing.get_terms().items():
                equations.add_terms(name, terms)
        return equations

    @classmethod
    def from_dict(cls, kwargs: Dict[str, Any]) -> "DriverConfig":
        kwargs = dict(kwargs)
        kwargs["scheme"] = SchemeSelector.from_dict(kwargs.get("scheme", {}))
        kwargs["velocity"] = VelocitySelector.from_dict(kwargs.get("velocity", {}))
        if "initialization" in kwargs:
            kwargs["initialization"] = InitializerSelector.from_dict(
                kwargs["initialization"]
            )
        kwargs["forcing"] = [
            ForcingSelector.from_dict(forcing) for forcing in kwargs.get("forcing", [])
        ]
        kwargs["comm_config"] = CreatesCommSelector.from_dict(
            kwargs.get("comm_config", {})
        )
        if "layout" in kwargs:
            kwargs["layout"] = tuple(kwargs["layout"])
        return dacite.from_dict(
            data_class=cls, data=kwargs, config=dacite.Config(strict=True)
        )


def global_index_range(grid: Grid) -> Tuple[range, ...]:
    """global cell indices of the compute domain of grid along each axis"""
    return tuple(
        range(grid.offset[axis], grid.offset[axis] + grid.extent[axis])
        for axis in Axis
    )


class Driver:
    """
    Advances the advected fields of a run through nt time steps.

    Each step updates the Courant numbers unless they are constant, advects
    every field with every pass of the scheme, applies the right-hand sides,
    calls the adjustments, cycles the time levels and refreshes the halos.
    """

    def __init__(
        self,
        config: DriverConfig,
        initializer: Optional[Initializer] = None,
        diagnostics: Optional[Diagnostics] = None,
        adjustments: Optional[Adjustments] = None,
        comm: Optional[Comm] = None,
    ):
        """
        Initializes a Driver.

        Args:
            config: driver configuration
            initializer: provides the initial state, by default the one
                given in config
            diagnostics: output sink, by default the one given in config
            adjustments: called once per step after the forcing with the
                level being computed, the fields, the auxiliary fields,
                the Courant numbers and the time step
            comm: communication object behaving like mpi4py.Comm, by default
                the one given in config
        """
        logger.info("initializing driver")
        self.config = config
        self.state = DriverState.INIT
        self.time = 0.0
        self.timer = Timer()
        self._steps_taken = 0
        self._owns_comm = comm is None
        self.comm = comm if comm is not None else config.comm_config.get_comm()
        self.adjustments = adjustments
        if initializer is None:
            initializer = config.initialization
        if diagnostics is None:
            diagnostics = config.diagnostics_config.diagnostics_factory()
        self.diagnostics = diagnostics
        with self.timer.clock("initialization"):
            self.communicator = Communicator.from_layout(
                comm=self.comm, layout=config.layout, timer=self.timer
            )
            self.grid = self.communicator.subdomain_grid(config.global_grid)
            logger.info(
                "running on rank %d with subdomain offset %s and extent %s",
                self.communicator.rank,
                self.grid.offset,
                self.grid.extent,
            )
            self.velocity = config.velocity.get_velocity_source()
            # signed and positive-definite fields get separate scheme instances
            self.schemes: Dict[bool, AdvectionScheme] = {
                positive_definite: config.scheme.build(
                    halo_update=self.communicator.halo_update,
                    positive_definite=positive_definite,
                )
                for positive_definite in (False, True)
            }
            self.scheme = self.schemes[True]
            logger.info("advecting with %s", self.scheme)
            self.equations = config.get_equation_system()
            self.equations.mark_dynamic(self.velocity.dynamic_fields)
            self.fields = self._allocate_fields()
            self.courants = CourantFields(self.grid, n_halo=COURANT_HALO)
            self.aux_fields = self._allocate_aux_fields()
            self.forcing = ForcingApplier(self.grid, self.equations.terms)
            self.safety_checker = self._build_safety_checker()
            self._output_names = self._get_output_names()
            self._initialize_state(initializer)
        if config.diagnostics_config.output_initial_state:
            self._record_output()

    def _allocate_fields(self) -> Dict[str, Field]:
        fields = {}
        for name, variable in self.equations.variables.items():
            n_halo = halo_extent(
                self.scheme.stencil_extent,
                dynamic=variable.dynamic,
                constant_velocity=self.velocity.is_constant,
            )
            fields[name] = Field(
                name,
                self.grid,
                n_halo=n_halo,
                time_levels=self.scheme.time_levels,
                units=variable.units,
            )
        return fields

    def _allocate_aux_fields(self) -> Dict[str, Quantity]:
        n_halo = halo_extent(
            self.scheme.stencil_extent, dynamic=False, constant_velocity=True
        )
        return {
            name: Quantity(
                self._zeros(n_halo),
                dims=self.grid.dims(),
                units=aux.units,
                origin=self.grid.halo_widths(n_halo),
                extent=self.grid.extent,
            )
            for name, aux in self.equations.aux_fields.items()
        }

    def _zeros(self, n_halo: int):
        return np.zeros(self.grid.scalar_shape(n_halo))

    def _build_safety_checker(self) -> SafetyChecker:
        checker = SafetyChecker()
        unknown = set(self.config.safety_checks).difference(self.fields)
        if len(unknown) > 0:
            raise ConfigurationError(
                f"safety checks given for unknown fields {sorted(unknown)}"
            )
        for name in self.fields:
            if name in self.config.safety_checks:
                bounds = self.config.safety_checks[name]
                checker.register_variable(
                    name,
                    minimum_value=bounds.minimum_value,
                    maximum_value=bounds.maximum_value,
                    compute_domain_only=bounds.compute_domain_only,
                )
            elif self.config.check_finite:
                checker.register_variable(name)
        return checker

    def _get_output_names(self) -> List[str]:
        names = list(self.config.diagnostics_config.names)
        if len(names) == 0:
            names = [
                name for name, v in self.equations.variables.items() if v.output
            ] + [name for name, a in self.equations.aux_fields.items() if a.output]
        unknown = [
            name
            for name in names
            if name not in self.fields and name not in self.aux_fields
        ]
        if len(unknown) > 0:
            raise ConfigurationError(f"cannot output unknown fields {unknown}")
        return names

    def _initialize_state(self, initializer: Initializer):
        index_range = global_index_range(self.grid)
        for name, field in self.fields.items():
            initializer.populate_scalar_field(name, index_range, field.level(0).view[:])
            ensure_finite(field.level(0).view[:], f"initial value of {name}")
            self.communicator.fill_halos(field, level=0)
            for offset in range(1, field.time_levels):
                field.copy_level(0, offset)
        for name, quantity in self.aux_fields.items():
            initializer.populate_scalar_field(name, index_range, quantity.view[:])
            self.communicator.halo_update(quantity)
        self.velocity.populate_courant_fields(self.courants, self.config.dt)
        if self.velocity.is_constant:
            self.communicator.halo_update(self.courants.active)

    @property
    def n_timesteps(self) -> int:
        return self.config.nt

    def step(self, step: int):
        """
        Take one time step.

        Args:
            step: index of the step, starting at 0

        Raises:
            NonFiniteError: if the model blows up
        """
        try:
            self._step(step)
        except NonFiniteError as err:
            logger.error("aborting on step %d: %s", step, err)
            raise

    def _step(self, step: int):
        dt = self.config.dt
        if not self.velocity.is_constant:
            self.state = DriverState.COMPUTING_COURANTS
            with self.timer.clock("courants"):
                self.velocity.update(self.fields, self.courants, dt)
        self.state = DriverState.ADVECTING
        with self.timer.clock("residuals"):
            self.forcing.update_residuals(self.fields, self.aux_fields, level=0)
        with self.timer.clock("advection"):
            for name, field in self.fields.items():
                self._advect(field, self._get_scheme(name))
        self.state = DriverState.APPLYING_FORCING
        with self.timer.clock("forcing"):
            for field in self.fields.values():
                self.forcing.apply(field, level=1, dt=dt)
        self.state = DriverState.APPLYING_ADJUSTMENTS
        if self.adjustments is not None:
            with self.timer.clock("adjustments"):
                self.adjustments(1, self.fields, self.aux_fields, self.courants, dt)
        self.state = DriverState.CYCLING
        for field in self.fields.values():
            field.cycle()
        self.state = DriverState.REFRESHING_HALOS
        with self.timer.clock("halo_update"):
            for field in self.fields.values():
                self.communicator.fill_halos(field, level=0)
        self.comm.barrier()
        self.safety_checker.check_fields(self.fields)
        self._steps_taken += 1
        self.time += dt
        self.end_of_step_actions(step)

    def _get_scheme(self, name: str) -> AdvectionScheme:
        positive_definite = self.equations.variables[name].positive_definite
        scheme = self.schemes[positive_definite]
        if self._steps_taken == 0 and scheme.startup_scheme is not None:
            return scheme.startup_scheme
        return scheme

    def _advect(self, field: Field, scheme: AdvectionScheme):
        for step in range(1, scheme.num_steps + 1):
            if step > 1:
                # the previous pass becomes the state the next one corrects
                field.cycle()
                self.communicator.fill_halos(field, level=0)
            scheme.prepare(field)
            scheme.apply(field, self.courants, step)

    def end_of_step_actions(self, step: int):
        logger.info("Finished stepping %d", step)
        if ((step + 1) % self.config.diagnostics_config.output_frequency) == 0:
            self._record_output()

    def step_all(self):
        logger.info("integrating driver forward in time")
        with self.timer.clock("total"):
            for step in range(self.n_timesteps):
                with self.timer.clock("mainloop"):
                    self.step(step)
        self.state = DriverState.DONE

    def _record_output(self):
        index_range = global_index_range(self.grid)
        with self.timer.clock("diagnostics"):
            for name in self._output_names:
                if name in self.fields:
                    array = self.fields[name].level(0).view[:]
                else:
                    array = self.aux_fields[name].view[:]
                self.diagnostics.record(name, array, index_range, self.time)

    def record_final(self):
        """record the current state, usually once stepping is done"""
        self._record_output()

    def cleanup(self):
        logger.info("cleaning up driver")
        hits = self.timer.hits
        for name, seconds in sorted(self.timer.times.items()):
            logger.info("%s: %.3f s over %d calls", name, seconds, hits[name])
        self.diagnostics.cleanup()
        if self._owns_comm:
            self.config.comm_config.cleanup(self.comm)

