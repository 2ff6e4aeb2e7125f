from .comm import (
    CreatesComm,
    CreatesCommSelector,
    LocalCommConfig,
    MPICommConfig,
    NullCommConfig,
)
from .diagnostics import (
    Diagnostics,
    DiagnosticsConfig,
    InMemoryDiagnostics,
    NullDiagnostics,
)
from .driver import (
    AuxFieldConfig,
    Driver,
    DriverConfig,
    DriverState,
    FieldConfig,
    global_index_range,
)
from .forcing import (
    ForcingSelector,
    HarmonicOscillatorConfig,
    RelaxationConfig,
)
from .initialization import (
    GaussianInit,
    ImpulseInit,
    Initializer,
    InitializerSelector,
    UniformInit,
)
from .registry import Registry
from .safety_checks import SafetyChecker, VariableBounds
from .schemes import LeapfrogConfig, MPDATAConfig, SchemeSelector, UpstreamConfig
from .velocity import (
    DiagnosedVelocityConfig,
    RotationVelocityConfig,
    UniformVelocityConfig,
    VelocitySelector,
)


__version__ = "0.1.0"
