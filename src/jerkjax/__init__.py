"""
jerkjax is a small library for integrating scalar third-order ODEs, x''' = f(t, x, x', x''), implemented in JAX.
"""

from .config import set_dtype, get_dtype

from .errors import (
    SolverError,
    InvalidConfigError,
    StepSizeFloorError,
    NonFiniteStateError,
    StepLimitExceededError,
    SolverWarning,
    WarningKind,
)

from .integrators import (
    State,
    StepControlConfig,
    Integrator,
    ModifiedEulerIntegrator,
    EmbeddedRKIntegrator,
    AdamsMoultonIntegrator,
    RKF45,
    DOPRI5,
)

from .trajectory import Trajectory

from .equations import (
    BEAM_INITIAL_STATE,
    EquationConfig,
    create_equation,
)

from .solver import MethodId, create_integrator, solve

from .comparison import (
    ComparisonReport,
    MethodDeviation,
    compare,
)
