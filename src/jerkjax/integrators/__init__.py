"""Numerical integrators for scalar third-order ODEs.

The equation ``x''' = f(t, x, x', x'')`` is reduced to the first-order
system ``y = [x, v, a]``, ``y' = [v, a, f]`` and advanced with one of:

- :class:`ModifiedEulerIntegrator`: Heun predictor-corrector (fixed step)
- :data:`RKF45`: Runge-Kutta-Fehlberg 4(5) (adaptive step)
- :data:`DOPRI5`: Dormand-Prince 5(4) (adaptive step)
- :class:`AdamsMoultonIntegrator`: Adams predictor-corrector with an RK
  bootstrap (fixed step)

All integrators share a common interface::

    trajectory = integrator.solve(rhs, initial, config, t_end)

where ``rhs(t, x, v, a) -> a'`` defines the model.  The single-step
functions (``heun_step``, ``rkf45_step``, ``dp54_step``) work on the
first-order form ``dynamics(t, y) -> dy/dt`` and return a
:class:`StepResult` named tuple.
"""

from jerkjax.integrators._adaptive import (
    DEFAULT_STEP_CONTROL,
    compute_error_norm,
    compute_next_step_size,
)
from jerkjax.integrators._tableau import ButcherTableau, EmbeddedTrial, embedded_step
from jerkjax.integrators._types import (
    Dynamics,
    RightHandSide,
    State,
    StepControlConfig,
    StepResult,
    first_order_dynamics,
)
from jerkjax.integrators.adams import AdamsMoultonIntegrator
from jerkjax.integrators.base import Integrator, fixed_step_schedule
from jerkjax.integrators.dp54 import DP54_TABLEAU, dp54_step
from jerkjax.integrators.embedded import DOPRI5, RKF45, EmbeddedRKIntegrator
from jerkjax.integrators.heun import ModifiedEulerIntegrator, heun_step
from jerkjax.integrators.rkf45 import RKF45_TABLEAU, rkf45_step

__all__ = [
    "AdamsMoultonIntegrator",
    "ButcherTableau",
    "DEFAULT_STEP_CONTROL",
    "DOPRI5",
    "DP54_TABLEAU",
    "Dynamics",
    "EmbeddedRKIntegrator",
    "EmbeddedTrial",
    "Integrator",
    "ModifiedEulerIntegrator",
    "RKF45",
    "RKF45_TABLEAU",
    "RightHandSide",
    "State",
    "StepControlConfig",
    "StepResult",
    "compute_error_norm",
    "compute_next_step_size",
    "dp54_step",
    "embedded_step",
    "first_order_dynamics",
    "fixed_step_schedule",
    "heun_step",
    "rkf45_step",
]
