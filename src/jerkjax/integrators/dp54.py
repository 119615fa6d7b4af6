"""Dormand-Prince 5(4) adaptive integrator (DP54).

Implements the Dormand-Prince embedded Runge-Kutta method with a 5th-order
solution for propagation and a 4th-order solution for error estimation. The
method uses 7 stages per step.

The Dormand-Prince method has the First-Same-As-Last (FSAL) property: the
7th stage is evaluated at the propagated 5th-order solution and only enters
the 4th-order estimate.  This implementation does **not** cache the FSAL
stage between steps, so every trial costs 7 evaluations of the right-hand
side.

The Butcher tableau coefficients are the standard Dormand-Prince values:

- Nodes (c): [0, 1/5, 3/10, 4/5, 8/9, 1, 1]
- 5th-order weights (b_high): [35/384, 0, 500/1113, 125/192, -2187/6784, 11/84, 0]
- 4th-order weights (b_low): [5179/57600, 0, 7571/16695, 393/640, -92097/339200,
  187/2100, 1/40]
"""

from __future__ import annotations

from jax.typing import ArrayLike

from jerkjax.integrators._adaptive import DEFAULT_STEP_CONTROL, adaptive_step
from jerkjax.integrators._tableau import ButcherTableau
from jerkjax.integrators._types import Dynamics, StepControlConfig, StepResult

# 5th-order weights double as the coupling row of the FSAL stage.
_B_HIGH = (35.0 / 384.0, 0.0, 500.0 / 1113.0, 125.0 / 192.0, -2187.0 / 6784.0, 11.0 / 84.0, 0.0)

DP54_TABLEAU = ButcherTableau(
    name="dp54",
    c=(0.0, 1.0 / 5.0, 3.0 / 10.0, 4.0 / 5.0, 8.0 / 9.0, 1.0, 1.0),
    a=(
        (),
        (1.0 / 5.0,),
        (3.0 / 40.0, 9.0 / 40.0),
        (44.0 / 45.0, -56.0 / 15.0, 32.0 / 9.0),
        (19372.0 / 6561.0, -25360.0 / 2187.0, 64448.0 / 6561.0, -212.0 / 729.0),
        (9017.0 / 3168.0, -355.0 / 33.0, 46732.0 / 5247.0, 49.0 / 176.0, -5103.0 / 18656.0),
        _B_HIGH[:6],
    ),
    b_high=_B_HIGH,
    b_low=(
        5179.0 / 57600.0,
        0.0,
        7571.0 / 16695.0,
        393.0 / 640.0,
        -92097.0 / 339200.0,
        187.0 / 2100.0,
        1.0 / 40.0,
    ),
    order=5,
    error_order=4,
)


def dp54_step(
    dynamics: Dynamics,
    t: float,
    state: ArrayLike,
    dt: float,
    config: StepControlConfig | None = None,
) -> StepResult:
    """Perform a single adaptive DP54 integration step.

    Advances the state from time ``t`` by up to ``dt`` using the
    Dormand-Prince 5(4) method with adaptive step-size control. If the
    error exceeds the tolerance, the step is rejected and retried with
    a smaller timestep.

    Args:
        dynamics: First-order dynamics ``f(t, y) -> dy/dt`` over
            ``y = [x, v, a]``.
        t: Current time.
        state: Current state vector.
        dt: Requested timestep. The actual timestep used may be smaller if
            the adaptive controller rejects the initial attempt.
        config: Step-size control configuration. Defaults to
            :data:`DEFAULT_STEP_CONTROL`.  Under ``jax.jit`` it must be a
            static argument.

    Returns:
        StepResult: Named tuple with fields:
            - ``state``: State at ``t + dt_used``.
            - ``dt_used``: Actual timestep taken (<= ``dt``).
            - ``error_estimate``: Error of the accepted attempt.
            - ``dt_next``: Suggested timestep for the next step.
            - ``attempts`` / ``at_floor``: Retry bookkeeping.

    Examples:
        ```python
        import jax.numpy as jnp
        from jerkjax.integrators import dp54_step
        def harmonic(t, y):
            return jnp.array([y[1], y[2], -y[1]])
        result = dp54_step(harmonic, 0.0, jnp.array([0.0, 1.0, 0.0]), 0.1)
        result.state  # ~[sin(0.1), cos(0.1), -sin(0.1)]
        ```
    """
    if config is None:
        config = DEFAULT_STEP_CONTROL
    return adaptive_step(dynamics, DP54_TABLEAU, t, state, dt, config)
