"""Runge-Kutta-Fehlberg 4(5) adaptive integrator (RKF45).

Implements the Fehlberg embedded Runge-Kutta method with a 5th-order solution
for propagation and a 4th-order solution for error estimation. The method uses
6 stages per step.

The Butcher tableau coefficients are taken from the standard Fehlberg
formulation:

- Nodes (c): [0, 1/4, 3/8, 12/13, 1, 1/2]
- 5th-order weights (b_high): [16/135, 0, 6656/12825, 28561/56430, -9/50, 2/55]
- 4th-order weights (b_low): [25/216, 0, 1408/2565, 2197/4104, -1/5, 0]
"""

from __future__ import annotations

from jax.typing import ArrayLike

from jerkjax.integrators._adaptive import DEFAULT_STEP_CONTROL, adaptive_step
from jerkjax.integrators._tableau import ButcherTableau
from jerkjax.integrators._types import Dynamics, StepControlConfig, StepResult

RKF45_TABLEAU = ButcherTableau(
    name="rkf45",
    c=(0.0, 1.0 / 4.0, 3.0 / 8.0, 12.0 / 13.0, 1.0, 1.0 / 2.0),
    a=(
        (),
        (1.0 / 4.0,),
        (3.0 / 32.0, 9.0 / 32.0),
        (1932.0 / 2197.0, -7200.0 / 2197.0, 7296.0 / 2197.0),
        (439.0 / 216.0, -8.0, 3680.0 / 513.0, -845.0 / 4104.0),
        (-8.0 / 27.0, 2.0, -3544.0 / 2565.0, 1859.0 / 4104.0, -11.0 / 40.0),
    ),
    b_high=(16.0 / 135.0, 0.0, 6656.0 / 12825.0, 28561.0 / 56430.0, -9.0 / 50.0, 2.0 / 55.0),
    b_low=(25.0 / 216.0, 0.0, 1408.0 / 2565.0, 2197.0 / 4104.0, -1.0 / 5.0, 0.0),
    order=5,
    error_order=4,
)


def rkf45_step(
    dynamics: Dynamics,
    t: float,
    state: ArrayLike,
    dt: float,
    config: StepControlConfig | None = None,
) -> StepResult:
    """Perform a single adaptive RKF45 integration step.

    Advances the state from time ``t`` by up to ``dt`` using the
    Runge-Kutta-Fehlberg 4(5) method with adaptive step-size control.
    If the error exceeds the tolerance, the step is rejected and retried
    with a smaller timestep.

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
        from jerkjax.integrators import rkf45_step
        def harmonic(t, y):
            return jnp.array([y[1], y[2], -y[1]])
        result = rkf45_step(harmonic, 0.0, jnp.array([0.0, 1.0, 0.0]), 0.1)
        result.state  # ~[sin(0.1), cos(0.1), -sin(0.1)]
        ```
    """
    if config is None:
        config = DEFAULT_STEP_CONTROL
    return adaptive_step(dynamics, RKF45_TABLEAU, t, state, dt, config)
