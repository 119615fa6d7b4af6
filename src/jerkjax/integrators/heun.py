"""Modified Euler (Heun) predictor-corrector integrator.

Implements the explicit trapezoidal rule on the first-order form of the
third-order equation.  With ``y = [x, v, a]`` and ``d = [v, a, f]``:

- Predictor: ``y1 = y + h d(t, y)``
- Corrector: ``y_new = y + h (d(t, y) + d(t + h, y1)) / 2``

Component-wise this is ``x_new = x + h (v + v1)/2``,
``v_new = v + h (a + a1)/2`` and ``a_new = a + h (f1 + f2)/2``.

Note that the acceleration update integrates the jerk over the step.  A
plain average of the two jerk evaluations, ``a_new = (f1 + f2)/2``, would
assign a jerk to the acceleration slot and discard the current ``a``; it
is not consistent with ``a' = f``.

The method is second order and has no error estimate, so the step size is
constant and caller-supplied.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax.typing import ArrayLike

from jerkjax.config import get_dtype
from jerkjax.integrators._types import (
    Dynamics,
    RightHandSide,
    State,
    StepControlConfig,
    StepResult,
    first_order_dynamics,
)
from jerkjax.integrators.base import Integrator, fixed_step_schedule
from jerkjax.trajectory import Trajectory


def heun_step(
    dynamics: Dynamics,
    t: float,
    state: ArrayLike,
    dt: float,
) -> StepResult:
    """Perform a single Modified Euler (Heun) integration step.

    Compatible with ``jax.jit`` and ``jax.vmap``.

    Args:
        dynamics: First-order dynamics ``f(t, y) -> dy/dt``.
        t: Current time.
        state: Current state vector ``[x, v, a]``.
        dt: Timestep to take.

    Returns:
        StepResult: ``error_estimate`` is 0.0 and ``dt_next`` equals ``dt``.

    Examples:
        ```python
        import jax.numpy as jnp
        from jerkjax.integrators import heun_step
        def harmonic(t, y):
            return jnp.array([y[1], y[2], -y[1]])
        result = heun_step(harmonic, 0.0, jnp.array([0.0, 1.0, 0.0]), 0.01)
        ```
    """
    state = jnp.asarray(state, dtype=get_dtype())

    d1 = dynamics(t, state)
    predicted = state + dt * d1
    d2 = dynamics(t + dt, predicted)

    state_new = state + 0.5 * dt * (d1 + d2)

    return StepResult(state=state_new, dt_used=dt, error_estimate=0.0, dt_next=dt)


class ModifiedEulerIntegrator(Integrator):
    """Fixed-step Modified Euler (Heun) integrator, order 2.

    Steps uniformly with ``config.initial_step``.  Other step-control fields
    except ``max_steps``, ``fail_on_nonfinite`` and ``clamp_final_step`` are
    ignored.
    """

    def __init__(self, name: str = "modified_euler"):
        super().__init__(name)

    @property
    def order(self) -> int:
        return 2

    def solve(
        self,
        rhs: RightHandSide,
        initial: State,
        config: StepControlConfig,
        t_end: float,
    ) -> Trajectory:
        trajectory = self._begin(initial, config, t_end)
        dynamics = first_order_dynamics(rhs)
        y = trajectory.initial.vector()

        for t, h, t_next in fixed_step_schedule(
            initial.t, config.initial_step, t_end, config.clamp_final_step
        ):
            if self._budget_exhausted(trajectory, config, t, h):
                break
            trajectory.attempts += 1
            y = heun_step(dynamics, t, y, h).state
            if not self._accept(trajectory, State.from_vector(t_next, y), config, t, h):
                break

        return self._finish(trajectory)
