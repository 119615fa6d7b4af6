"""Adaptive embedded Runge-Kutta integrator.

:class:`EmbeddedRKIntegrator` drives any :class:`ButcherTableau` pair over a
whole span.  Two instances are provided, :data:`RKF45` (Fehlberg 4(5)) and
:data:`DOPRI5` (Dormand-Prince 5(4)).

Each step is clamped so it never passes ``t_end``; the step that reaches it
lands on ``t_end`` exactly.  A rejected attempt is retried from the same
time with a smaller step, and the step size is re-predicted after every
attempt.  Steps that reach ``min_step`` are accepted with a
``STEP_SIZE_FLOOR`` warning instead of stalling.

:meth:`EmbeddedRKIntegrator.solve_fixed` runs the same tableau at a fixed
step without error control.  It is used to bootstrap the Adams-Moulton
method.
"""

from __future__ import annotations

import functools
from collections.abc import Iterator

import jax

from jerkjax.errors import WarningKind
from jerkjax.integrators._adaptive import adaptive_step
from jerkjax.integrators._tableau import ButcherTableau, embedded_step
from jerkjax.integrators._types import (
    RightHandSide,
    State,
    StepControlConfig,
    first_order_dynamics,
)
from jerkjax.integrators.base import Integrator, fixed_step_schedule
from jerkjax.integrators.dp54 import DP54_TABLEAU
from jerkjax.integrators.rkf45 import RKF45_TABLEAU
from jerkjax.trajectory import Trajectory


class EmbeddedRKIntegrator(Integrator):
    """Adaptive-step integrator parameterized by an embedded Butcher tableau.

    Args:
        tableau: Coefficients of the embedded pair.
        name: Identifier used for trajectories; defaults to ``tableau.name``.

    Examples:
        ```python
        import jax.numpy as jnp
        from jerkjax.integrators import DOPRI5, State, StepControlConfig
        rhs = lambda t, x, v, a: -v
        traj = DOPRI5.solve(rhs, State(0.0, 0.0, 1.0, 0.0), StepControlConfig(0.01), 1.0)
        traj.final.t  # exactly 1.0
        ```
    """

    adaptive = True

    def __init__(self, tableau: ButcherTableau, name: str | None = None):
        super().__init__(name or tableau.name)
        self.tableau = tableau

    @property
    def order(self) -> int:
        return self.tableau.order

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
        t = trajectory.initial.t
        h = config.clip_step(config.initial_step)
        step = jax.jit(functools.partial(adaptive_step, dynamics, self.tableau, config=config))

        while t < t_end:
            if self._budget_exhausted(trajectory, config, t, h):
                break
            landing = t + h >= t_end
            h_try = t_end - t if landing else h

            result = step(t, y, h_try)
            attempts = int(result.attempts)
            error = float(result.error_estimate)
            # The first attempt uses h_try unchanged.
            dt_used = h_try if attempts == 1 else float(result.dt_used)
            trajectory.attempts += attempts
            trajectory.rejected += attempts - 1
            trajectory.error_estimates.append(error)

            if bool(result.at_floor):
                trajectory.warn(
                    WarningKind.STEP_SIZE_FLOOR,
                    t,
                    dt_used,
                    f"{self.name}: step {dt_used:g} at t={t:g} accepted with error "
                    f"{error:.3e} >= tolerance {config.tolerance:g}",
                )

            # Only an unshortened landing attempt reaches t_end exactly.
            if landing and attempts == 1:
                t_next = t_end
            else:
                t_next = min(t + dt_used, t_end)
            y = result.state
            if not self._accept(trajectory, State.from_vector(t_next, y), config, t, dt_used):
                break
            t = t_next
            h = float(result.dt_next)

        return self._finish(trajectory)

    def iter_fixed(
        self,
        rhs: RightHandSide,
        initial: State,
        step: float,
        t_end: float = float("inf"),
        clamp_final_step: bool = False,
    ) -> Iterator[State]:
        """Yield the states of a fixed-step run of this tableau.

        The initial state is not yielded.  The propagated (higher-order)
        solution is used and no error control is applied.  With the default
        ``t_end`` the iterator is unbounded.
        """
        dynamics = first_order_dynamics(rhs)
        y = initial.vector()
        for t, h, t_next in fixed_step_schedule(initial.t, step, t_end, clamp_final_step):
            y = embedded_step(dynamics, self.tableau, t, y, h).state_high
            yield State.from_vector(t_next, y)

    def solve_fixed(
        self,
        rhs: RightHandSide,
        initial: State,
        config: StepControlConfig,
        t_end: float,
    ) -> Trajectory:
        """Integrate with a fixed step ``config.initial_step``.

        Follows the fixed-step boundary policy: the loop runs while
        ``t <= t_end`` unless ``config.clamp_final_step`` is set.
        """
        trajectory = self._begin(initial, config, t_end)
        t = initial.t
        h = config.initial_step
        for state in self.iter_fixed(
            rhs, trajectory.initial, config.initial_step, t_end, config.clamp_final_step
        ):
            if self._budget_exhausted(trajectory, config, t, h):
                break
            trajectory.attempts += 1
            h = state.t - t
            if not self._accept(trajectory, state, config, t, h):
                break
            t = state.t
        return self._finish(trajectory)


RKF45 = EmbeddedRKIntegrator(RKF45_TABLEAU)
"""Runge-Kutta-Fehlberg 4(5)."""

DOPRI5 = EmbeddedRKIntegrator(DP54_TABLEAU, name="dormand_prince5")
"""Dormand-Prince 5(4)."""
