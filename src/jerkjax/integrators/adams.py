"""Adams-Bashforth / Adams-Moulton predictor-corrector integrator.

A fixed-step multistep method.  The first four samples (the initial state
and three steps) come from a fixed-step run of an embedded Runge-Kutta
tableau at the same step size; afterwards every step costs two evaluations
of the right-hand side:

1. Predictor (3-step Adams-Bashforth) on ``y = [x, v, a]`` with derivative
   history ``d_n = [v_n, a_n, f_n]``::

       y_pred = y_n + h (23 d_n - 16 d_{n-1} + 5 d_{n-2}) / 12

2. Corrector (Adams-Moulton, applied once), acceleration first so that the
   corrected acceleration feeds the velocity and the corrected velocity
   feeds the displacement::

       a_new = a_n + h (5 f_pred + 8 f_n - f_{n-1}) / 12
       v_new = v_n + h (5 a_new  + 8 a_n - a_{n-1}) / 12
       x_new = x_n + h (5 v_new  + 8 v_n - v_{n-1}) / 12

The derivative history is a ``deque(maxlen=4)`` ring buffer, so the method
never reaches back into the growing trajectory.  There is no local error
control: accuracy depends on ``h`` and the bootstrap alone.
"""

from __future__ import annotations

import math
from collections import deque
from itertools import islice

import jax.numpy as jnp

from jerkjax.integrators._types import (
    RightHandSide,
    State,
    StepControlConfig,
    first_order_dynamics,
)
from jerkjax.integrators.base import _LANDING_FRACTION, Integrator, fixed_step_schedule
from jerkjax.integrators.embedded import RKF45, EmbeddedRKIntegrator
from jerkjax.trajectory import Trajectory

BOOTSTRAP_POINTS = 4
"""Number of leading samples (initial state included) taken from the bootstrap method."""

_HISTORY = 4

# Adams-Bashforth 3-step weights, newest first, over a common denominator of 12.
_AB3 = (23.0, -16.0, 5.0)
# Adams-Moulton weights for (predicted, newest, previous).
_AM = (5.0, 8.0, -1.0)


class AdamsMoultonIntegrator(Integrator):
    """Fixed-step Adams predictor-corrector bootstrapped by an embedded RK method.

    Args:
        bootstrap: Integrator whose fixed-step run supplies the first
            :data:`BOOTSTRAP_POINTS` samples.  Defaults to :data:`RKF45`.
        name: Identifier used for trajectories.

    Notes
    -----
    The bootstrap always contributes all four samples, even when
    ``t_end`` is shorter than three steps.  With
    ``config.clamp_final_step`` a shortened final step is taken with the
    bootstrap tableau, since the multistep weights assume uniform spacing.
    """

    def __init__(
        self,
        bootstrap: EmbeddedRKIntegrator = RKF45,
        name: str = "adams_moulton4",
    ):
        super().__init__(name)
        self.bootstrap = bootstrap

    @property
    def order(self) -> int:
        return 3

    def solve(
        self,
        rhs: RightHandSide,
        initial: State,
        config: StepControlConfig,
        t_end: float,
    ) -> Trajectory:
        trajectory = self._begin(initial, config, t_end)
        dynamics = first_order_dynamics(rhs)
        h = config.initial_step

        history: deque = deque(maxlen=_HISTORY)
        history.append(dynamics(initial.t, trajectory.initial.vector()))
        t = trajectory.initial.t
        for state in islice(
            self.bootstrap.iter_fixed(rhs, trajectory.initial, h), BOOTSTRAP_POINTS - 1
        ):
            trajectory.attempts += 1
            if not self._accept(trajectory, state, config, t, h):
                return self._finish(trajectory)
            history.append(dynamics(state.t, state.vector()))
            t = state.t

        for t, step, t_next in fixed_step_schedule(
            initial.t, h, t_end, config.clamp_final_step, start=BOOTSTRAP_POINTS - 1
        ):
            if self._budget_exhausted(trajectory, config, t, step):
                break
            trajectory.attempts += 1
            current = trajectory.final
            if not math.isclose(step, h, rel_tol=_LANDING_FRACTION):
                # Shortened final step: the multistep weights need uniform spacing.
                state = next(self.bootstrap.iter_fixed(rhs, current, step, t_end))
                state = state._replace(t=t_next)
            else:
                state = self._predict_correct(rhs, current, history, h, t_next)
            if not self._accept(trajectory, state, config, t, step):
                break
            history.append(dynamics(state.t, state.vector()))

        return self._finish(trajectory)

    @staticmethod
    def _predict_correct(
        rhs: RightHandSide,
        current: State,
        history: deque,
        h: float,
        t_next: float,
    ) -> State:
        d0, d1, d2 = history[-1], history[-2], history[-3]
        y0 = current.vector()

        y_pred = y0 + h * (_AB3[0] * d0 + _AB3[1] * d1 + _AB3[2] * d2) / 12.0
        f_pred = rhs(t_next, y_pred[0], y_pred[1], y_pred[2])

        w_pred, w0, w1 = _AM
        a_new = y0[2] + h * (w_pred * f_pred + w0 * d0[2] + w1 * d1[2]) / 12.0
        v_new = y0[1] + h * (w_pred * a_new + w0 * d0[1] + w1 * d1[1]) / 12.0
        x_new = y0[0] + h * (w_pred * v_new + w0 * d0[0] + w1 * d1[0]) / 12.0

        return State.from_vector(t_next, jnp.stack([x_new, v_new, a_new]))
