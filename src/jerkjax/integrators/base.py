"""Abstract interface shared by every integrator.

:class:`Integrator` fixes the ``solve(rhs, initial, config, t_end)``
contract and provides the bookkeeping every concrete method needs:
span validation, the step budget, non-finite detection and the summary
log line.  :func:`fixed_step_schedule` yields the uniform time grid used by
the fixed-step methods.

References
----------
Hairer, E., Norsett, S. P., & Wanner, G. (1993). "Solving Ordinary
Differential Equations I: Non-stiff Problems".
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from collections.abc import Iterator

from jerkjax.errors import NonFiniteStateError, WarningKind
from jerkjax.integrators._types import RightHandSide, State, StepControlConfig
from jerkjax.trajectory import Trajectory

logger = logging.getLogger(__name__)

_LANDING_FRACTION = 1e-9
"""Remainders below this fraction of a step are merged into the final step."""


def fixed_step_schedule(
    t0: float,
    step: float,
    t_end: float,
    clamp_final_step: bool = False,
    start: int = 0,
) -> Iterator[tuple[float, float, float]]:
    """Yield ``(t, h, t_next)`` for successive uniform steps.

    Times are computed as ``t0 + n * step`` so no rounding error accumulates
    over long runs.  By default the loop continues while ``t <= t_end`` and
    the last step may end past ``t_end``.  With *clamp_final_step* the loop
    continues while ``t < t_end`` and the final step is shortened so that
    ``t_next == t_end`` exactly.

    Args:
        t0: Time of the grid origin.
        step: Uniform step size.
        t_end: End time.
        clamp_final_step: Land exactly on ``t_end``.
        start: Grid index of the first step's starting point.

    Yields:
        Tuples of start time, step size and end time of each step.
    """
    n = start
    t = t0 + n * step
    while (t < t_end) if clamp_final_step else (t <= t_end):
        n += 1
        t_next = t0 + n * step
        if clamp_final_step and t_next >= t_end - _LANDING_FRACTION * step:
            yield t, t_end - t, t_end
            return
        yield t, step, t_next
        t = t_next


class Integrator(ABC):
    """Define the interface every concrete integrator must satisfy.

    Parameters
    ----------
    name : str
        Identifier of the method, used to label trajectories and reports.

    Notes
    -----
    Subclasses must implement :attr:`order` and :meth:`solve`.  Integrators
    hold no per-solve state, so one instance may serve any number of
    (concurrent) solves.
    """

    adaptive: bool = False

    def __init__(self, name: str):
        self.name = name

    @property
    @abstractmethod
    def order(self) -> int:
        """Order of accuracy of the propagated solution."""

    @abstractmethod
    def solve(
        self,
        rhs: RightHandSide,
        initial: State,
        config: StepControlConfig,
        t_end: float,
    ) -> Trajectory:
        """Integrate ``x''' = rhs(t, x, x', x'')`` from *initial* to *t_end*.

        Parameters
        ----------
        rhs : RightHandSide
            Pure model function ``f(t, x, v, a) -> a'``.
        initial : State
            Initial condition; its ``t`` is the start time.
        config : StepControlConfig
            Step size, tolerance and limits.
        t_end : float
            End time.

        Returns
        -------
        Trajectory
            Samples from ``initial.t`` to (at least) ``t_end`` unless the
            solve was truncated; see ``Trajectory.warnings``.

        Raises
        ------
        InvalidConfigError
            If the span is unusable.
        NonFiniteStateError
            Only with ``config.fail_on_nonfinite``.
        """

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(name='{self.name}')"

    def _begin(self, initial: State, config: StepControlConfig, t_end: float) -> Trajectory:
        config.validate_span(initial.t, t_end)
        logger.debug(
            "%s: solving t=[%g, %g] with h=%g", self.name, initial.t, t_end, config.initial_step
        )
        return Trajectory(self.name, [State(*(float(v) for v in initial))])

    def _budget_exhausted(
        self, trajectory: Trajectory, config: StepControlConfig, t: float, h: float
    ) -> bool:
        """Record a step-limit warning and return ``True`` once ``max_steps`` is spent."""
        if trajectory.attempts < config.max_steps:
            return False
        trajectory.warn(
            WarningKind.STEP_LIMIT_EXCEEDED,
            t,
            h,
            f"{self.name}: step limit of {config.max_steps} attempts reached at t={t:g}",
        )
        return True

    def _accept(
        self, trajectory: Trajectory, state: State, config: StepControlConfig, t: float, h: float
    ) -> bool:
        """Append *state*; return ``False`` when the solve must stop.

        A non-finite state is kept as the last sample and ends the solve, or
        raises when ``config.fail_on_nonfinite`` is set.
        """
        trajectory.append(state)
        if state.is_finite():
            return True
        message = f"{self.name}: non-finite state at t={state.t:g} (step {h:g} from t={t:g})"
        if config.fail_on_nonfinite:
            raise NonFiniteStateError(message)
        trajectory.warn(WarningKind.NON_FINITE_STATE, t, h, message)
        return False

    def _finish(self, trajectory: Trajectory) -> Trajectory:
        if trajectory.floor_steps:
            logger.warning(
                "%s: %d step(s) accepted at the minimum step size; accuracy is reduced",
                self.name,
                trajectory.floor_steps,
            )
        for warning in trajectory.warnings:
            if warning.kind != WarningKind.STEP_SIZE_FLOOR:
                logger.warning(warning.message)
        logger.debug(
            "%s: finished with %d points, %d attempts (%d rejected)",
            self.name,
            len(trajectory),
            trajectory.attempts,
            trajectory.rejected,
        )
        return trajectory
