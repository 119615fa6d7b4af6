"""Trajectories produced by the integrators.

A :class:`Trajectory` is the ordered list of :class:`State` samples from a
single solve, starting with the initial condition, together with the
warnings channel and step statistics of that solve.  Trajectories are
created fresh by every call to ``solve``; nothing is shared between them.
"""

from __future__ import annotations

from collections.abc import Iterator

import jax.numpy as jnp
from jax import Array

from jerkjax.config import get_dtype, get_time_eq_tolerance
from jerkjax.errors import SolverWarning, WarningKind
from jerkjax.integrators._types import State

_TRUNCATING = (WarningKind.NON_FINITE_STATE, WarningKind.STEP_LIMIT_EXCEEDED)


class Trajectory:
    """Ordered, time-increasing sequence of states from one solve.

    Args:
        method: Name of the integrator that produced the trajectory.
        states: Initial samples, normally just the initial state.

    Attributes:
        method: Name of the producing integrator.
        states: The samples, in increasing time order.
        warnings: Soft failures recorded during the solve.
        error_estimates: Local error estimate of every accepted step
            (adaptive methods only; empty otherwise).
        attempts: Number of trial steps evaluated, including rejections.
        rejected: Number of rejected trial steps.
    """

    def __init__(self, method: str, states: list[State] | None = None):
        self.method = method
        self.states: list[State] = list(states) if states else []
        self.warnings: list[SolverWarning] = []
        self.error_estimates: list[float] = []
        self.attempts = 0
        self.rejected = 0

    def __len__(self) -> int:
        return len(self.states)

    def __iter__(self) -> Iterator[State]:
        return iter(self.states)

    def __getitem__(self, index):
        return self.states[index]

    def __repr__(self) -> str:
        span = f"t=[{self.initial.t:g}, {self.final.t:g}]" if self.states else "empty"
        return (
            f"Trajectory(method='{self.method}', points={len(self)}, {span}, "
            f"warnings={len(self.warnings)})"
        )

    @property
    def initial(self) -> State:
        """The first sample (the initial condition)."""
        return self.states[0]

    @property
    def final(self) -> State:
        """The last sample."""
        return self.states[-1]

    @property
    def degraded(self) -> bool:
        """``True`` when any warning was recorded during the solve."""
        return bool(self.warnings)

    @property
    def truncated(self) -> bool:
        """``True`` when the solve ended before reaching its end time."""
        return any(w.kind in _TRUNCATING for w in self.warnings)

    @property
    def floor_steps(self) -> int:
        """Number of steps accepted at ``min_step`` without meeting tolerance."""
        return sum(1 for w in self.warnings if w.kind == WarningKind.STEP_SIZE_FLOOR)

    def append(self, state: State) -> None:
        """Append a sample."""
        self.states.append(state)

    def warn(self, kind: WarningKind, t: float, step: float, message: str) -> None:
        """Record a soft failure on the warnings channel."""
        self.warnings.append(SolverWarning(kind, float(t), float(step), message))

    def times(self) -> Array:
        """Return the sample times as a 1-D array."""
        return jnp.array([s.t for s in self.states], dtype=get_dtype())

    def as_array(self) -> Array:
        """Return the samples as an ``(N, 4)`` array of ``[t, x, v, a]`` rows."""
        return jnp.array([tuple(s) for s in self.states], dtype=get_dtype())

    def state_near(self, t: float, tol: float | None = None) -> State | None:
        """Locate the sample representing time *t*.

        Returns the sample closest to *t* among those with
        ``|s.t - t| < tol`` (the earliest one on a tie).  Failing that, the
        last sample with ``s.t <= t`` is returned, provided the solve was not
        truncated (a truncated trajectory has no sample standing for *t*).

        Args:
            t: Target time.
            tol: Matching tolerance.  Defaults to the dtype-dependent
                :func:`~jerkjax.config.get_time_eq_tolerance`.

        Returns:
            The matching state, or ``None``.
        """
        if tol is None:
            tol = get_time_eq_tolerance()
        matches = [s for s in self.states if abs(s.t - t) < tol]
        if matches:
            return min(matches, key=lambda s: abs(s.t - t))
        if self.truncated:
            return None
        earlier = [s for s in self.states if s.t <= t]
        return earlier[-1] if earlier else None

    def raise_for_warnings(self, include_floor: bool = False) -> Trajectory:
        """Raise the exception matching the first serious recorded warning.

        Step-size floor warnings only indicate reduced accuracy and are
        ignored unless *include_floor* is set.

        Returns:
            The trajectory itself, so the call can be chained.

        Raises:
            NonFiniteStateError: A state contained NaN or infinity.
            StepLimitExceededError: The solve ran out of step attempts.
            StepSizeFloorError: Only with *include_floor*.
        """
        for warning in self.warnings:
            if warning.kind == WarningKind.STEP_SIZE_FLOOR and not include_floor:
                continue
            raise warning.to_error()
        return self
