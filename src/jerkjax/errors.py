"""Exceptions and the warnings channel shared by all integrators.

Configuration problems raise :class:`InvalidConfigError` before any
stepping begins.  Everything that can go wrong *during* a solve is
recorded as a :class:`SolverWarning` on the returned trajectory instead,
so a caller always gets the (possibly degraded) result back and can decide
what to do with it.  :meth:`~jerkjax.trajectory.Trajectory.raise_for_warnings`
converts recorded warnings into the matching exception.
"""

from __future__ import annotations

import enum
from typing import NamedTuple


class SolverError(Exception):
    """Base class for every error raised by jerkjax."""


class InvalidConfigError(SolverError, ValueError):
    """Step-control configuration or integration span is unusable."""


class StepSizeFloorError(SolverError, ArithmeticError):
    """An adaptive step was accepted at ``min_step`` without meeting tolerance."""


class NonFiniteStateError(SolverError, FloatingPointError):
    """A computed state contains NaN or infinity."""


class StepLimitExceededError(SolverError, RuntimeError):
    """The solve hit ``max_steps`` before reaching the end time."""


class WarningKind(enum.StrEnum):
    """Kinds of soft failure recorded on a trajectory."""

    STEP_SIZE_FLOOR = "step_size_floor"
    NON_FINITE_STATE = "non_finite_state"
    STEP_LIMIT_EXCEEDED = "step_limit_exceeded"


_ERROR_FOR_KIND: dict[WarningKind, type[SolverError]] = {
    WarningKind.STEP_SIZE_FLOOR: StepSizeFloorError,
    WarningKind.NON_FINITE_STATE: NonFiniteStateError,
    WarningKind.STEP_LIMIT_EXCEEDED: StepLimitExceededError,
}


class SolverWarning(NamedTuple):
    """A soft failure observed during a solve.

    Attributes:
        kind: What went wrong.
        t: Time at the start of the offending step.
        step: Step size in use when it happened.
        message: Human-readable description.
    """

    kind: WarningKind
    t: float
    step: float
    message: str

    def to_error(self) -> SolverError:
        """Return the exception type matching this warning, instantiated."""
        return _ERROR_FOR_KIND[self.kind](self.message)
