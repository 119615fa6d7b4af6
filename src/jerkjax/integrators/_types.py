"""Type definitions for the third-order integrators.

Provides the core data types used across all integrator implementations:

- :data:`RightHandSide`: Signature of the user-supplied model
  ``f(t, x, v, a) -> a'``.
- :class:`State`: One sample ``(t, x, v, a)`` of a trajectory.
- :class:`StepResult`: Output of every single-step function, containing the
  new state, actual timestep used, error estimate, and suggested next
  timestep.
- :class:`StepControlConfig`: Step-size and tolerance configuration shared
  by every integrator.

``State`` and ``StepResult`` are :class:`~typing.NamedTuple` instances, which
JAX treats as pytrees automatically.
"""

from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from jerkjax.config import get_dtype
from jerkjax.errors import InvalidConfigError

RightHandSide = Callable[[ArrayLike, ArrayLike, ArrayLike, ArrayLike], ArrayLike]
"""Model function ``f(t, x, v, a) -> a'`` returning the normalized third derivative."""

Dynamics = Callable[[ArrayLike, Array], Array]
"""First-order form ``dynamics(t, y) -> dy/dt`` over ``y = [x, v, a]``."""


def first_order_dynamics(rhs: RightHandSide) -> Dynamics:
    """Reduce a third-order right-hand side to a first-order system.

    The returned closure maps ``y = [x, v, a]`` to ``[v, a, f(t, x, v, a)]``
    and is traceable by ``jax.jit`` whenever *rhs* is.

    Args:
        rhs: Third-order model ``f(t, x, v, a) -> a'``.

    Returns:
        A callable ``dynamics(t, y) -> dy/dt`` over 3-vectors.
    """

    def dynamics(t, y):
        jerk = jnp.asarray(rhs(t, y[0], y[1], y[2]), dtype=y.dtype)
        return jnp.stack([y[1], y[2], jerk])

    return dynamics


class State(NamedTuple):
    """One time-stamped sample of a trajectory.

    Attributes:
        t: Time.
        x: Displacement (or angle).
        v: Velocity ``dx/dt``.
        a: Acceleration ``d^2x/dt^2``.
    """

    t: float
    x: float
    v: float
    a: float

    @classmethod
    def from_vector(cls, t: float, y: ArrayLike) -> State:
        """Build a state from a time and a ``[x, v, a]`` vector."""
        x, v, a = jnp.asarray(y).tolist()
        return cls(float(t), x, v, a)

    def vector(self) -> Array:
        """Return ``[x, v, a]`` as a JAX array of the configured dtype."""
        return jnp.array([self.x, self.v, self.a], dtype=get_dtype())

    def is_finite(self) -> bool:
        """Return ``True`` when no component is NaN or infinite."""
        return all(math.isfinite(value) for value in self)


class StepResult(NamedTuple):
    """Result of a single integrator step.

    Returned by all step functions (``heun_step``, ``rkf45_step``,
    ``dp54_step``).  For fixed-step methods ``error_estimate`` is always 0.0,
    ``dt_next`` equals ``dt_used`` and ``attempts`` is 1.  The adaptive
    steps return JAX scalars for the numeric fields so they can be traced.

    Attributes:
        state: State vector ``[x, v, a]`` at time ``t + dt_used``.
        dt_used: Actual timestep taken.  For adaptive methods this may be
            smaller than the requested ``dt`` if attempts were rejected.
        error_estimate: Max-norm difference between the embedded solutions
            of the accepted attempt.  Always 0.0 for fixed-step methods.
        dt_next: Suggested timestep for the next step.
        attempts: Number of trial steps evaluated, including rejections.
        at_floor: ``True`` when the step was accepted only because
            ``dt_used`` reached ``min_step``.
    """

    state: Array
    dt_used: float | Array
    error_estimate: float | Array
    dt_next: float | Array
    attempts: int | Array = 1
    at_floor: bool | Array = False


@dataclass(frozen=True)
class StepControlConfig:
    """Step-size control shared by every integrator.

    Fixed-step methods only read ``initial_step`` (as their uniform step),
    ``max_steps``, ``fail_on_nonfinite`` and ``clamp_final_step``.

    Args:
        initial_step: Requested step size ``h`` (must be positive).
        min_step: Step-size floor for adaptive control.  A step at the floor
            is accepted even when it misses the tolerance.
        max_step: Step-size ceiling for adaptive control.
        tolerance: Absolute local error tolerance (max norm over
            ``x, v, a``).
        safety_factor: Multiplicative factor applied to step-size
            predictions.
        min_scale_factor: Minimum allowed ratio ``h_next / h``.
        max_scale_factor: Maximum allowed ratio ``h_next / h``.
        max_steps: Cap on step attempts per solve.  Reaching it ends the solve
            with a ``STEP_LIMIT_EXCEEDED`` warning.
        fail_on_nonfinite: Raise :class:`~jerkjax.errors.NonFiniteStateError`
            as soon as a NaN/Inf state is produced instead of recording a
            warning.
        clamp_final_step: Shorten the last fixed step so the trajectory ends
            exactly on ``t_end``.  When ``False`` fixed-step methods loop
            while ``t <= t_end`` and may end one step past it.

    Raises:
        InvalidConfigError: If any bound is inconsistent.

    Examples:
        ```python
        from jerkjax.integrators import StepControlConfig
        config = StepControlConfig(initial_step=0.01)
        config.tolerance
        ```
    """

    initial_step: float
    min_step: float = 1e-6
    max_step: float = 0.5
    tolerance: float = 1e-6
    safety_factor: float = 0.9
    min_scale_factor: float = 0.1
    max_scale_factor: float = 4.0
    max_steps: int = 100_000
    fail_on_nonfinite: bool = False
    clamp_final_step: bool = False

    def __post_init__(self) -> None:
        if not self.initial_step > 0.0:
            raise InvalidConfigError(
                f"initial_step must be positive, got {self.initial_step}"
            )
        if not self.min_step > 0.0:
            raise InvalidConfigError(f"min_step must be positive, got {self.min_step}")
        if self.min_step > self.max_step:
            raise InvalidConfigError(
                f"min_step ({self.min_step}) must not exceed max_step ({self.max_step})"
            )
        if not self.tolerance > 0.0:
            raise InvalidConfigError(f"tolerance must be positive, got {self.tolerance}")
        if not 0.0 < self.safety_factor <= 1.0:
            raise InvalidConfigError(
                f"safety_factor must be in (0, 1], got {self.safety_factor}"
            )
        if not 0.0 < self.min_scale_factor <= 1.0 <= self.max_scale_factor:
            raise InvalidConfigError(
                "scale factors must satisfy 0 < min_scale_factor <= 1 <= max_scale_factor, "
                f"got ({self.min_scale_factor}, {self.max_scale_factor})"
            )
        if self.max_steps < 1:
            raise InvalidConfigError(f"max_steps must be at least 1, got {self.max_steps}")

    def validate_span(self, t0: float, t_end: float) -> None:
        """Check that ``[t0, t_end]`` is a usable forward integration span.

        Raises:
            InvalidConfigError: If ``t_end <= 0`` or ``t_end <= t0``.
        """
        if not t_end > 0.0:
            raise InvalidConfigError(f"t_end must be positive, got {t_end}")
        if not t_end > t0:
            raise InvalidConfigError(
                f"t_end ({t_end}) must be greater than the initial time ({t0})"
            )

    def clip_step(self, h: float) -> float:
        """Clip *h* into ``[min_step, max_step]``."""
        return min(max(h, self.min_step), self.max_step)
