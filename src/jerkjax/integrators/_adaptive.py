"""Adaptive step-size control utilities for embedded Runge-Kutta methods.

Provides the error-norm computation, the step-size adjustment rule and the
accept/reject loop shared by the RKF45 and DP54 integrators:

1. Compute the max-norm of the difference between the embedded solutions.
2. Accept the step if the error is below the tolerance, or if the step has
   already shrunk to ``min_step`` (step-size floor).
3. Predict the next step size from the error and the order of the error
   estimator, whether or not the step was accepted.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from jerkjax.config import get_dtype
from jerkjax.integrators._tableau import ButcherTableau, embedded_step
from jerkjax.integrators._types import Dynamics, StepControlConfig, StepResult

_ERROR_FLOOR = 1e-16
"""Lower bound on the error used in the step-size formula (avoids 1/0)."""

DEFAULT_STEP_CONTROL = StepControlConfig(initial_step=0.01)
"""Step control used by :func:`rkf45_step` and :func:`dp54_step` when none is
given.  A single step never reads ``initial_step``."""


def compute_error_norm(error_vec: ArrayLike) -> Array:
    """Compute the local error estimate of an embedded step.

    Uses the infinity norm over the ``x``, ``v`` and ``a`` components:

    .. math::

        \\text{err} = \\max(|\\Delta x|, |\\Delta v|, |\\Delta a|)

    Args:
        error_vec: Difference between high-order and low-order solutions.

    Returns:
        jax.Array: Scalar absolute error. NaN if any component is NaN.
    """
    error_vec = jnp.asarray(error_vec, dtype=get_dtype())
    return jnp.max(jnp.abs(error_vec))


def compute_next_step_size(
    error: ArrayLike,
    h: ArrayLike,
    order: float,
    tolerance: float,
    safety_factor: float,
    min_scale_factor: float,
    max_scale_factor: float,
    min_step: float,
    max_step: float,
) -> Array:
    """Predict the step size for the next attempt from the latest error.

    The controller predicts

    .. math::

        h_{\\text{next}} = h \\cdot S \\cdot
            \\left(\\frac{\\text{tol}}{\\max(\\text{err}, \\epsilon)}\\right)^{1/(p+1)}

    where *S* is the safety factor and *p* is the order of the error
    estimator.  The scale is clamped to ``[min_scale_factor,
    max_scale_factor]`` and the result to ``[min_step, max_step]``.  A
    non-finite error always yields the minimum scale.

    Args:
        error: Error from :func:`compute_error_norm`.
        h: Step size of the attempt that produced *error*.
        order: Order of the error estimator (4.0 for RKF45 and DP54).
        tolerance: Absolute error tolerance.
        safety_factor: Multiplicative safety factor (typically 0.9).
        min_scale_factor: Minimum allowed ratio ``h_next / h``.
        max_scale_factor: Maximum allowed ratio ``h_next / h``.
        min_step: Absolute minimum step size.
        max_step: Absolute maximum step size.

    Returns:
        jax.Array: Suggested next step size.
    """
    error = jnp.asarray(error, dtype=get_dtype())
    h = jnp.asarray(h, dtype=get_dtype())

    exponent = 1.0 / (order + 1.0)
    bounded = jnp.where(jnp.isfinite(error), jnp.maximum(error, _ERROR_FLOOR), jnp.inf)
    scale = safety_factor * jnp.power(tolerance / bounded, exponent)

    # Growth and shrink limits
    scale = jnp.clip(scale, min_scale_factor, max_scale_factor)

    return jnp.clip(h * scale, min_step, max_step)


def adaptive_step(
    dynamics: Dynamics,
    tableau: ButcherTableau,
    t: float,
    state: ArrayLike,
    dt: float,
    config: StepControlConfig,
) -> StepResult:
    """Take one accepted step of an embedded pair, retrying on rejection.

    Trial steps are evaluated from the same ``t`` with shrinking step sizes
    until the error drops below ``config.tolerance`` or the step reaches
    ``config.min_step``.  The attempt that lands on the floor is accepted
    regardless of its error and flagged with ``at_floor``.

    A requested ``dt`` smaller than ``min_step`` (e.g. the remainder before
    the end time) is attempted as-is and treated as being at the floor.

    The retries run inside ``jax.lax.while_loop``, so the step can be traced
    with ``jax.jit`` or ``jax.vmap`` as long as *dynamics* and *tableau* are
    static and *config* is a Python constant.

    Args:
        dynamics: First-order dynamics ``f(t, y) -> dy/dt``.
        tableau: Embedded Butcher tableau.
        t: Current time.
        state: Current state vector ``[x, v, a]``.
        dt: Requested timestep (positive).
        config: Step-size control configuration.

    Returns:
        StepResult: The accepted step.  Every field is a JAX scalar
        (``attempts`` is ``int32``, ``at_floor`` is boolean).
    """
    dtype = get_dtype()
    state = jnp.asarray(state, dtype=dtype)

    def cond_fn(carry):
        _h, _attempts, accepted, _at_floor, _state_out, _error_out, _h_next = carry
        return ~accepted

    def body_fn(carry):
        h, attempts, _accepted, _at_floor, _state_out, _error_out, _h_next = carry
        trial = embedded_step(dynamics, tableau, t, state, h)
        error = compute_error_norm(trial.state_high - trial.state_low)
        h_next = compute_next_step_size(
            error, h, tableau.error_order, config.tolerance,
            config.safety_factor, config.min_scale_factor,
            config.max_scale_factor, config.min_step, config.max_step,
        )
        within_tolerance = error < config.tolerance
        accepted = within_tolerance | (h <= config.min_step)
        # A rejected error is at least the tolerance (or NaN), so h_next < h
        # and the loop reaches min_step after finitely many attempts.
        h = jnp.where(accepted, h, h_next)
        return (h, attempts + 1, accepted, ~within_tolerance, trial.state_high, error, h_next)

    initial = (
        jnp.asarray(dt, dtype=dtype),
        jnp.asarray(0, dtype=jnp.int32),
        jnp.asarray(False),
        jnp.asarray(False),
        state,
        jnp.asarray(jnp.inf, dtype=dtype),
        jnp.asarray(dt, dtype=dtype),
    )
    h, attempts, _accepted, at_floor, state_out, error, h_next = jax.lax.while_loop(
        cond_fn, body_fn, initial
    )

    return StepResult(
        state=state_out,
        dt_used=h,
        error_estimate=error,
        dt_next=h_next,
        attempts=attempts,
        at_floor=at_floor,
    )
