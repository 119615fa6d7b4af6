"""Butcher tableaus and the generic embedded Runge-Kutta stage kernel.

A :class:`ButcherTableau` holds the nodes, coupling rows and the two weight
vectors of an embedded pair.  :func:`embedded_step` evaluates one trial step
of any such pair on the ``[x, v, a]`` state vector; the three components
are propagated together through every stage since each stage derivative
``[v, a, f]`` couples all of them.

The kernel is pure JAX, so it can be wrapped in ``jax.jit`` (with the
dynamics and tableau as static arguments) or ``jax.vmap``.
"""

from __future__ import annotations

from typing import NamedTuple

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike

from jerkjax.config import get_dtype
from jerkjax.integrators._types import Dynamics


class ButcherTableau(NamedTuple):
    """Coefficients of an explicit embedded Runge-Kutta pair.

    Attributes:
        name: Short identifier of the pair.
        c: Stage nodes, one per stage.
        a: Lower-triangular coupling rows; row ``i`` has ``i`` entries.
        b_high: Weights of the propagated (higher-order) solution.
        b_low: Weights of the embedded (lower-order) solution.
        order: Order of the propagated solution.
        error_order: Order ``p`` used in the step-size exponent ``1/(p+1)``.
    """

    name: str
    c: tuple[float, ...]
    a: tuple[tuple[float, ...], ...]
    b_high: tuple[float, ...]
    b_low: tuple[float, ...]
    order: int
    error_order: int

    @property
    def stages(self) -> int:
        """Number of stage evaluations per trial step."""
        return len(self.c)


class EmbeddedTrial(NamedTuple):
    """One trial step of an embedded pair.

    Attributes:
        state_high: Higher-order solution (the one that is propagated).
        state_low: Lower-order solution.
    """

    state_high: Array
    state_low: Array


def _combine(weights: tuple[float, ...], k: list[Array]) -> Array:
    total = jnp.zeros_like(k[0])
    for w, ki in zip(weights, k):
        if w != 0.0:
            total = total + w * ki
    return total


def embedded_step(
    dynamics: Dynamics,
    tableau: ButcherTableau,
    t: ArrayLike,
    state: ArrayLike,
    dt: ArrayLike,
) -> EmbeddedTrial:
    """Evaluate a single trial step of an embedded Runge-Kutta pair.

    No acceptance logic is applied; see
    :func:`~jerkjax.integrators._adaptive.adaptive_step` for that.

    Args:
        dynamics: First-order dynamics ``f(t, y) -> dy/dt``.
        tableau: Coefficients of the pair.
        t: Time at the start of the step.
        state: State vector ``[x, v, a]`` at *t*.
        dt: Trial step size.

    Returns:
        EmbeddedTrial: The higher- and lower-order solutions.

    Examples:
        ```python
        import jax.numpy as jnp
        from jerkjax.integrators import RKF45_TABLEAU, embedded_step
        def harmonic(t, y):
            return jnp.array([y[1], y[2], -y[1]])
        trial = embedded_step(harmonic, RKF45_TABLEAU, 0.0, jnp.array([0.0, 1.0, 0.0]), 0.1)
        trial.state_high  # ~[sin(0.1), cos(0.1), -sin(0.1)]
        ```
    """
    state = jnp.asarray(state, dtype=get_dtype())

    k: list[Array] = []
    for c_i, row in zip(tableau.c, tableau.a):
        y_i = state
        if row:
            y_i = state + dt * _combine(row, k)
        k.append(dynamics(t + c_i * dt, y_i))

    state_high = state + dt * _combine(tableau.b_high, k)
    state_low = state + dt * _combine(tableau.b_low, k)
    return EmbeddedTrial(state_high=state_high, state_low=state_low)
