"""Building blocks of the forced, damped third-order oscillator.

The equations in scope all have the form

.. math::

    m \\dddot{x} + k \\dot{x} + c R(x) = F_0 \\cos(\\omega t)

and differ only in the restoring term :math:`R`.  Each function here
returns one normalized term (already divided by :math:`m`) so that
:func:`~jerkjax.equations.factory.create_equation` can assemble them.
All are total functions of their arguments.
"""

from __future__ import annotations

import jax.numpy as jnp
from jax import Array
from jax.typing import ArrayLike


def restoring_cubic(x: ArrayLike) -> Array:
    """Cubic stiffness ``R(x) = x^3`` (the beam problem)."""
    return jnp.power(x, 3)


def restoring_sine(x: ArrayLike) -> Array:
    """Sine nonlinearity ``R(x) = sin(x)`` for angle-like displacements."""
    return jnp.sin(x)


def restoring_linear(x: ArrayLike) -> Array:
    """Linear stiffness ``R(x) = x``."""
    return jnp.asarray(x)


RESTORING_TERMS = {
    "cubic": restoring_cubic,
    "sine": restoring_sine,
    "linear": restoring_linear,
}
"""Restoring-term functions by name, as accepted by ``EquationConfig.restoring``."""


def harmonic_forcing(t: ArrayLike, amplitude: float, omega: float) -> Array:
    """External force ``F0 cos(omega t)``.

    Args:
        t: Time.
        amplitude: Force amplitude ``F0``.
        omega: Angular frequency [rad per unit time].

    Returns:
        The force at *t* (not yet divided by the mass).
    """
    return amplitude * jnp.cos(omega * t)


def jerk(
    t: ArrayLike,
    x: ArrayLike,
    v: ArrayLike,
    mass: float,
    damping: float,
    stiffness: float,
    amplitude: float,
    omega: float,
    restoring: str = "cubic",
) -> Array:
    """Normalized third derivative of the forced, damped oscillator.

    .. math::

        \\dddot{x} = \\frac{F_0 \\cos(\\omega t) - k v - c R(x)}{m}

    The acceleration does not enter the model; it is still part of the
    state because the equation is third order.

    Args:
        t: Time.
        x: Displacement.
        v: Velocity.
        mass: Mass (or inertia) ``m``.
        damping: Viscous coefficient ``k``.
        stiffness: Restoring coefficient ``c``.
        amplitude: Forcing amplitude ``F0``.
        omega: Forcing angular frequency.
        restoring: Name of the restoring term, see :data:`RESTORING_TERMS`.

    Returns:
        The third derivative ``x'''``.

    Examples:
        ```python
        import jax.numpy as jnp
        from jerkjax.equations.models import jerk
        jerk(0.0, 0.5, 0.0, 1.0, 0.2, 4.0, 1.0, 2 * jnp.pi)  # 0.5
        ```
    """
    force = harmonic_forcing(t, amplitude, omega)
    return (force - damping * v - stiffness * RESTORING_TERMS[restoring](x)) / mass
