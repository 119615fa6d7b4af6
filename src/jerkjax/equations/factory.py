"""Right-hand-side factory for the built-in equations.

Composes the terms of :mod:`jerkjax.equations.models` into a single
``rhs(t, x, v, a) -> a'`` closure compatible with every jerkjax
integrator.  The coefficients are copied into local variables, so the
closure is pure and can be shared between concurrent solves.
"""

from __future__ import annotations

from jerkjax.equations.config import EquationConfig
from jerkjax.equations.models import jerk
from jerkjax.integrators import RightHandSide


def create_equation(config: EquationConfig | None = None) -> RightHandSide:
    """Create the right-hand side for a configured third-order equation.

    Args:
        config: Equation coefficients.  Defaults to the beam problem
            (``EquationConfig.beam()``).

    Returns:
        A callable ``rhs(t, x, v, a) -> a'`` returning the normalized
        third derivative.

    Examples:
        ```python
        from jerkjax.equations import BEAM_INITIAL_STATE, EquationConfig, create_equation
        rhs = create_equation(EquationConfig.beam())
        rhs(0.0, 0.5, 0.0, -1.0)  # 1 - 4 * 0.125 = 0.5
        ```
    """
    if config is None:
        config = EquationConfig.beam()

    _mass = config.mass
    _damping = config.damping
    _stiffness = config.stiffness
    _amplitude = config.force_amplitude
    _omega = config.force_frequency
    _restoring = config.restoring

    def rhs(t, x, v, a):
        return jerk(t, x, v, _mass, _damping, _stiffness, _amplitude, _omega, _restoring)

    return rhs
