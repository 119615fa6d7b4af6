"""Built-in third-order equations.

Provides :class:`EquationConfig` to describe the forced, damped oscillator
``m x''' + k x' + c R(x) = F0 cos(omega t)`` and :func:`create_equation`
to turn it into a right-hand side for the integrators.
"""

from jerkjax.equations.config import BEAM_INITIAL_STATE, EquationConfig
from jerkjax.equations.factory import create_equation
from jerkjax.equations.models import (
    RESTORING_TERMS,
    harmonic_forcing,
    jerk,
    restoring_cubic,
    restoring_linear,
    restoring_sine,
)

__all__ = [
    "BEAM_INITIAL_STATE",
    "EquationConfig",
    "RESTORING_TERMS",
    "create_equation",
    "harmonic_forcing",
    "jerk",
    "restoring_cubic",
    "restoring_linear",
    "restoring_sine",
]
