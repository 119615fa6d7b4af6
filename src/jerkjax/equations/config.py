"""Configuration dataclass for the built-in third-order equations.

:class:`EquationConfig` selects the restoring term and coefficients of

.. math::

    m \\dddot{x} + k \\dot{x} + c R(x) = F_0 \\cos(\\omega t)

Configuration is static: the factory copies the fields into a closure, so
the resulting right-hand side captures no mutable state.
"""

from __future__ import annotations

import math
from dataclasses import dataclass

from jerkjax.equations.models import RESTORING_TERMS
from jerkjax.integrators import State

BEAM_INITIAL_STATE = State(t=0.0, x=0.5, v=0.0, a=-1.0)
"""Initial condition of the beam problem: ``x=0.5, v=0, a=-1`` at ``t=0``."""


@dataclass(frozen=True)
class EquationConfig:
    """Coefficients of the forced, damped third-order oscillator.

    Defaults reproduce the beam problem (cubic stiffness).

    Args:
        mass: Mass or inertia coefficient ``m`` (must be non-zero).
        damping: Viscous coefficient ``k``.
        stiffness: Restoring coefficient ``c``.
        force_amplitude: Forcing amplitude ``F0``.
        force_frequency: Forcing angular frequency ``omega``.
        restoring: ``"cubic"``, ``"sine"`` or ``"linear"``.

    Examples:
        ```python
        from jerkjax.equations import EquationConfig
        config = EquationConfig.beam()
        config.restoring
        ```
    """

    mass: float = 1.0
    damping: float = 0.2
    stiffness: float = 4.0
    force_amplitude: float = 1.0
    force_frequency: float = 2.0 * math.pi
    restoring: str = "cubic"

    def __post_init__(self) -> None:
        if self.restoring not in RESTORING_TERMS:
            raise ValueError(
                f"restoring must be 'cubic', 'sine', or 'linear', got '{self.restoring}'"
            )
        if self.mass == 0.0 or not math.isfinite(self.mass):
            raise ValueError(f"mass must be finite and non-zero, got {self.mass}")

    @staticmethod
    def beam() -> EquationConfig:
        """Preset: beam with cubic stiffness.

        ``m=1, k=0.2, c=4, F0=1, omega=2*pi``; pair it with
        :data:`BEAM_INITIAL_STATE`.

        Returns:
            EquationConfig: The beam configuration.
        """
        return EquationConfig()

    @staticmethod
    def pendulum(
        damping: float = 0.2,
        stiffness: float = 4.0,
        force_amplitude: float = 1.0,
        force_frequency: float = 2.0 * math.pi,
    ) -> EquationConfig:
        """Preset: sine nonlinearity, ``x`` read as an angle.

        Returns:
            EquationConfig: Unit-inertia configuration with ``R(x) = sin(x)``.
        """
        return EquationConfig(
            damping=damping,
            stiffness=stiffness,
            force_amplitude=force_amplitude,
            force_frequency=force_frequency,
            restoring="sine",
        )

    @staticmethod
    def harmonic(omega: float = 1.0) -> EquationConfig:
        """Preset: undamped, unforced ``x''' + omega^2 x' = 0``.

        The velocity obeys ``v'' = -omega^2 v``, so the solution is known in
        closed form::

            x(t) = x0 + (v0/omega) sin(omega t) + (a0/omega^2) (1 - cos(omega t))

        Args:
            omega: Angular frequency.

        Returns:
            EquationConfig: Configuration with only the damping term set.
        """
        return EquationConfig(
            damping=omega**2,
            stiffness=0.0,
            force_amplitude=0.0,
            force_frequency=0.0,
            restoring="linear",
        )
