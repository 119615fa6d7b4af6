"""Method selection and the top-level ``solve`` entry point.

Maps a :class:`MethodId` to a ready-to-use integrator and runs it::

    trajectory = solve(MethodId.RKF45, rhs, initial, config, t_end)

Integrators are stateless, so :func:`create_integrator` returns the shared
module-level instances where no options are given.
"""

from __future__ import annotations

import enum

from jerkjax.errors import InvalidConfigError
from jerkjax.integrators import (
    DOPRI5,
    RKF45,
    AdamsMoultonIntegrator,
    EmbeddedRKIntegrator,
    Integrator,
    ModifiedEulerIntegrator,
    RightHandSide,
    State,
    StepControlConfig,
)
from jerkjax.trajectory import Trajectory


class MethodId(enum.StrEnum):
    """Identifiers of the available integration methods."""

    MODIFIED_EULER = "modified_euler"
    RKF45 = "rkf45"
    DORMAND_PRINCE5 = "dormand_prince5"
    ADAMS_MOULTON4 = "adams_moulton4"


_MODIFIED_EULER = ModifiedEulerIntegrator()
_ADAMS_MOULTON = AdamsMoultonIntegrator()


def create_integrator(method: MethodId | str, **options) -> Integrator:
    """Return the integrator for *method*.

    Args:
        method: A :class:`MethodId` or its string value.
        **options: Only ``bootstrap`` (a :class:`MethodId` of an embedded
            method, or an :class:`EmbeddedRKIntegrator`) for
            ``adams_moulton4`` is recognized.

    Returns:
        Integrator: A shared instance when no options are given.

    Raises:
        InvalidConfigError: Unknown method, unknown option, or a bootstrap
            that is not an embedded Runge-Kutta method.

    Examples:
        ```python
        from jerkjax.solver import MethodId, create_integrator
        create_integrator(MethodId.ADAMS_MOULTON4, bootstrap="dormand_prince5")
        ```
    """
    try:
        method = MethodId(method)
    except ValueError:
        valid = ", ".join(m.value for m in MethodId)
        raise InvalidConfigError(f"Unknown method '{method}'. Must be one of: {valid}") from None

    unknown = set(options) - ({"bootstrap"} if method == MethodId.ADAMS_MOULTON4 else set())
    if unknown:
        raise InvalidConfigError(
            f"Unsupported option(s) for {method.value}: {', '.join(sorted(unknown))}"
        )

    if method == MethodId.MODIFIED_EULER:
        return _MODIFIED_EULER
    if method == MethodId.RKF45:
        return RKF45
    if method == MethodId.DORMAND_PRINCE5:
        return DOPRI5

    bootstrap = options.get("bootstrap")
    if bootstrap is None:
        return _ADAMS_MOULTON
    if not isinstance(bootstrap, EmbeddedRKIntegrator):
        bootstrap = create_integrator(bootstrap)
    if not isinstance(bootstrap, EmbeddedRKIntegrator):
        raise InvalidConfigError(
            f"Adams-Moulton bootstrap must be an embedded Runge-Kutta method, got '{bootstrap.name}'"
        )
    return AdamsMoultonIntegrator(bootstrap=bootstrap)


def solve(
    method: MethodId | str | Integrator,
    rhs: RightHandSide,
    initial: State,
    config: StepControlConfig,
    t_end: float,
) -> Trajectory:
    """Integrate ``x''' = rhs(t, x, x', x'')`` from *initial* to *t_end*.

    Args:
        method: Method identifier, or an integrator instance.
        rhs: Pure model function ``f(t, x, v, a) -> a'``.
        initial: Initial state; its ``t`` is the start time.
        config: Step-size control configuration.
        t_end: End time (must be positive and after ``initial.t``).

    Returns:
        Trajectory: The samples plus the warnings channel.  Configuration
        errors raise; every other problem is recorded in
        ``trajectory.warnings``.

    Raises:
        InvalidConfigError: Unknown method or unusable span.

    Examples:
        ```python
        from jerkjax import BEAM_INITIAL_STATE, EquationConfig, StepControlConfig, create_equation, solve
        rhs = create_equation(EquationConfig.beam())
        traj = solve("rkf45", rhs, BEAM_INITIAL_STATE, StepControlConfig(0.01), 1.0)
        traj.final.x
        ```
    """
    integrator = method if isinstance(method, Integrator) else create_integrator(method)
    return integrator.solve(rhs, initial, config, t_end)
