"""Cross-method comparison at a common end time.

:func:`compare` solves the same problem with several methods and reports,
for each, the value of one state component at ``t_end`` and its relative
deviation from a reference method::

    deviation = |value - reference| / |reference| * 100

The reference (Dormand-Prince 5(4) by default) is always solved, whether
or not it is listed among the methods.
"""

from __future__ import annotations

import logging
import math
from typing import NamedTuple

from jerkjax.errors import InvalidConfigError
from jerkjax.integrators import Integrator, RightHandSide, State, StepControlConfig
from jerkjax.solver import MethodId, create_integrator
from jerkjax.trajectory import Trajectory

logger = logging.getLogger(__name__)

COMPONENTS = ("x", "v", "a")
"""State components that can be compared."""


class MethodDeviation(NamedTuple):
    """Result of one method in a comparison.

    Attributes:
        final_time: Time of the sample standing for ``t_end``, or ``None``
            when the trajectory has none.
        final_value: Compared component at that sample, or ``None``.
        relative_deviation_percent: Deviation from the reference in percent,
            or ``None`` when it is undefined.
    """

    final_time: float | None
    final_value: float | None
    relative_deviation_percent: float | None


class ComparisonReport:
    """Per-method deviations from a reference method.

    Attributes:
        reference: Name of the reference method.
        t_end: Comparison time.
        step: Step size used by every method.
        component: Compared state component (``"x"``, ``"v"`` or ``"a"``).
        rows: Mapping of method name to :class:`MethodDeviation`, in the
            order the methods were given (reference last if not listed).
        trajectories: Mapping of method name to its :class:`Trajectory`.
    """

    def __init__(
        self,
        reference: str,
        t_end: float,
        step: float,
        component: str,
        rows: dict[str, MethodDeviation],
        trajectories: dict[str, Trajectory],
    ):
        self.reference = reference
        self.t_end = t_end
        self.step = step
        self.component = component
        self.rows = rows
        self.trajectories = trajectories

    def __repr__(self) -> str:
        return (
            f"ComparisonReport(reference='{self.reference}', t_end={self.t_end:g}, "
            f"methods={list(self.rows)})"
        )

    def deviation(self, method: MethodId | str) -> float | None:
        """Return the relative deviation of *method* in percent.

        Raises:
            KeyError: If *method* was not part of the comparison.
        """
        return self.rows[str(method)].relative_deviation_percent

    def to_rows(self) -> list[dict]:
        """Return the report as a list of flat dicts, one per method."""
        return [
            {
                "method": name,
                "final_time": row.final_time,
                self.component: row.final_value,
                "deviation_percent": row.relative_deviation_percent,
                "warnings": len(self.trajectories[name].warnings),
            }
            for name, row in self.rows.items()
        ]


def relative_deviation(value: float | None, reference: float | None) -> float | None:
    """Relative deviation ``|value - reference| / |reference| * 100``.

    Returns ``None`` when either value is missing, the reference is zero, or
    the result is not finite.

    Examples:
        ```python
        from jerkjax.comparison import relative_deviation
        relative_deviation(1.01, 1.0)  # ~1.0
        relative_deviation(1.0, 0.0)   # None
        ```
    """
    if value is None or reference is None:
        return None
    if reference == 0.0 or not math.isfinite(reference):
        return None
    deviation = abs(value - reference) / abs(reference) * 100.0
    return deviation if math.isfinite(deviation) else None


def _locate(trajectory: Trajectory, t_end: float, step: float, component: str):
    state: State | None = trajectory.state_near(t_end, tol=step / 2.0)
    if state is None:
        return None, None
    return state.t, getattr(state, component)


def compare(
    methods,
    rhs: RightHandSide,
    initial: State,
    config: StepControlConfig,
    t_end: float,
    reference: MethodId | str | Integrator = MethodId.DORMAND_PRINCE5,
    component: str = "x",
) -> ComparisonReport:
    """Solve with every method and compare their values at *t_end*.

    Each trajectory is located at *t_end* as the sample closest to it within
    ``config.initial_step / 2``.  Failing that, the last sample at or
    before *t_end* is used unless the trajectory was truncated, in which
    case the method has no value and no deviation.

    Args:
        methods: Iterable of :class:`MethodId`, method names, or integrator
            instances.
        rhs: Model function ``f(t, x, v, a) -> a'``.
        initial: Initial state.
        config: Step-size control shared by every method.
        t_end: Comparison time.
        reference: Method the others are measured against.
        component: State component to compare.

    Returns:
        ComparisonReport: The reference row always has a deviation of
        exactly ``0.0``.

    Raises:
        InvalidConfigError: Unknown method or component, or an unusable span.

    Examples:
        ```python
        from jerkjax import BEAM_INITIAL_STATE, EquationConfig, MethodId, StepControlConfig, compare, create_equation
        report = compare(
            list(MethodId),
            create_equation(EquationConfig.beam()),
            BEAM_INITIAL_STATE,
            StepControlConfig(initial_step=0.01),
            1.0,
        )
        report.deviation(MethodId.RKF45)
        ```
    """
    if component not in COMPONENTS:
        raise InvalidConfigError(f"component must be 'x', 'v', or 'a', got '{component}'")

    integrators: dict[str, Integrator] = {}
    for method in methods:
        integrator = method if isinstance(method, Integrator) else create_integrator(method)
        integrators.setdefault(integrator.name, integrator)
    ref = reference if isinstance(reference, Integrator) else create_integrator(reference)
    integrators.setdefault(ref.name, ref)

    step = config.initial_step
    trajectories = {name: integ.solve(rhs, initial, config, t_end) for name, integ in integrators.items()}

    ref_time, ref_value = _locate(trajectories[ref.name], t_end, step, component)
    if ref_value is None or ref_value == 0.0 or not math.isfinite(ref_value):
        logger.warning(
            "Reference %s has no usable %s at t=%g; deviations are undefined",
            ref.name,
            component,
            t_end,
        )

    rows: dict[str, MethodDeviation] = {}
    for name, trajectory in trajectories.items():
        final_time, final_value = _locate(trajectory, t_end, step, component)
        if name == ref.name:
            deviation = 0.0
        else:
            deviation = relative_deviation(final_value, ref_value)
        rows[name] = MethodDeviation(final_time, final_value, deviation)

    return ComparisonReport(ref.name, t_end, step, component, rows, trajectories)
