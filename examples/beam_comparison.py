# /// script
# requires-python = ">=3.11"
# dependencies = ["typer>=0.9.0", "jerkjax"]
#
# [tool.uv.sources]
# jerkjax = { path = ".." }
# ///
"""Compare the four integration methods on the forced beam problem.

Solves ``x''' + 0.2 x' + 4 x^3 = cos(2 pi t)`` from ``x=0.5, v=0, a=-1``
with Modified Euler, RKF45, Dormand-Prince 5(4) and Adams-Moulton at a
common step size, then prints each method's final value and its relative
deviation from the reference method.

Requires jerkjax to be installed (``uv pip install -e .`` from the repo root).

Usage:
    uv run examples/beam_comparison.py [OPTIONS]

Examples:
    # Default run: h=0.01 up to t=1
    uv run examples/beam_comparison.py

    # Longer horizon, land exactly on t_end, compare velocities
    uv run examples/beam_comparison.py --t-end 10 --clamp-final-step --component v

    # Sine nonlinearity instead of cubic stiffness
    uv run examples/beam_comparison.py --restoring sine
"""

import enum
import time
from typing import Annotated

import typer

from jerkjax import (
    BEAM_INITIAL_STATE,
    EquationConfig,
    MethodId,
    StepControlConfig,
    compare,
    create_equation,
)


class Restoring(enum.StrEnum):
    cubic = "cubic"
    sine = "sine"
    linear = "linear"


class Component(enum.StrEnum):
    x = "x"
    v = "v"
    a = "a"


def _fmt(value: float | None, spec: str) -> str:
    return "n/a" if value is None else format(value, spec)


def main(
    step: Annotated[float, typer.Option(help="Step size (initial step for adaptive methods)")] = 0.01,
    t_end: Annotated[float, typer.Option(help="End time")] = 1.0,
    tolerance: Annotated[float, typer.Option(help="Local error tolerance")] = 1e-6,
    min_step: Annotated[float, typer.Option(help="Minimum adaptive step size")] = 1e-6,
    max_step: Annotated[float, typer.Option(help="Maximum adaptive step size")] = 0.5,
    restoring: Annotated[
        Restoring, typer.Option(help="Restoring term of the oscillator")
    ] = Restoring.cubic,
    component: Annotated[Component, typer.Option(help="State component to compare")] = Component.x,
    reference: Annotated[
        MethodId, typer.Option(help="Reference method")
    ] = MethodId.DORMAND_PRINCE5,
    clamp_final_step: Annotated[
        bool, typer.Option(help="Shorten the last fixed step to land on t_end")
    ] = False,
) -> None:
    equation = EquationConfig(restoring=restoring.value)
    config = StepControlConfig(
        initial_step=step,
        min_step=min_step,
        max_step=max_step,
        tolerance=tolerance,
        clamp_final_step=clamp_final_step,
    )

    print(f"── Solving {restoring.value} oscillator to t={t_end:g} with h={step:g} ──")
    t0 = time.perf_counter()
    report = compare(
        list(MethodId),
        create_equation(equation),
        BEAM_INITIAL_STATE,
        config,
        t_end,
        reference=reference,
        component=component.value,
    )
    print(f"  Solved {len(report.rows)} methods in {time.perf_counter() - t0:.1f}s")

    print(f"\n── Deviation of {component.value}({t_end:g}) from {report.reference} ──")
    print(f"  {'method':<18} {'t':>10} {component.value:>16} {'deviation %':>14} {'points':>8}")
    for row in report.to_rows():
        trajectory = report.trajectories[row["method"]]
        print(
            f"  {row['method']:<18} {_fmt(row['final_time'], '10.6f')} "
            f"{_fmt(row[component.value], '16.10f')} {_fmt(row['deviation_percent'], '14.6e')} "
            f"{len(trajectory):>8d}"
        )
        for warning in trajectory.warnings[:3]:
            print(f"      warning: {warning.message}")

    print("\nDone.")


if __name__ == "__main__":
    typer.run(main)
