"""Tests for the Adams-Bashforth / Adams-Moulton integrator."""

import math

import pytest

from jerkjax.integrators import (
    DOPRI5,
    RKF45,
    AdamsMoultonIntegrator,
    ModifiedEulerIntegrator,
    StepControlConfig,
)
from jerkjax.integrators.adams import BOOTSTRAP_POINTS

_ADAMS = AdamsMoultonIntegrator()


def _harmonic_exact(t, initial):
    return initial.x + initial.v * math.sin(t) + initial.a * (1.0 - math.cos(t))


def _global_error(rhs, initial, h):
    traj = _ADAMS.solve(rhs, initial, StepControlConfig(initial_step=h), 1.0)
    state = traj.state_near(1.0, tol=h / 2.0)
    return abs(state.x - _harmonic_exact(state.t, initial))


class TestBootstrap:
    def test_first_points_match_rkf45(self, beam_rhs, beam_initial):
        """The first four samples equal a fixed-step RKF45 run at the same h."""
        config = StepControlConfig(initial_step=0.01)
        adams = _ADAMS.solve(beam_rhs, beam_initial, config, 1.0)
        rk = RKF45.solve_fixed(beam_rhs, beam_initial, config, 1.0)
        assert BOOTSTRAP_POINTS == 4
        for ours, theirs in zip(adams[:BOOTSTRAP_POINTS], rk[:BOOTSTRAP_POINTS]):
            assert ours == pytest.approx(theirs, abs=1e-15)
        assert adams[BOOTSTRAP_POINTS] != pytest.approx(rk[BOOTSTRAP_POINTS], abs=1e-15)

    def test_custom_bootstrap(self, beam_rhs, beam_initial):
        integrator = AdamsMoultonIntegrator(bootstrap=DOPRI5)
        config = StepControlConfig(initial_step=0.01)
        adams = integrator.solve(beam_rhs, beam_initial, config, 1.0)
        rk = DOPRI5.solve_fixed(beam_rhs, beam_initial, config, 1.0)
        for ours, theirs in zip(adams[:BOOTSTRAP_POINTS], rk[:BOOTSTRAP_POINTS]):
            assert ours == pytest.approx(theirs, abs=1e-15)

    def test_short_span_keeps_bootstrap(self, beam_rhs, beam_initial):
        """The bootstrap contributes four samples even past a short t_end."""
        traj = _ADAMS.solve(beam_rhs, beam_initial, StepControlConfig(initial_step=0.1), 0.15)
        assert len(traj) == BOOTSTRAP_POINTS
        assert traj.final.t == pytest.approx(0.3)


class TestAccuracy:
    def test_third_order(self, harmonic_rhs, harmonic_initial):
        """Halving h divides the global error by about 8."""
        coarse = _global_error(harmonic_rhs, harmonic_initial, 0.02)
        fine = _global_error(harmonic_rhs, harmonic_initial, 0.01)
        assert coarse / fine > 5.0

    def test_more_accurate_than_heun(self, harmonic_rhs, harmonic_initial):
        config = StepControlConfig(initial_step=0.01)
        exact = _harmonic_exact(1.0, harmonic_initial)
        adams = _ADAMS.solve(harmonic_rhs, harmonic_initial, config, 1.0).state_near(1.0, 0.005)
        heun = ModifiedEulerIntegrator().solve(
            harmonic_rhs, harmonic_initial, config, 1.0
        ).state_near(1.0, 0.005)
        assert abs(adams.x - exact) < abs(heun.x - exact)


class TestBoundary:
    def test_uniform_times(self, beam_rhs, beam_initial):
        traj = _ADAMS.solve(beam_rhs, beam_initial, StepControlConfig(initial_step=0.01), 1.0)
        assert all(state.t == i * 0.01 for i, state in enumerate(traj))

    def test_inclusive_boundary(self, beam_rhs, beam_initial):
        traj = _ADAMS.solve(beam_rhs, beam_initial, StepControlConfig(initial_step=0.1), 1.0)
        assert len(traj) == 12
        assert traj.final.t == pytest.approx(1.1)

    def test_clamped_final_step(self, harmonic_rhs, harmonic_initial):
        """A shortened last step lands on t_end and keeps the accuracy."""
        config = StepControlConfig(initial_step=0.1, clamp_final_step=True)
        traj = _ADAMS.solve(harmonic_rhs, harmonic_initial, config, 0.95)
        assert traj.final.t == 0.95
        assert traj[-2].t == pytest.approx(0.9)
        assert traj.final.x == pytest.approx(_harmonic_exact(0.95, harmonic_initial), abs=1e-4)

    def test_clamped_grid_end_keeps_multistep(self, beam_rhs, beam_initial):
        """A final step equal to h up to rounding is still predicted and corrected."""
        clamped = _ADAMS.solve(
            beam_rhs, beam_initial, StepControlConfig(initial_step=0.1, clamp_final_step=True), 1.0
        )
        inclusive = _ADAMS.solve(beam_rhs, beam_initial, StepControlConfig(initial_step=0.1), 1.0)
        on_grid = inclusive.state_near(1.0)
        assert clamped.final.t == 1.0
        assert len(clamped) == len(inclusive) - 1
        for name in ("x", "v", "a"):
            assert getattr(clamped.final, name) == pytest.approx(getattr(on_grid, name), abs=1e-15)
