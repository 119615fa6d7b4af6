"""Tests for method selection and the top-level solve function."""

import pytest

from jerkjax import (
    BEAM_INITIAL_STATE,
    DOPRI5,
    RKF45,
    AdamsMoultonIntegrator,
    EquationConfig,
    InvalidConfigError,
    MethodId,
    ModifiedEulerIntegrator,
    StepControlConfig,
    create_equation,
    create_integrator,
    solve,
)


class TestMethodId:
    def test_values(self):
        assert [m.value for m in MethodId] == [
            "modified_euler",
            "rkf45",
            "dormand_prince5",
            "adams_moulton4",
        ]

    def test_from_string(self):
        assert MethodId("rkf45") is MethodId.RKF45


class TestCreateIntegrator:
    @pytest.mark.parametrize(
        "method, expected",
        [
            (MethodId.MODIFIED_EULER, ModifiedEulerIntegrator),
            (MethodId.RKF45, type(RKF45)),
            (MethodId.DORMAND_PRINCE5, type(DOPRI5)),
            (MethodId.ADAMS_MOULTON4, AdamsMoultonIntegrator),
        ],
    )
    def test_types(self, method, expected):
        integrator = create_integrator(method)
        assert isinstance(integrator, expected)
        assert integrator.name == method.value

    def test_shared_instances(self):
        """Integrators are stateless, so repeated lookups share one instance."""
        assert create_integrator("rkf45") is RKF45
        assert create_integrator("dormand_prince5") is DOPRI5
        assert create_integrator("modified_euler") is create_integrator("modified_euler")

    def test_bootstrap_option(self):
        integrator = create_integrator(MethodId.ADAMS_MOULTON4, bootstrap="dormand_prince5")
        assert integrator.bootstrap is DOPRI5
        integrator = create_integrator(MethodId.ADAMS_MOULTON4, bootstrap=RKF45)
        assert integrator.bootstrap is RKF45

    def test_unknown_method(self):
        with pytest.raises(InvalidConfigError, match="Unknown method"):
            create_integrator("euler")

    def test_unknown_option(self):
        with pytest.raises(InvalidConfigError, match="Unsupported option"):
            create_integrator(MethodId.RKF45, bootstrap="rkf45")

    def test_bootstrap_must_be_embedded(self):
        with pytest.raises(InvalidConfigError, match="embedded"):
            create_integrator(MethodId.ADAMS_MOULTON4, bootstrap="modified_euler")


class TestSolve:
    @pytest.mark.parametrize("method", list(MethodId))
    def test_solve_by_id(self, method):
        rhs = create_equation(EquationConfig.beam())
        traj = solve(method, rhs, BEAM_INITIAL_STATE, StepControlConfig(initial_step=0.01), 1.0)
        assert traj.method == method.value
        assert traj.state_near(1.0, tol=0.005) is not None
        assert not traj.degraded

    def test_solve_by_string_and_instance(self):
        rhs = create_equation(EquationConfig.beam())
        config = StepControlConfig(initial_step=0.01)
        by_name = solve("dormand_prince5", rhs, BEAM_INITIAL_STATE, config, 1.0)
        by_instance = solve(DOPRI5, rhs, BEAM_INITIAL_STATE, config, 1.0)
        assert by_name.final == by_instance.final

    def test_repeated_solves_are_independent(self):
        """Each solve returns a fresh trajectory with identical content."""
        rhs = create_equation(EquationConfig.beam())
        config = StepControlConfig(initial_step=0.05)
        first = solve(MethodId.ADAMS_MOULTON4, rhs, BEAM_INITIAL_STATE, config, 1.0)
        second = solve(MethodId.ADAMS_MOULTON4, rhs, BEAM_INITIAL_STATE, config, 1.0)
        assert first is not second
        assert first.states == second.states

    def test_invalid_t_end(self):
        rhs = create_equation(EquationConfig.beam())
        with pytest.raises(InvalidConfigError):
            solve("rkf45", rhs, BEAM_INITIAL_STATE, StepControlConfig(initial_step=0.01), -1.0)
