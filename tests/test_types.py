"""Tests for State, StepResult, StepControlConfig and the error types."""

import math

import jax.numpy as jnp
import pytest

from jerkjax.errors import (
    InvalidConfigError,
    NonFiniteStateError,
    SolverError,
    SolverWarning,
    StepLimitExceededError,
    StepSizeFloorError,
    WarningKind,
)
from jerkjax.integrators import State, StepControlConfig, StepResult, first_order_dynamics


class TestState:
    def test_fields(self):
        """State exposes t, x, v, a in order."""
        s = State(0.5, 1.0, 2.0, 3.0)
        assert (s.t, s.x, s.v, s.a) == (0.5, 1.0, 2.0, 3.0)
        assert tuple(s) == (0.5, 1.0, 2.0, 3.0)

    def test_vector(self):
        """vector() returns [x, v, a] in float64."""
        vec = State(0.5, 1.0, 2.0, 3.0).vector()
        assert vec.dtype == jnp.float64
        assert jnp.allclose(vec, jnp.array([1.0, 2.0, 3.0]))

    def test_from_vector(self):
        """from_vector() converts array entries to Python floats."""
        s = State.from_vector(0.25, jnp.array([1.0, -2.0, 3.5]))
        assert s == State(0.25, 1.0, -2.0, 3.5)
        assert all(isinstance(value, float) for value in s)

    def test_is_finite(self):
        assert State(0.0, 1.0, 2.0, 3.0).is_finite()
        assert not State(0.0, math.nan, 2.0, 3.0).is_finite()
        assert not State(0.0, 1.0, math.inf, 3.0).is_finite()


class TestFirstOrderDynamics:
    def test_reduction(self):
        """dynamics(t, [x, v, a]) == [v, a, f(t, x, v, a)]."""
        dynamics = first_order_dynamics(lambda t, x, v, a: t + x + 10.0 * v + 100.0 * a)
        dy = dynamics(1.0, jnp.array([2.0, 3.0, 4.0]))
        assert jnp.allclose(dy, jnp.array([3.0, 4.0, 1.0 + 2.0 + 30.0 + 400.0]))

    def test_python_float_rhs(self):
        """A right-hand side returning a plain float is accepted."""
        dynamics = first_order_dynamics(lambda t, x, v, a: 0.0)
        dy = dynamics(0.0, jnp.array([1.0, 2.0, 3.0]))
        assert dy.shape == (3,)
        assert dy.dtype == jnp.float64


class TestStepResult:
    def test_defaults(self):
        """attempts defaults to 1 and at_floor to False."""
        result = StepResult(state=jnp.zeros(3), dt_used=0.1, error_estimate=0.0, dt_next=0.1)
        assert result.attempts == 1
        assert result.at_floor is False


class TestStepControlConfig:
    def test_defaults(self):
        """StepControlConfig has the documented defaults."""
        config = StepControlConfig(initial_step=0.01)
        assert config.min_step == 1e-6
        assert config.max_step == 0.5
        assert config.tolerance == 1e-6
        assert config.safety_factor == 0.9
        assert config.min_scale_factor == 0.1
        assert config.max_scale_factor == 4.0
        assert config.max_steps == 100_000
        assert config.fail_on_nonfinite is False
        assert config.clamp_final_step is False

    def test_frozen(self):
        config = StepControlConfig(initial_step=0.01)
        with pytest.raises(AttributeError):
            config.tolerance = 1.0

    @pytest.mark.parametrize(
        "kwargs, match",
        [
            ({"initial_step": 0.0}, "initial_step"),
            ({"initial_step": -0.1}, "initial_step"),
            ({"initial_step": math.nan}, "initial_step"),
            ({"initial_step": 0.1, "min_step": 0.0}, "min_step"),
            ({"initial_step": 0.1, "min_step": 1.0, "max_step": 0.5}, "min_step"),
            ({"initial_step": 0.1, "tolerance": 0.0}, "tolerance"),
            ({"initial_step": 0.1, "tolerance": -1e-6}, "tolerance"),
            ({"initial_step": 0.1, "safety_factor": 0.0}, "safety_factor"),
            ({"initial_step": 0.1, "safety_factor": 1.5}, "safety_factor"),
            ({"initial_step": 0.1, "min_scale_factor": 0.0}, "scale factors"),
            ({"initial_step": 0.1, "max_scale_factor": 0.5}, "scale factors"),
            ({"initial_step": 0.1, "max_steps": 0}, "max_steps"),
        ],
    )
    def test_invalid(self, kwargs, match):
        """Inconsistent values raise InvalidConfigError."""
        with pytest.raises(InvalidConfigError, match=match):
            StepControlConfig(**kwargs)

    def test_invalid_is_value_error(self):
        """InvalidConfigError can be caught as ValueError."""
        with pytest.raises(ValueError):
            StepControlConfig(initial_step=-1.0)

    def test_validate_span(self):
        config = StepControlConfig(initial_step=0.1)
        config.validate_span(0.0, 1.0)
        with pytest.raises(InvalidConfigError, match="positive"):
            config.validate_span(0.0, 0.0)
        with pytest.raises(InvalidConfigError, match="positive"):
            config.validate_span(-2.0, -1.0)
        with pytest.raises(InvalidConfigError, match="greater"):
            config.validate_span(2.0, 1.0)

    def test_clip_step(self):
        config = StepControlConfig(initial_step=0.1, min_step=0.01, max_step=0.2)
        assert config.clip_step(0.001) == 0.01
        assert config.clip_step(0.1) == 0.1
        assert config.clip_step(1.0) == 0.2


class TestErrors:
    def test_hierarchy(self):
        """Every error derives from SolverError and a matching builtin."""
        assert issubclass(InvalidConfigError, (SolverError, ValueError))
        assert issubclass(StepSizeFloorError, SolverError)
        assert issubclass(NonFiniteStateError, FloatingPointError)
        assert issubclass(StepLimitExceededError, RuntimeError)

    @pytest.mark.parametrize(
        "kind, error",
        [
            (WarningKind.STEP_SIZE_FLOOR, StepSizeFloorError),
            (WarningKind.NON_FINITE_STATE, NonFiniteStateError),
            (WarningKind.STEP_LIMIT_EXCEEDED, StepLimitExceededError),
        ],
    )
    def test_warning_to_error(self, kind, error):
        """SolverWarning.to_error() returns the matching exception."""
        exc = SolverWarning(kind, 0.5, 0.01, "boom").to_error()
        assert isinstance(exc, error)
        assert str(exc) == "boom"

    def test_warning_kind_values(self):
        assert WarningKind("step_size_floor") is WarningKind.STEP_SIZE_FLOOR
        assert str(WarningKind.NON_FINITE_STATE) == "non_finite_state"
