"""Tests for the jerkjax.config module."""

import jax.numpy as jnp
import pytest

from jerkjax.config import get_dtype, get_time_eq_tolerance, set_dtype
from jerkjax.integrators import RKF45, State, StepControlConfig


@pytest.fixture(autouse=True)
def reset_dtype():
    """Start every test from float32 and restore float64 afterwards."""
    set_dtype(jnp.float32)
    yield
    set_dtype(jnp.float64)


class TestGetSetDtype:
    def test_set_float32(self):
        assert get_dtype() == jnp.float32

    def test_set_float64(self):
        set_dtype(jnp.float64)
        assert get_dtype() == jnp.float64

    def test_set_float16(self):
        set_dtype(jnp.float16)
        assert get_dtype() == jnp.float16

    def test_set_bfloat16(self):
        set_dtype(jnp.bfloat16)
        assert get_dtype() == jnp.bfloat16

    def test_roundtrip(self):
        for dtype in (jnp.float16, jnp.bfloat16, jnp.float32, jnp.float64):
            set_dtype(dtype)
            assert get_dtype() == dtype

    def test_invalid_dtype_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype(jnp.int32)

    def test_invalid_dtype_string_raises(self):
        with pytest.raises(ValueError, match="Unsupported dtype"):
            set_dtype("float32")


class TestTimeTolerance:
    def test_float64(self):
        set_dtype(jnp.float64)
        assert get_time_eq_tolerance() == 1e-12

    def test_float32(self):
        assert get_time_eq_tolerance() == 1e-6

    def test_half_precision(self):
        set_dtype(jnp.float16)
        assert get_time_eq_tolerance() == 1e-3


class TestDtypePropagation:
    def test_state_vector_uses_dtype(self):
        """State.vector() builds arrays of the configured dtype."""
        vec = State(0.0, 1.0, 2.0, 3.0).vector()
        assert vec.dtype == jnp.float32

    def test_solve_in_float32(self):
        """A float32 solve still lands on t_end and stays finite."""
        traj = RKF45.solve(
            lambda t, x, v, a: -v,
            State(0.0, 0.0, 1.0, 0.0),
            StepControlConfig(initial_step=0.1, tolerance=1e-4),
            1.0,
        )
        assert traj.final.t == 1.0
        assert traj.final.is_finite()
        assert traj.as_array().dtype == jnp.float32


class TestX64Flag:
    def test_enabled_process_wide(self):
        """Importing jerkjax switches JAX's own defaults to 64-bit."""
        assert jnp.zeros(1).dtype == jnp.float64
        assert jnp.arange(3).dtype == jnp.int64

    def test_float32_keeps_flag(self):
        """set_dtype(float32) only changes jerkjax's own arrays."""
        assert get_dtype() == jnp.float32
        assert jnp.zeros(1).dtype == jnp.float64
