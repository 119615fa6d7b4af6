import jax.numpy as jnp
import pytest

from jerkjax.config import set_dtype
from jerkjax.equations import BEAM_INITIAL_STATE, EquationConfig, create_equation
from jerkjax.integrators import State


@pytest.fixture(autouse=True)
def _ensure_float64():
    """Set float64 precision before every test.

    With pytest-xdist, each worker process imports jerkjax on its own and
    test_config.py switches precision, so every test resets it explicitly.
    """
    set_dtype(jnp.float64)


@pytest.fixture
def beam_rhs():
    """Right-hand side of the cubic-stiffness beam problem."""
    return create_equation(EquationConfig.beam())


@pytest.fixture
def beam_initial():
    return BEAM_INITIAL_STATE


@pytest.fixture
def harmonic_rhs():
    """x''' = -x', i.e. EquationConfig.harmonic(omega=1)."""
    return create_equation(EquationConfig.harmonic(1.0))


@pytest.fixture
def harmonic_initial():
    return State(t=0.0, x=0.0, v=1.0, a=0.5)
