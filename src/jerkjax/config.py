"""Floating-point precision used by the integrators.

Every state vector jerkjax builds is cast to the dtype returned by
:func:`get_dtype`.  Double precision is the default and turns on JAX's
``jax_enable_x64`` flag at import time, because the embedded pairs are
routinely run at tolerances that single precision cannot resolve.

Precision is read while a function is traced, so switch it with
:func:`set_dtype` before anything is compiled with ``jax.jit``.

Warning:
    ``jax_enable_x64`` is a process-wide JAX setting.  Importing jerkjax
    turns it on for every other JAX user in the same interpreter, and
    ``set_dtype(jnp.float32)`` does not turn it back off.  Code that needs
    32-bit JAX defaults elsewhere should call
    ``jax.config.update("jax_enable_x64", False)`` itself after the import.
"""

from __future__ import annotations

import jax
import jax.numpy as jnp

# Absolute tolerance for matching sample times, per precision.
_TIME_EQ_TOLERANCE = {
    jnp.float64: 1e-12,
    jnp.float32: 1e-6,
    jnp.float16: 1e-3,
    jnp.bfloat16: 1e-3,
}

jax.config.update("jax_enable_x64", True)
_dtype = jnp.float64


def set_dtype(dtype) -> None:
    """Select the float dtype of every state vector.

    Takes effect immediately for eager code; compiled functions keep the
    dtype they were traced with.  Choosing ``jnp.float64`` (re-)enables
    ``jax_enable_x64``.

    Args:
        dtype: ``jnp.float64``, ``jnp.float32``, ``jnp.float16`` or
            ``jnp.bfloat16``.

    Raises:
        ValueError: For anything else, including dtype names given as strings.
    """
    global _dtype
    if not any(dtype is supported for supported in _TIME_EQ_TOLERANCE):
        raise ValueError(
            f"Unsupported dtype {dtype}; expected one of "
            f"{', '.join(f'jnp.{d.__name__}' for d in _TIME_EQ_TOLERANCE)}"
        )
    if dtype is jnp.float64:
        jax.config.update("jax_enable_x64", True)
    _dtype = dtype


def get_dtype():
    """Return the float dtype selected with :func:`set_dtype` (``jnp.float64`` by default)."""
    return _dtype


def get_time_eq_tolerance() -> float:
    """Return the tolerance used to decide that two sample times coincide.

    ``1e-12`` in double precision, ``1e-6`` in single precision and
    ``1e-3`` for the half-precision types.
    """
    return _TIME_EQ_TOLERANCE[_dtype]
