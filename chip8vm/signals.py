"""Signals returned to the driver after every step."""

from enum import IntEnum

import jax.numpy as jnp


class Signal(IntEnum):
    """What the driver must do after an instruction has executed."""
    NONE = 0
    REDRAW = 1
    WAIT_FOR_INPUT = 2
    FAULT = 3


def as_signal(signal: Signal) -> jnp.ndarray:
    """Convert a signal to the int32 scalar carried through traced code."""
    return jnp.asarray(int(signal), dtype=jnp.int32)
