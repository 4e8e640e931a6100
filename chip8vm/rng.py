"""Random byte source for the random-mask instruction (CXNN).

The key is carried in the emulator state, so a seeded state replays the same
sequence of random bytes.
"""

import jax
import jax.numpy as jnp


def seed(value: int = 0) -> jax.Array:
    """Create a PRNG key from an integer seed."""
    return jax.random.PRNGKey(value)


def random_byte(key: jax.Array) -> tuple[jax.Array, jnp.ndarray]:
    """Draw a uniform byte, returning the advanced key and the byte."""
    key, subkey = jax.random.split(key)
    return key, jax.random.bits(subkey, shape=(), dtype=jnp.uint8)
