"""Test configuration and fixtures for CHIP-8 virtual machine tests."""

import jax
import pytest
import jax.numpy as jnp
from chip8vm import create_state


@pytest.fixture
def fresh_state():
    """Provide a fresh emulator state for each test."""
    return create_state()


@pytest.fixture
def program_state():
    """Build a state with the given program bytes loaded at 0x200."""
    def _make(program, seed=None):
        rng = None if seed is None else jax.random.PRNGKey(seed)
        return create_state(bytes(program), rng)
    return _make


def setup_sprite_in_memory(state, address, sprite_bytes):
    """Helper to put sprite data in memory."""
    return state.replace(
        memory=state.memory.at[address:address+len(sprite_bytes)].set(
            jnp.array(sprite_bytes, dtype=jnp.uint8)
        )
    )


def set_registers(state, **registers):
    """Helper to set registers by name, e.g. ``set_registers(state, V0=1, VF=0)``."""
    V = state.V
    for name, value in registers.items():
        V = V.at[int(name[1:], 16)].set(value)
    return state.replace(V=V)
