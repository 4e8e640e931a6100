"""CHIP-8 memory and register operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.rng import random_byte
from chip8vm.instructions.base import HandlerResult, proceed


def _byte(value) -> jnp.ndarray:
    return jnp.asarray(value).astype(jnp.uint8)


def execute_set(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """6XNN - Set VX = NN."""
    return proceed(state.replace(V=state.V.at[instruction.x].set(_byte(instruction.nn))))


def execute_add(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """7XNN - Add NN to VX. Wraps; VF is left alone."""
    return proceed(state.replace(V=state.V.at[instruction.x].add(_byte(instruction.nn))))


def execute_set_index(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """ANNN - Set I = NNN."""
    return proceed(state.replace(I=jnp.asarray(instruction.nnn).astype(jnp.uint16)))


def execute_random(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """CXNN - Set VX = random byte & NN."""
    rng, value = random_byte(state.rng)
    return proceed(state.replace(V=state.V.at[instruction.x].set(value & _byte(instruction.nn)), rng=rng))
