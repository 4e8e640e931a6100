"""CHIP-8 emulator state structures."""

from typing import Optional, Sequence, Union

import jax
import jax.numpy as jnp
from flax.struct import PyTreeNode

from chip8vm.constants import (
    MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE, FONT_START, FONT_DATA, SCREEN_WIDTH, SCREEN_HEIGHT,
    STACK_SIZE, NUM_REGISTERS, NUM_KEYS, NO_KEY_WAIT
)
from chip8vm.errors import ProgramTooLargeError


class StackState(PyTreeNode):
    """Return-address stack for subroutine calls."""
    data: jnp.ndarray
    pointer: jnp.ndarray


class EmulatorState(PyTreeNode):
    """Main CHIP-8 emulator state."""
    rng: jax.Array
    memory: jnp.ndarray
    pc: jnp.ndarray
    display: jnp.ndarray  # indexed [x, y]
    stack: StackState
    delay_timer: jnp.ndarray
    sound_timer: jnp.ndarray
    keypad: jnp.ndarray
    V: jnp.ndarray
    I: jnp.ndarray
    cycle_count: jnp.ndarray  # total cycles, wraps at 2**32
    timer_phase: jnp.ndarray  # cycles since the last timer tick
    waiting_register: jnp.ndarray


def create_stack() -> StackState:
    """Create an empty stack."""
    return StackState(
        data=jnp.zeros(STACK_SIZE, dtype=jnp.uint16),
        pointer=jnp.zeros((), dtype=jnp.int32),
    )


def create_state(program: Union[bytes, Sequence[int]] = b"", rng: Optional[jax.Array] = None) -> EmulatorState:
    """Create initial emulator state with the font and ``program`` loaded.

    Args:
        program: Program bytes, copied to memory starting at ``PROGRAM_START``
        rng: PRNG key for the random-mask instruction (default: ``PRNGKey(0)``)

    Raises:
        ProgramTooLargeError: If the program does not fit between ``PROGRAM_START`` and the end of memory
    """
    program = bytes(program)
    if len(program) > MAX_PROGRAM_SIZE:
        raise ProgramTooLargeError(
            f"Program is {len(program)} bytes, at most {MAX_PROGRAM_SIZE} bytes fit in memory"
        )
    if rng is None:
        rng = jax.random.PRNGKey(0)

    memory = jnp.zeros(MEMORY_SIZE, dtype=jnp.uint8)
    memory = memory.at[FONT_START:FONT_START + len(FONT_DATA)].set(FONT_DATA)
    if program:
        program_bytes = jnp.array(list(program), dtype=jnp.uint8)
        memory = memory.at[PROGRAM_START:PROGRAM_START + len(program)].set(program_bytes)

    return EmulatorState(
        rng=rng,
        memory=memory,
        pc=jnp.asarray(PROGRAM_START, dtype=jnp.uint16),
        display=jnp.zeros((SCREEN_WIDTH, SCREEN_HEIGHT), dtype=jnp.bool_),
        stack=create_stack(),
        delay_timer=jnp.zeros((), dtype=jnp.uint8),
        sound_timer=jnp.zeros((), dtype=jnp.uint8),
        keypad=jnp.zeros(NUM_KEYS, dtype=jnp.bool_),
        V=jnp.zeros(NUM_REGISTERS, dtype=jnp.uint8),
        I=jnp.zeros((), dtype=jnp.uint16),
        cycle_count=jnp.zeros((), dtype=jnp.uint32),
        timer_phase=jnp.zeros((), dtype=jnp.int32),
        waiting_register=jnp.asarray(NO_KEY_WAIT, dtype=jnp.int32),
    )
