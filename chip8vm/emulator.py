"""Main CHIP-8 emulator execution engine."""

from functools import partial
from typing import Optional, Sequence

import jax
import jax.lax
import jax.numpy as jnp
from chip8vm.state import EmulatorState, create_state
from chip8vm.decode import Opcode, OPCODE_TABLE, decode
from chip8vm.constants import MEMORY_SIZE, NUM_KEYS, NO_KEY_WAIT
from chip8vm.errors import EmptyRomError, KeyWaitError
from chip8vm.signals import Signal, as_signal
from chip8vm.timers import tick_timers
from chip8vm.instructions.base import HandlerResult, execute_invalid
from chip8vm.instructions.system import execute_machine_call, execute_clear_screen, execute_return
from chip8vm.instructions.control_flow import (
    execute_jump, execute_call, execute_skip_if_equal_immediate,
    execute_skip_if_not_equal_immediate, execute_skip_if_equal_register,
    execute_skip_if_not_equal_register, execute_jump_with_offset,
    execute_skip_if_key_pressed, execute_skip_if_key_not_pressed
)
from chip8vm.instructions.alu import (
    execute_alu_set, execute_alu_or, execute_alu_and, execute_alu_xor, execute_alu_add,
    execute_alu_sub_xy, execute_alu_shift_right, execute_alu_sub_yx, execute_alu_shift_left
)
from chip8vm.instructions.memory import execute_set, execute_add, execute_set_index, execute_random
from chip8vm.instructions.display import execute_display
from chip8vm.instructions.misc import (
    execute_get_delay_timer, execute_wait_for_key, execute_set_delay_timer, execute_set_sound_timer,
    execute_add_to_index, execute_font_character, execute_bcd_conversion, execute_store_registers,
    execute_load_registers
)
from chip8vm.logging import scan_with_progress

HANDLERS = {
    Opcode.SYS: execute_machine_call,
    Opcode.CLS: execute_clear_screen,
    Opcode.RET: execute_return,
    Opcode.JP: execute_jump,
    Opcode.CALL: execute_call,
    Opcode.SE_BYTE: execute_skip_if_equal_immediate,
    Opcode.SNE_BYTE: execute_skip_if_not_equal_immediate,
    Opcode.SE_REG: execute_skip_if_equal_register,
    Opcode.LD_BYTE: execute_set,
    Opcode.ADD_BYTE: execute_add,
    Opcode.LD_REG: execute_alu_set,
    Opcode.OR: execute_alu_or,
    Opcode.AND: execute_alu_and,
    Opcode.XOR: execute_alu_xor,
    Opcode.ADD_REG: execute_alu_add,
    Opcode.SUB: execute_alu_sub_xy,
    Opcode.SHR: execute_alu_shift_right,
    Opcode.SUBN: execute_alu_sub_yx,
    Opcode.SHL: execute_alu_shift_left,
    Opcode.SNE_REG: execute_skip_if_not_equal_register,
    Opcode.LD_I: execute_set_index,
    Opcode.JP_V0: execute_jump_with_offset,
    Opcode.RND: execute_random,
    Opcode.DRW: execute_display,
    Opcode.SKP: execute_skip_if_key_pressed,
    Opcode.SKNP: execute_skip_if_key_not_pressed,
    Opcode.LD_VX_DT: execute_get_delay_timer,
    Opcode.LD_VX_K: execute_wait_for_key,
    Opcode.LD_DT_VX: execute_set_delay_timer,
    Opcode.LD_ST_VX: execute_set_sound_timer,
    Opcode.ADD_I_VX: execute_add_to_index,
    Opcode.LD_F_VX: execute_font_character,
    Opcode.LD_B_VX: execute_bcd_conversion,
    Opcode.LD_I_VX: execute_store_registers,
    Opcode.LD_VX_I: execute_load_registers,
    Opcode.INVALID: execute_invalid,
}

# lax.switch branches, indexed by Opcode value
_BRANCHES = [HANDLERS[opcode] for opcode in Opcode]
_OPCODE_LOOKUP = jnp.asarray(OPCODE_TABLE)


def execute(state: EmulatorState, instruction: int) -> HandlerResult:
    """Execute single CHIP-8 instruction.

    Only the instruction's own effects are applied: no fetch, no timer tick.
    """
    decoded_instruction = decode(instruction)
    return jax.lax.switch(_OPCODE_LOOKUP[instruction], _BRANCHES, state, decoded_instruction)


def _pack_u16(high: jnp.uint8, low: jnp.uint8) -> jnp.uint16:
    """Pack two bytes into uint16."""
    return (high.astype(jnp.uint16) << 8) | low.astype(jnp.uint16)


def fetch(state: EmulatorState) -> tuple[jnp.ndarray, jnp.ndarray]:
    """Fetch the big-endian instruction at PC.

    Returns the instruction word and whether both of its bytes lie inside
    memory. The word is meaningless when they do not.
    """
    address = state.pc.astype(jnp.int32)
    in_bounds = address + 1 < MEMORY_SIZE
    high = jnp.take(state.memory, address, mode="clip")
    low = jnp.take(state.memory, address + 1, mode="clip")
    return _pack_u16(high, low), in_bounds


def is_waiting(state: EmulatorState) -> jnp.ndarray:
    """Whether a wait-for-key instruction is awaiting ``key_pressed``."""
    return state.waiting_register != NO_KEY_WAIT


def step(state: EmulatorState) -> HandlerResult:
    """Fetch, count the cycle, and execute exactly one instruction.

    An out-of-bounds fetch faults before the cycle is counted. While a key wait
    is pending the state is left alone and the wait signal is repeated.
    """
    instruction, in_bounds = fetch(state)

    def _run(state):
        return execute(tick_timers(state), instruction)

    def _halt(state):
        return state, as_signal(Signal.FAULT)

    def _wait(state):
        return state, as_signal(Signal.WAIT_FOR_INPUT)

    branch = jnp.where(is_waiting(state), 2, jnp.where(in_bounds, 0, 1))
    return jax.lax.switch(branch, [_run, _halt, _wait], state)


def key_pressed(state: EmulatorState, key: int) -> EmulatorState:
    """Deliver the key that resolves a pending wait-for-key instruction.

    Raises:
        KeyWaitError: If no wait is pending or ``key`` is not a key index
    """
    register = int(state.waiting_register)
    if register == NO_KEY_WAIT:
        raise KeyWaitError("No wait-for-key instruction is pending")
    if not 0 <= key < NUM_KEYS:
        raise KeyWaitError(f"Key index {key} is outside 0-{NUM_KEYS - 1}")
    return state.replace(
        V=state.V.at[register].set(key),
        waiting_register=jnp.asarray(NO_KEY_WAIT, dtype=jnp.int32),
    )


def set_keypad(state: EmulatorState, keys: Sequence[bool]) -> EmulatorState:
    """Replace the pressed/released state of all 16 keys."""
    keypad = jnp.asarray(keys, dtype=jnp.bool_)
    if keypad.shape != (NUM_KEYS,):
        raise ValueError(f"Expected {NUM_KEYS} key states, got shape {keypad.shape}")
    return state.replace(keypad=keypad)


def should_play_sound(state: EmulatorState) -> jnp.ndarray:
    """True whenever the sound timer is running."""
    return state.sound_timer != 0


def read_rom(filename: str) -> bytes:
    """Read a ROM file, rejecting empty files."""
    with open(filename, 'rb') as f:
        rom_data = f.read()
    if not rom_data:
        raise EmptyRomError(f"ROM file '{filename}' is empty")
    return rom_data


def load_rom(filename: str, rng: Optional[jax.Array] = None) -> EmulatorState:
    """Load ROM data into a fresh CHIP-8 state starting at 0x200."""
    return create_state(read_rom(filename), rng)


def _run_step(state, _):
    return step(state)


@partial(jax.jit, static_argnames=("num_steps", "show_progress"))
def run_steps(state: EmulatorState, num_steps: int, show_progress: bool = False):
    """Run ``num_steps`` steps under ``lax.scan``.

    Returns the final state and the signal of every step. Steps after a fault
    or a pending key wait repeat that signal, so callers should look for the
    first non-``NONE`` signal.
    """
    body = _run_step
    if show_progress:
        body = scan_with_progress(num_steps, desc=f"Running {num_steps:,} steps")(body)
    return jax.lax.scan(body, state, jnp.arange(num_steps))
