"""CHIP-8 miscellaneous instructions (Fxxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FONT_START, FONT_CHAR_SIZE, FONT_CHARACTERS, MEMORY_SIZE, NUM_REGISTERS, ADDRESS_MASK
from chip8vm.signals import Signal
from chip8vm.instructions.base import HandlerResult, proceed, guarded


def execute_get_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX07 - Set VX to delay timer value."""
    return proceed(state.replace(V=state.V.at[instruction.x].set(state.delay_timer)))


def execute_wait_for_key(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX0A - Wait for key press.

    Only records which register receives the key; the driver resolves the wait
    through ``key_pressed``.
    """
    waiting_register = jnp.asarray(instruction.x).astype(jnp.int32)
    return proceed(state.replace(waiting_register=waiting_register), Signal.WAIT_FOR_INPUT)


def execute_set_delay_timer(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX15 - Set delay timer to VX."""
    return proceed(state.replace(delay_timer=state.V[instruction.x]))


def execute_set_sound_timer(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX18 - Set sound timer to VX."""
    return proceed(state.replace(sound_timer=state.V[instruction.x]))


def execute_add_to_index(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX1E - Add VX to I register, wrapping at 4 KiB. VF is left alone."""
    new_i = ((state.I + state.V[instruction.x].astype(jnp.uint16)) & ADDRESS_MASK).astype(jnp.uint16)
    return proceed(state.replace(I=new_i))


def _font_character(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    font_address = FONT_START + state.V[instruction.x].astype(jnp.uint16) * FONT_CHAR_SIZE
    return proceed(state.replace(I=font_address.astype(jnp.uint16)))


def execute_font_character(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX29 - Set I to location of sprite for digit VX. Faults if VX > 0xF."""
    return guarded(state.V[instruction.x] >= FONT_CHARACTERS, _font_character, state, instruction)


def _bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    value = state.V[instruction.x]
    digits = jnp.array([
        value // 100,
        (value // 10) % 10,
        value % 10
    ], dtype=jnp.uint8)

    indices = state.I.astype(jnp.int32) + jnp.arange(3)
    return proceed(state.replace(memory=state.memory.at[indices].set(digits, mode="drop")))


def execute_bcd_conversion(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX33 - Store BCD representation of VX at I, I+1, I+2."""
    faulted = state.I.astype(jnp.int32) + 2 >= MEMORY_SIZE
    return guarded(faulted, _bcd_conversion, state, instruction)


def _register_span(state: EmulatorState, instruction: DecodedInstruction):
    register_mask = jnp.arange(NUM_REGISTERS) <= instruction.x
    indices = state.I.astype(jnp.int32) + jnp.arange(NUM_REGISTERS)
    return register_mask, indices


def _span_out_of_bounds(state: EmulatorState, instruction: DecodedInstruction) -> jnp.ndarray:
    return state.I.astype(jnp.int32) + instruction.x >= MEMORY_SIZE


def _store_registers(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    register_mask, indices = _register_span(state, instruction)
    current_memory_values = jnp.take(state.memory, indices, mode="clip")
    new_memory_values = jnp.where(register_mask, state.V, current_memory_values)
    return proceed(state.replace(memory=state.memory.at[indices].set(new_memory_values, mode="drop")))


def execute_store_registers(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX55 - Store V0 through VX in memory starting at I. I is unchanged."""
    return guarded(_span_out_of_bounds(state, instruction), _store_registers, state, instruction)


def _load_registers(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    register_mask, indices = _register_span(state, instruction)
    memory_values = jnp.take(state.memory, indices, mode="clip")
    return proceed(state.replace(V=jnp.where(register_mask, memory_values, state.V)))


def execute_load_registers(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """FX65 - Load V0 through VX from memory starting at I. I is unchanged."""
    return guarded(_span_out_of_bounds(state, instruction), _load_registers, state, instruction)
