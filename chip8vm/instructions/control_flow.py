"""CHIP-8 control flow instructions."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import NUM_KEYS, ADDRESS_MASK
from chip8vm.signals import Signal, as_signal
from chip8vm.stack import push, is_full
from chip8vm.instructions.base import HandlerResult, proceed, guarded


def execute_jump(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """1NNN - Jump to address NNN."""
    return state.replace(pc=jnp.asarray(instruction.nnn).astype(jnp.uint16)), as_signal(Signal.NONE)


def _call(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    state = state.replace(stack=push(state.stack, state.pc))
    return execute_jump(state, instruction)


def execute_call(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """2NNN - Call subroutine at NNN, pushing the address of this instruction."""
    return guarded(is_full(state.stack), _call, state, instruction)


def make_skip_instruction(condition_fn):
    """Factory for skip instructions."""
    def skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
        condition = condition_fn(state, instruction)
        return proceed(state, amount=jnp.where(condition, 4, 2))
    return skip_instruction


execute_skip_if_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == inst.nn
)

execute_skip_if_not_equal_immediate = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != inst.nn
)

execute_skip_if_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] == state.V[inst.y]
)

execute_skip_if_not_equal_register = make_skip_instruction(
    lambda state, inst: state.V[inst.x] != state.V[inst.y]
)


def execute_jump_with_offset(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """BNNN - Jump to address NNN + V0, wrapping at 4 KiB."""
    jump_address = jnp.asarray(instruction.nnn).astype(jnp.uint16) + state.V[0].astype(jnp.uint16)
    return state.replace(pc=jump_address & ADDRESS_MASK), as_signal(Signal.NONE)


def make_key_skip_instruction(skip_when_pressed: bool):
    """Factory for EX9E/EXA1. A key index of 16 or more in VX faults."""
    def key_skip_instruction(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
        key_index = state.V[instruction.x]

        def _skip(state, instruction):
            key_pressed = state.keypad[jnp.minimum(key_index, NUM_KEYS - 1)]
            condition = key_pressed if skip_when_pressed else ~key_pressed
            return proceed(state, amount=jnp.where(condition, 4, 2))

        return guarded(key_index >= NUM_KEYS, _skip, state, instruction)
    return key_skip_instruction


execute_skip_if_key_pressed = make_key_skip_instruction(True)

execute_skip_if_key_not_pressed = make_key_skip_instruction(False)
