"""CHIP-8 system instructions (0x0xxx)."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import ADDRESS_MASK
from chip8vm.signals import Signal, as_signal
from chip8vm.stack import pop, is_empty
from chip8vm.instructions.base import HandlerResult, proceed, guarded


def execute_machine_call(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """0NNN - Call machine code routine; ignored."""
    return proceed(state)


def execute_clear_screen(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """00E0 - Clear display."""
    return proceed(state.replace(display=jnp.zeros_like(state.display)), Signal.REDRAW)


def _return(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    stack, address = pop(state.stack)
    return state.replace(stack=stack, pc=((address + 2) & ADDRESS_MASK).astype(jnp.uint16)), as_signal(Signal.NONE)


def execute_return(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """00EE - Return from subroutine.

    The stack holds the address of the call itself, so execution resumes two
    bytes past it. Returning with an empty stack faults.
    """
    return guarded(is_empty(state.stack), _return, state, instruction)
