"""Shared plumbing for instruction handlers.

Every handler takes ``(state, instruction)`` and returns ``(state, signal)``.
A handler that detects a fault hands back the state it was given, untouched,
together with ``Signal.FAULT``.
"""

from typing import Callable

import jax
import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import ADDRESS_MASK
from chip8vm.signals import Signal, as_signal

HandlerResult = tuple[EmulatorState, jnp.ndarray]
Handler = Callable[[EmulatorState, DecodedInstruction], HandlerResult]


def advance(state: EmulatorState, amount=2) -> EmulatorState:
    """Move the program counter forward by ``amount`` bytes, wrapping at 4 KiB."""
    return state.replace(pc=((state.pc + amount) & ADDRESS_MASK).astype(jnp.uint16))


def proceed(state: EmulatorState, signal: Signal = Signal.NONE, amount=2) -> HandlerResult:
    """Finish an instruction: advance the program counter and report ``signal``."""
    return advance(state, amount), as_signal(signal)


def fault(state: EmulatorState) -> HandlerResult:
    """Report a fault without touching the state."""
    return state, as_signal(Signal.FAULT)


def guarded(faulted, handler: Handler, state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """Run ``handler`` unless ``faulted`` holds, in which case report a fault."""
    return jax.lax.cond(
        faulted,
        lambda state, instruction: fault(state),
        handler,
        state, instruction
    )


def execute_invalid(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """Unrecognised instruction word."""
    return fault(state)
