"""Delay and sound timer cadence.

Timers count instruction cycles rather than wall time: every
``CYCLES_PER_TIMER_TICK`` cycles each nonzero timer drops by one. The cadence
runs off its own phase counter, so it is unaffected when ``cycle_count`` wraps.
"""

import jax.numpy as jnp
from chip8vm.constants import CYCLES_PER_TIMER_TICK
from chip8vm.state import EmulatorState


def _count_down(timer: jnp.ndarray, due: jnp.ndarray) -> jnp.ndarray:
    return jnp.where(due & (timer > 0), timer - 1, timer).astype(jnp.uint8)


def tick_timers(state: EmulatorState) -> EmulatorState:
    """Count one instruction cycle and decrement the timers when a tick is due."""
    timer_phase = ((state.timer_phase + 1) % CYCLES_PER_TIMER_TICK).astype(jnp.int32)
    due = timer_phase == 0
    return state.replace(
        cycle_count=(state.cycle_count + 1).astype(jnp.uint32),
        timer_phase=timer_phase,
        delay_timer=_count_down(state.delay_timer, due),
        sound_timer=_count_down(state.sound_timer, due),
    )
