"""CHIP-8 display operations."""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import SCREEN_WIDTH, SCREEN_HEIGHT, SPRITE_WIDTH, MEMORY_SIZE, FLAG_REGISTER
from chip8vm.signals import Signal
from chip8vm.instructions.base import HandlerResult, proceed, guarded

# Pre-computed coordinate grids for display operations
xx, yy = jnp.meshgrid(jnp.arange(SCREEN_WIDTH), jnp.arange(SCREEN_HEIGHT), indexing='ij')


def sprite_mask(memory: jnp.ndarray, address, x, y, height) -> jnp.ndarray:
    """Lay a sprite out on a display-sized boolean grid.

    Row ``r`` of the sprite is the byte at ``address + r``, most significant bit
    leftmost. Columns and rows wrap around the screen edges.
    """
    col_offset = (xx - jnp.asarray(x).astype(jnp.int32)) % SCREEN_WIDTH
    row_offset = (yy - jnp.asarray(y).astype(jnp.int32)) % SCREEN_HEIGHT
    in_sprite = (col_offset < SPRITE_WIDTH) & (row_offset < height)

    sprite_bytes = jnp.take(memory, jnp.asarray(address).astype(jnp.int32) + row_offset, mode="clip")
    bit_shift = jnp.clip(SPRITE_WIDTH - 1 - col_offset, 0, SPRITE_WIDTH - 1)
    return (((sprite_bytes >> bit_shift) & 1) == 1) & in_sprite


def draw_sprite(display: jnp.ndarray, sprite: jnp.ndarray) -> tuple[jnp.ndarray, jnp.ndarray]:
    """XOR a sprite mask onto the display.

    Returns the new display and whether any set sprite bit landed on a pixel
    that was already lit. Pixels lit by the sprite on a dark background do not
    count as a collision.
    """
    collision = jnp.any(display & sprite)
    return display ^ sprite, collision


def _draw(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    sprite = sprite_mask(state.memory, state.I, state.V[instruction.x], state.V[instruction.y], instruction.n)
    display, collision = draw_sprite(state.display, sprite)
    return proceed(
        state.replace(display=display, V=state.V.at[FLAG_REGISTER].set(collision.astype(jnp.uint8))),
        Signal.REDRAW
    )


def execute_display(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
    """DXYN - Draw sprite at (VX, VY) with height N, VF = collision.

    Faults if any sprite row would be read from beyond the end of memory.
    """
    height = jnp.asarray(instruction.n).astype(jnp.int32)
    faulted = (height > 0) & (state.I.astype(jnp.int32) + height > MEMORY_SIZE)
    return guarded(faulted, _draw, state, instruction)
