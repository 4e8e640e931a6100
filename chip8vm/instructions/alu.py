"""CHIP-8 ALU operations (8xxx).

Each operation maps the register file and the two operand indices to a new
register file. Where an operation reports through VF, the order of the two
writes decides the outcome when X is F: add and both subtractions write VX
first and the flag last, the shifts write the flag first and then shift the
register as it stands after that write.
"""

import jax.numpy as jnp
from chip8vm.state import EmulatorState
from chip8vm.decode import DecodedInstruction
from chip8vm.constants import FLAG_REGISTER
from chip8vm.instructions.base import HandlerResult, proceed


def _flag(condition) -> jnp.ndarray:
    return jnp.asarray(condition).astype(jnp.uint8)


def alu_set(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY0 - Set: VX = VY."""
    return V.at[x].set(V[y])


def alu_or(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY1 - Binary OR: VX |= VY."""
    return V.at[x].set(V[x] | V[y])


def alu_and(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY2 - Binary AND: VX &= VY."""
    return V.at[x].set(V[x] & V[y])


def alu_xor(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY3 - Logical XOR: VX ^= VY."""
    return V.at[x].set(V[x] ^ V[y])


def alu_add(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY4 - Add: VX += VY, VF = 1 on carry."""
    total = V[x].astype(jnp.int32) + V[y].astype(jnp.int32)
    V = V.at[x].set((total & 0xFF).astype(jnp.uint8))
    return V.at[FLAG_REGISTER].set(_flag(total > 0xFF))


def alu_sub_xy(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY5 - Subtract: VX -= VY, VF = 0 on borrow."""
    vx, vy = V[x], V[y]
    V = V.at[x].set(vx - vy)
    return V.at[FLAG_REGISTER].set(_flag(vx >= vy))


def alu_shift_right(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY6 - Shift right: VF = VX & 1, VX >>= 1. VY is ignored."""
    V = V.at[FLAG_REGISTER].set(V[x] & 1)
    return V.at[x].set(V[x] >> 1)


def alu_sub_yx(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XY7 - Subtract: VX = VY - VX, VF = 0 on borrow."""
    vx, vy = V[x], V[y]
    V = V.at[x].set(vy - vx)
    return V.at[FLAG_REGISTER].set(_flag(vy >= vx))


def alu_shift_left(V: jnp.ndarray, x, y) -> jnp.ndarray:
    """8XYE - Shift left: VF = VX >> 7, VX <<= 1. VY is ignored."""
    V = V.at[FLAG_REGISTER].set((V[x] >> 7) & 1)
    return V.at[x].set(V[x] << 1)


def make_alu_instruction(operation):
    """Wrap a register-file operation as an instruction handler."""
    def alu_instruction(state: EmulatorState, instruction: DecodedInstruction) -> HandlerResult:
        return proceed(state.replace(V=operation(state.V, instruction.x, instruction.y)))
    return alu_instruction


execute_alu_set = make_alu_instruction(alu_set)
execute_alu_or = make_alu_instruction(alu_or)
execute_alu_and = make_alu_instruction(alu_and)
execute_alu_xor = make_alu_instruction(alu_xor)
execute_alu_add = make_alu_instruction(alu_add)
execute_alu_sub_xy = make_alu_instruction(alu_sub_xy)
execute_alu_shift_right = make_alu_instruction(alu_shift_right)
execute_alu_sub_yx = make_alu_instruction(alu_sub_yx)
execute_alu_shift_left = make_alu_instruction(alu_shift_left)
