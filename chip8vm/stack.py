"""CHIP-8 stack operations.

Bounds are exposed as predicates; callers decide what a violation means.
"""

import jax.numpy as jnp
from chip8vm.constants import STACK_SIZE
from chip8vm.state import StackState


def is_empty(stack: StackState) -> jnp.ndarray:
    return stack.pointer == 0


def is_full(stack: StackState) -> jnp.ndarray:
    return stack.pointer >= STACK_SIZE


def push(stack: StackState, address: jnp.ndarray) -> StackState:
    """Push address onto stack."""
    address = jnp.asarray(address).astype(jnp.uint16)
    new_data = stack.data.at[stack.pointer].set(address, mode="drop")
    return stack.replace(data=new_data, pointer=stack.pointer + 1)


def top(stack: StackState) -> jnp.ndarray:
    """Return the most recently pushed address without removing it.

    Only meaningful on a non-empty stack; callers check ``is_empty`` first.
    """
    return stack.data[jnp.maximum(stack.pointer - 1, 0)]


def pop(stack: StackState) -> tuple[StackState, jnp.ndarray]:
    """Pop address from stack.

    Callers must check ``is_empty`` first: an empty stack is not an error here
    and yields the bottom slot.
    """
    new_pointer = jnp.maximum(stack.pointer - 1, 0)
    popped_address = stack.data[new_pointer]
    new_data = stack.data.at[new_pointer].set(0)
    return stack.replace(data=new_data, pointer=new_pointer), popped_address
