"""Stateful front end over the functional emulator, for interactive drivers."""

from typing import Optional, Sequence, Union

import jax
import numpy as np

from chip8vm.constants import NUM_KEYS
from chip8vm.emulator import step, fetch, key_pressed, set_keypad, should_play_sound, is_waiting, read_rom
from chip8vm.logging import EmulatorLogger
from chip8vm.rng import seed as make_seed
from chip8vm.signals import Signal
from chip8vm.state import EmulatorState, create_state


class Chip8:
    """A single CHIP-8 machine driven one instruction at a time.

    ``keys`` is a plain numpy array the driver updates from its input events; it
    is copied into the machine before every step. ``display`` is a read-only
    snapshot of the screen, indexed ``[x, y]``.
    """

    def __init__(self, program: Union[bytes, Sequence[int]], seed: int = 0,
                 logger: Optional[EmulatorLogger] = None, trace: bool = False):
        self.program = bytes(program)
        self.seed = seed
        self.logger = logger or EmulatorLogger()
        self.trace = trace
        self.keys = np.zeros(NUM_KEYS, dtype=np.bool_)
        self._step = jax.jit(step)
        self.state: EmulatorState = create_state(self.program, make_seed(seed))

    @classmethod
    def from_rom(cls, filename: str, seed: int = 0, logger: Optional[EmulatorLogger] = None,
                 trace: bool = False) -> "Chip8":
        program = read_rom(filename)
        machine = cls(program, seed=seed, logger=logger, trace=trace)
        machine.logger.log_program_loaded(len(program), filename)
        return machine

    def reset(self):
        """Reload the program into a fresh machine with the seed it was created with."""
        self.state = create_state(self.program, make_seed(self.seed))
        self.keys[:] = False

    def step(self) -> Signal:
        """Execute one instruction and return what the driver should do next."""
        self.state = set_keypad(self.state, self.keys)
        previous = self.state
        if self.trace:
            instruction, _ = fetch(previous)
            self.logger.log_instruction(previous, int(instruction))
        self.state, signal = self._step(self.state)
        signal = Signal(int(signal))

        if signal == Signal.FAULT:
            instruction, _ = fetch(previous)
            self.logger.log_fault(previous, int(instruction))
        return signal

    def key_pressed(self, key: int):
        """Resolve a pending wait-for-key with the given key index."""
        self.state = key_pressed(self.state, key)

    @property
    def waiting(self) -> bool:
        return bool(is_waiting(self.state))

    @property
    def display(self) -> np.ndarray:
        display = np.array(self.state.display)
        display.flags.writeable = False
        return display

    @property
    def should_play_sound(self) -> bool:
        return bool(should_play_sound(self.state))

    @property
    def pc(self) -> int:
        return int(self.state.pc)

    @property
    def cycles(self) -> int:
        return int(self.state.cycle_count)
