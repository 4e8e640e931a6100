"""CHIP-8 virtual machine package."""

from chip8vm.state import EmulatorState, StackState, create_state
from chip8vm.emulator import (
    execute, fetch, step, key_pressed, set_keypad, should_play_sound, is_waiting, read_rom, load_rom, run_steps
)
from chip8vm.decode import DecodedInstruction, Opcode, decode, classify, mnemonic
from chip8vm.signals import Signal
from chip8vm.errors import Chip8Error, ProgramTooLargeError, EmptyRomError, KeyWaitError, ConfigurationError
from chip8vm.constants import *
from chip8vm.machine import Chip8
from chip8vm.rendering import display_to_rgb, create_color_scheme

__all__ = [
    "EmulatorState",
    "StackState",
    "create_state",
    "execute",
    "fetch",
    "step",
    "key_pressed",
    "set_keypad",
    "should_play_sound",
    "is_waiting",
    "read_rom",
    "load_rom",
    "run_steps",
    "DecodedInstruction",
    "Opcode",
    "decode",
    "classify",
    "mnemonic",
    "Signal",
    "Chip8Error",
    "ProgramTooLargeError",
    "EmptyRomError",
    "KeyWaitError",
    "ConfigurationError",
    "Chip8",
    "MEMORY_SIZE",
    "PROGRAM_START",
    "FONT_START",
    "SCREEN_WIDTH",
    "SCREEN_HEIGHT",
    "FLAG_REGISTER",
    "CLOCK_RATE",
    "CYCLES_PER_TIMER_TICK",
    "display_to_rgb",
    "create_color_scheme",
]
