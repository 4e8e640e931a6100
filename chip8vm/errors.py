"""Errors raised for caller misuse.

Faults of the emulated program are never raised; they are reported as
``Signal.FAULT`` from ``step``.
"""


class Chip8Error(Exception):
    pass


class ProgramTooLargeError(Chip8Error):
    pass


class EmptyRomError(Chip8Error):
    pass


class KeyWaitError(Chip8Error):
    pass


class ConfigurationError(Chip8Error):
    pass
