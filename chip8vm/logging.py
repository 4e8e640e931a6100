"""Console logging utilities for the emulator and its drivers.

Provides a small levelled console logger, an emulator-specific logger that
formats machine state for fault reports, and real-time progress bars for long
runs under ``lax.scan`` using io_callback.
"""

import time
import sys
from typing import Callable, Optional, Tuple

import jax
import numpy as np
from jax.experimental import io_callback

from tqdm import tqdm

from chip8vm.constants import NUM_REGISTERS, PROGRAM_START
from chip8vm.decode import mnemonic
from chip8vm.rendering import display_to_text


LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")

ANSI_COLORS = {
    "DEBUG": "\033[36m",
    "INFO": "\033[32m",
    "WARNING": "\033[33m",
    "ERROR": "\033[31m",
    "CRITICAL": "\033[35m",
}
ANSI_RESET = "\033[0m"


class ConsoleLogger:
    """Levelled console logger with optional colours and elapsed-time stamps.

    Colours are only used when stdout is a terminal. Unknown level names are
    treated as INFO.
    """

    def __init__(
        self,
        name: str = "chip8vm",
        log_level: str = "INFO",
        use_colors: bool = True,
        show_timestamps: bool = True,
    ):
        self.name = name
        self.log_level = log_level.upper()
        self.use_colors = use_colors and hasattr(sys.stdout, "isatty") and sys.stdout.isatty()
        self.show_timestamps = show_timestamps
        self.start_time = time.time()

    @staticmethod
    def _rank(level: str) -> int:
        level = level.upper()
        return LEVELS.index(level) if level in LEVELS else LEVELS.index("INFO")

    def _should_log(self, level: str) -> bool:
        return self._rank(level) >= self._rank(self.log_level)

    def _format_message(self, level: str, message: str) -> str:
        timestamp = f"[{time.time() - self.start_time:8.2f}s]" if self.show_timestamps else ""
        level_str = f"[{level:>8s}]"
        if self.use_colors:
            level_str = f"{ANSI_COLORS.get(level.upper(), '')}{level_str}{ANSI_RESET}"
        return f"{timestamp}{level_str}[{self.name}] {message}"

    def log(self, level: str, message: str):
        if self._should_log(level):
            print(self._format_message(level, message), flush=True)

    def debug(self, message: str):
        self.log("DEBUG", message)

    def info(self, message: str):
        self.log("INFO", message)

    def warning(self, message: str):
        self.log("WARNING", message)

    def error(self, message: str):
        self.log("ERROR", message)

    def critical(self, message: str):
        self.log("CRITICAL", message)


def format_registers(state) -> str:
    """One-line dump of the registers, timers and program counter."""
    registers = " ".join(f"V{i:X}={int(state.V[i]):02X}" for i in range(NUM_REGISTERS))
    return (
        f"{registers} I={int(state.I):04X} DT={int(state.delay_timer):02X} "
        f"ST={int(state.sound_timer):02X} PC={int(state.pc):04X}"
    )


def format_stack(state) -> str:
    """Return addresses currently on the stack, oldest first."""
    depth = int(state.stack.pointer)
    items = np.asarray(state.stack.data)[:depth]
    return " ".join(f"{int(address):03X}" for address in items) or "(empty)"


class EmulatorLogger(ConsoleLogger):
    """Logger for emulator lifecycle events and fault reports."""

    def __init__(self, name: str = "chip8vm", **kwargs):
        super().__init__(name, **kwargs)
        self.run_start_time = None

    def log_program_loaded(self, size: int, source: str = "<bytes>"):
        self.info(f"Loaded {size} bytes from {source} at 0x{PROGRAM_START:03X}")

    def log_run_start(self, config: dict):
        self.run_start_time = time.time()
        self.info("=" * 60)
        self.info("Starting emulator with configuration:")
        for key, value in config.items():
            self.info(f"  {key}: {value}")
        self.info("=" * 60)

    def log_run_end(self, cycles: int):
        elapsed = time.time() - (self.run_start_time or self.start_time)
        rate = cycles / elapsed if elapsed > 0 else 0.0
        self.info(f"Stopped after {cycles:,} cycles in {elapsed:.1f}s ({rate:.0f} Hz)")

    def log_fault(self, state, instruction: int):
        """Report a fault with the offending instruction and a state dump."""
        pc = int(state.pc)
        self.error(f"Emulated program faulted at 0x{pc:03X}: {int(instruction):04X} {mnemonic(instruction)}")
        self.error(f"  {format_registers(state)}")
        self.error(f"  Stack: {format_stack(state)}")
        if self._should_log("DEBUG"):
            self.debug("Screen at fault:\n" + display_to_text(state.display))

    def log_instruction(self, state, instruction: int):
        """Trace one instruction at DEBUG level before it executes."""
        if self._should_log("DEBUG"):
            self.debug(f"{int(state.pc):03X}: {int(instruction):04X} {mnemonic(instruction):<20s} {format_registers(state)}")


def build_tqdm_progress_bar(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **kwargs,
) -> Tuple[Callable, Callable]:
    """Build real-time tqdm progress bar for JAX computations."""
    if desc is None:
        desc = f"Running ({n:,} steps)"

    for kwarg in ("total", "mininterval", "maxinterval", "miniters"):
        kwargs.pop(kwarg, None)

    tqdm_bars = {}

    if print_rate is None:
        print_rate = max(1, min(n // 20, 50))
    else:
        print_rate = max(1, min(print_rate, n))

    remainder = n % print_rate

    def _define_tqdm():
        tqdm_bars[0] = tqdm(total=n, desc=desc, unit="step", **kwargs)

    def _update_tqdm(steps):
        if 0 in tqdm_bars:
            tqdm_bars[0].update(int(steps))

    def _close_tqdm():
        if 0 in tqdm_bars:
            tqdm_bars[0].close()

    def _update_progress_bar(iter_num):
        _ = jax.lax.cond(
            iter_num == 0,
            lambda _: io_callback(_define_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            (iter_num % print_rate == 0) & (iter_num != n - remainder) & (iter_num > 0),
            lambda _: io_callback(_update_tqdm, None, print_rate, ordered=True),
            lambda _: None,
            operand=None,
        )

        _ = jax.lax.cond(
            iter_num == n - remainder,
            lambda _: io_callback(_update_tqdm, None, remainder, ordered=True),
            lambda _: None,
            operand=None,
        )

    def close_progress_bar(result, iter_num):
        _ = jax.lax.cond(
            iter_num == n - 1,
            lambda _: io_callback(_close_tqdm, None, ordered=True),
            lambda _: None,
            operand=None,
        )
        return result

    return _update_progress_bar, close_progress_bar


def scan_with_progress(
    n: int,
    print_rate: Optional[int] = None,
    desc: str = None,
    **tqdm_kwargs,
) -> Callable:
    """Decorator to add real-time progress bar to JAX scan operations."""
    _update_progress_bar, close_progress_bar = build_tqdm_progress_bar(
        n, print_rate, desc, **tqdm_kwargs
    )

    def _scan_progress_decorator(func):
        def wrapper_with_progress(carry, x):
            if isinstance(x, tuple):
                iter_num = x[0]
            else:
                iter_num = x

            _update_progress_bar(iter_num)

            result = func(carry, x)

            return close_progress_bar(result, iter_num)

        return wrapper_with_progress

    return _scan_progress_decorator
