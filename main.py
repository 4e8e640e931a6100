"""
Interactive CHIP-8 driver: pygame window, keyboard and buzzer around a Chip8 machine.

Configured with Hydra from conf/config.yaml, e.g.

    python main.py rom=games/pong.ch8 scale=12 keymap=qwerty

Controls: F1 pauses and resumes, Escape quits.
"""

import sys
from typing import Optional

import numpy as np
import pygame
import hydra
from omegaconf import DictConfig, OmegaConf

from chip8vm import Chip8, Signal, CLOCK_RATE, SCREEN_WIDTH, SCREEN_HEIGHT, ConfigurationError
from chip8vm.logging import EmulatorLogger
from chip8vm.rendering import display_to_rgb, create_color_scheme

SAMPLE_RATE = 44100

KEYMAPS = {
    # Keypad digits on the numeric pad, A-F on the letter keys
    "numpad": {
        pygame.K_KP0: 0x0, pygame.K_KP7: 0x1, pygame.K_KP8: 0x2, pygame.K_KP9: 0x3,
        pygame.K_KP4: 0x4, pygame.K_KP5: 0x5, pygame.K_KP6: 0x6, pygame.K_KP1: 0x7,
        pygame.K_KP2: 0x8, pygame.K_KP3: 0x9, pygame.K_a: 0xA, pygame.K_b: 0xB,
        pygame.K_c: 0xC, pygame.K_d: 0xD, pygame.K_e: 0xE, pygame.K_f: 0xF,
    },
    # The 4x4 keypad laid over 1234/QWER/ASDF/ZXCV
    "qwerty": {
        pygame.K_1: 0x1, pygame.K_2: 0x2, pygame.K_3: 0x3, pygame.K_4: 0xC,
        pygame.K_q: 0x4, pygame.K_w: 0x5, pygame.K_e: 0x6, pygame.K_r: 0xD,
        pygame.K_a: 0x7, pygame.K_s: 0x8, pygame.K_d: 0x9, pygame.K_f: 0xE,
        pygame.K_z: 0xA, pygame.K_x: 0x0, pygame.K_c: 0xB, pygame.K_v: 0xF,
    },
}


class Buzzer:
    """Looping square-wave tone, switched on and off with the sound timer."""

    def __init__(self, frequency: float, volume: float):
        pygame.mixer.init(frequency=SAMPLE_RATE, size=-16, channels=1)
        period = max(2, int(SAMPLE_RATE / frequency))
        wave = np.where(np.arange(period) < period // 2, 1, -1) * np.iinfo(np.int16).max
        self.sound = pygame.sndarray.make_sound(np.tile(wave, 64).astype(np.int16))
        self.sound.set_volume(volume)
        self.playing = False

    def update(self, enabled: bool):
        if enabled and not self.playing:
            self.sound.play(-1)
            self.playing = True
        elif not enabled and self.playing:
            self.sound.stop()
            self.playing = False

    def shutdown(self):
        self.sound.stop()
        pygame.mixer.quit()


def draw(screen: pygame.Surface, machine: Chip8, colors, scale: int):
    rgb = display_to_rgb(machine.display, scale, *colors)
    # surfarray wants (width, height, 3)
    surface = pygame.surfarray.make_surface(rgb.swapaxes(0, 1))
    screen.blit(surface, (0, 0))
    pygame.display.flip()


def wait_for_key(keymap: dict) -> Optional[int]:
    """Block until a mapped key goes down. Returns None if the user quits."""
    while True:
        event = pygame.event.wait()
        if event.type == pygame.QUIT:
            return None
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_ESCAPE:
                return None
            if event.key in keymap:
                return keymap[event.key]


def wait_while_paused() -> bool:
    """Block until F1 resumes. Returns False if the user quits instead."""
    while True:
        event = pygame.event.wait()
        if event.type == pygame.QUIT:
            return False
        if event.type == pygame.KEYDOWN:
            if event.key == pygame.K_F1:
                return True
            if event.key == pygame.K_ESCAPE:
                return False


def run(cfg: DictConfig) -> int:
    logger = EmulatorLogger(log_level=cfg.log_level)

    if cfg.keymap not in KEYMAPS:
        raise ConfigurationError(f"Unknown keymap '{cfg.keymap}'. Available: {list(KEYMAPS)}")
    keymap = KEYMAPS[cfg.keymap]
    colors = create_color_scheme(cfg.color_scheme)
    steps_per_frame = max(1, CLOCK_RATE // cfg.frame_rate)

    machine = Chip8.from_rom(cfg.rom, seed=cfg.seed, logger=logger, trace=cfg.trace)
    logger.log_run_start(OmegaConf.to_container(cfg))

    pygame.init()
    screen = pygame.display.set_mode((SCREEN_WIDTH * cfg.scale, SCREEN_HEIGHT * cfg.scale))
    pygame.display.set_caption("chip8vm")
    buzzer = Buzzer(cfg.tone_frequency, cfg.volume)
    clock = pygame.time.Clock()

    status = 0
    need_redraw = True
    running = True
    try:
        while running:
            clock.tick(cfg.frame_rate)

            for event in pygame.event.get():
                if event.type == pygame.QUIT:
                    running = False
                elif event.type == pygame.KEYDOWN:
                    if event.key == pygame.K_ESCAPE:
                        running = False
                    elif event.key == pygame.K_F1:
                        buzzer.update(False)
                        running = wait_while_paused()
                        clock.tick()
                    elif event.key in keymap:
                        machine.keys[keymap[event.key]] = True
                elif event.type == pygame.KEYUP and event.key in keymap:
                    machine.keys[keymap[event.key]] = False

            for _ in range(steps_per_frame):
                if not running:
                    break
                signal = machine.step()
                if signal == Signal.REDRAW:
                    need_redraw = True
                elif signal == Signal.WAIT_FOR_INPUT:
                    draw(screen, machine, colors, cfg.scale)
                    buzzer.update(machine.should_play_sound)
                    key = wait_for_key(keymap)
                    if key is None:
                        running = False
                    else:
                        machine.keys[key] = True
                        machine.key_pressed(key)
                        clock.tick()
                elif signal == Signal.FAULT:
                    status = 1
                    running = False

            if need_redraw:
                draw(screen, machine, colors, cfg.scale)
                need_redraw = False
            buzzer.update(machine.should_play_sound)
    finally:
        logger.log_run_end(machine.cycles)
        buzzer.shutdown()
        pygame.quit()

    return status


@hydra.main(version_base=None, config_path="conf", config_name="config")
def main(cfg: DictConfig) -> None:
    sys.exit(run(cfg))


if __name__ == "__main__":
    main()
