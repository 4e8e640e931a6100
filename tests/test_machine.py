"""Tests for the stateful Chip8 front end."""

import pytest
from chip8vm import Chip8, Signal, EmptyRomError, KeyWaitError
from chip8vm.logging import EmulatorLogger


class TestChip8:

    def test_step(self):
        machine = Chip8([0x60, 0x0A])
        assert machine.step() == Signal.NONE
        assert machine.pc == 0x202
        assert machine.cycles == 1
        assert machine.state.V[0] == 0x0A

    def test_keys_are_copied_before_each_step(self):
        """EX9E sees keys set on the numpy array."""
        machine = Chip8([0xE0, 0x9E])
        machine.keys[0] = True
        machine.step()
        assert machine.pc == 0x204

    def test_draw_requests_redraw(self):
        machine = Chip8([0xD0, 0x05])
        assert machine.step() == Signal.REDRAW
        assert machine.display[0, 0]

    def test_display_is_read_only(self):
        machine = Chip8([0x00, 0xE0])
        machine.step()
        assert machine.display.shape == (64, 32)
        with pytest.raises(ValueError):
            machine.display[0, 0] = True

    def test_wait_for_key(self):
        machine = Chip8([0xF2, 0x0A])
        assert machine.step() == Signal.WAIT_FOR_INPUT
        assert machine.waiting
        machine.key_pressed(4)
        assert not machine.waiting
        assert machine.state.V[2] == 4

    def test_key_pressed_without_wait(self):
        machine = Chip8([0x00, 0xE0])
        with pytest.raises(KeyWaitError):
            machine.key_pressed(4)

    def test_sound(self):
        machine = Chip8([0x60, 0x05, 0xF0, 0x18])
        machine.step()
        assert not machine.should_play_sound
        machine.step()
        assert machine.should_play_sound

    def test_fault_is_logged(self, capsys):
        machine = Chip8([0x00, 0xEE], logger=EmulatorLogger(use_colors=False, show_timestamps=False))
        assert machine.step() == Signal.FAULT
        out = capsys.readouterr().out
        assert "faulted at 0x200: 00EE RET" in out
        assert "Stack: (empty)" in out
        assert "PC=0200" in out

    def test_trace(self, capsys):
        logger = EmulatorLogger(log_level="DEBUG", use_colors=False, show_timestamps=False)
        machine = Chip8([0x60, 0x0A], logger=logger, trace=True)
        machine.step()
        assert "200: 600A LD V0, 0x0A" in capsys.readouterr().out

    def test_reset(self):
        machine = Chip8([0x70, 0x01, 0x12, 0x00])
        for _ in range(4):
            machine.step()
        machine.keys[3] = True
        machine.reset()
        assert machine.pc == 0x200
        assert machine.cycles == 0
        assert machine.state.V[0] == 0
        assert not machine.keys.any()

    def test_from_rom(self, tmp_path, capsys):
        rom = tmp_path / "test.ch8"
        rom.write_bytes(bytes([0x60, 0x0A]))
        machine = Chip8.from_rom(str(rom), logger=EmulatorLogger(use_colors=False, show_timestamps=False))
        assert machine.program == bytes([0x60, 0x0A])
        assert "Loaded 2 bytes" in capsys.readouterr().out

    def test_from_empty_rom(self, tmp_path):
        rom = tmp_path / "empty.ch8"
        rom.write_bytes(b"")
        with pytest.raises(EmptyRomError):
            Chip8.from_rom(str(rom))
