"""Tests for timer, index, font, BCD and register-dump instructions (FXNN)."""

import jax.numpy as jnp
import pytest
from chip8vm import execute, Signal, MEMORY_SIZE, FONT_START
from chip8vm.constants import FONT_DATA, NO_KEY_WAIT
from conftest import set_registers


def with_index(state, address):
    return state.replace(I=jnp.asarray(address, dtype=jnp.uint16))


class TestTimers:
    """Test FX07, FX15 and FX18."""

    def test_set_and_read_delay_timer(self, fresh_state):
        """FX15/FX07 - Round trip through the delay timer."""
        state = set_registers(fresh_state, V3=0x3C)
        state, _ = execute(state, 0xF315)
        assert state.delay_timer == 0x3C

        state, _ = execute(state, 0xF407)
        assert state.V[4] == 0x3C

    def test_set_sound_timer(self, fresh_state):
        """FX18 - Sound timer = VX."""
        state = set_registers(fresh_state, V2=10)
        state, _ = execute(state, 0xF218)
        assert state.sound_timer == 10
        assert state.delay_timer == 0


class TestWaitForKey:
    """Test FX0A."""

    def test_wait_for_key_signals_and_records_register(self, fresh_state):
        """FX0A - Records the destination register and moves on."""
        state, signal = execute(fresh_state, 0xF50A)
        assert int(signal) == Signal.WAIT_FOR_INPUT
        assert int(state.waiting_register) == 5
        assert state.pc == 0x202

    def test_wait_for_key_ignores_held_keys(self, fresh_state):
        """FX0A - A key already held does not resolve the wait."""
        state = fresh_state.replace(keypad=fresh_state.keypad.at[7].set(True))
        state, signal = execute(state, 0xF00A)
        assert int(signal) == Signal.WAIT_FOR_INPUT
        assert state.V[0] == 0
        assert int(state.waiting_register) != NO_KEY_WAIT


class TestAddToIndex:
    """Test FX1E."""

    def test_add_to_index(self, fresh_state):
        """FX1E - I += VX."""
        state = set_registers(fresh_state, V0=0x10)
        state, _ = execute(with_index(state, 0x300), 0xF01E)
        assert state.I == 0x310

    def test_add_to_index_wraps_without_flag(self, fresh_state):
        """FX1E - Crossing 0xFFF wraps and is not reported in VF."""
        state = set_registers(fresh_state, V0=0xFF, VF=0x0)
        state, _ = execute(with_index(state, 0xF80), 0xF01E)
        assert state.I == 0x07F
        assert state.V[15] == 0


class TestFont:
    """Test FX29."""

    @pytest.mark.parametrize("digit", range(16))
    def test_font_character(self, fresh_state, digit):
        """FX29 - I points at the five-byte glyph for VX."""
        state = set_registers(fresh_state, V0=digit)
        state, _ = execute(state, 0xF029)
        assert state.I == FONT_START + digit * 5

    def test_font_data_is_loaded(self, fresh_state):
        """The glyph for F sits at 0x4B."""
        assert [int(b) for b in fresh_state.memory[0x4B:0x50]] == [0xF0, 0x80, 0xF0, 0x80, 0x80]
        assert (fresh_state.memory[:80] == FONT_DATA).all()

    def test_font_character_out_of_range_faults(self, fresh_state):
        """FX29 - VX above 0xF faults."""
        state = set_registers(fresh_state, V0=0x10)
        result, signal = execute(state, 0xF029)
        assert int(signal) == Signal.FAULT
        assert result.I == 0
        assert result.pc == 0x200


class TestBcd:
    """Test FX33."""

    @pytest.mark.parametrize("value, digits", [(255, [2, 5, 5]), (156, [1, 5, 6]), (7, [0, 0, 7]), (0, [0, 0, 0])])
    def test_bcd_conversion(self, fresh_state, value, digits):
        """FX33 - Hundreds, tens and ones at I, I+1, I+2."""
        state = set_registers(fresh_state, V0=value)
        state, _ = execute(with_index(state, 0x500), 0xF033)
        assert [int(b) for b in state.memory[0x500:0x503]] == digits
        assert state.I == 0x500

    def test_bcd_at_memory_end(self, fresh_state):
        """FX33 - The last three bytes of memory are writable."""
        state = set_registers(fresh_state, V0=123)
        state, signal = execute(with_index(state, MEMORY_SIZE - 3), 0xF033)
        assert int(signal) == Signal.NONE
        assert [int(b) for b in state.memory[-3:]] == [1, 2, 3]

    def test_bcd_past_memory_end_faults(self, fresh_state):
        """FX33 - Writing past the end of memory faults."""
        state = set_registers(fresh_state, V0=123)
        state = with_index(state, MEMORY_SIZE - 2)
        result, signal = execute(state, 0xF033)
        assert int(signal) == Signal.FAULT
        assert (result.memory == state.memory).all()


class TestRegisterDump:
    """Test FX55 and FX65."""

    def test_store_and_load(self, fresh_state):
        """FX55/FX65 - V0-VX round-trip through memory, I unchanged."""
        state = set_registers(fresh_state, V0=1, V1=2, V2=3, V3=4)
        state = with_index(state, 0x300)

        state, _ = execute(state, 0xF255)
        assert [int(b) for b in state.memory[0x300:0x304]] == [1, 2, 3, 0]
        assert state.I == 0x300

        state = state.replace(V=jnp.zeros_like(state.V))
        state, _ = execute(state, 0xF265)
        assert [int(v) for v in state.V[:4]] == [1, 2, 3, 0]
        assert state.I == 0x300

    def test_store_all_registers(self, fresh_state):
        """FF55 - All sixteen registers are written."""
        state = fresh_state.replace(V=jnp.arange(16, dtype=jnp.uint8) + 1)
        state, _ = execute(with_index(state, 0x400), 0xFF55)
        assert [int(b) for b in state.memory[0x400:0x410]] == list(range(1, 17))

    def test_load_leaves_higher_registers(self, fresh_state):
        """FX65 - Registers above X keep their values."""
        setup = fresh_state.replace(V=jnp.full(16, 0xAA, dtype=jnp.uint8))
        state = with_index(setup, 0x300)
        state, _ = execute(state, 0xF165)
        assert state.V[0] == 0 and state.V[1] == 0
        assert (state.V[2:] == setup.V[2:]).all()

    def test_span_reaching_memory_end(self, fresh_state):
        """FX55 - A span ending on the last byte is fine."""
        state = set_registers(fresh_state, V0=9, V1=8)
        state, signal = execute(with_index(state, MEMORY_SIZE - 2), 0xF155)
        assert int(signal) == Signal.NONE
        assert [int(b) for b in state.memory[-2:]] == [9, 8]

    @pytest.mark.parametrize("instruction", [0xF255, 0xF265])
    def test_span_past_memory_end_faults(self, fresh_state, instruction):
        """FX55/FX65 - A span running past the end of memory faults."""
        state = with_index(fresh_state, MEMORY_SIZE - 2)
        result, signal = execute(state, instruction)
        assert int(signal) == Signal.FAULT
        assert (result.memory == state.memory).all()
        assert (result.V == state.V).all()


class TestInvalidMiscCodes:
    """Unassigned FXNN and EXNN sub-codes."""

    @pytest.mark.parametrize("instruction", [0xF000, 0xF0FF, 0xF030, 0xE000, 0xE0FF])
    def test_unknown_sub_code_faults(self, fresh_state, instruction):
        state, signal = execute(fresh_state, instruction)
        assert int(signal) == Signal.FAULT
        assert state.pc == 0x200
