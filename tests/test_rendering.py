"""Tests for display rendering and color schemes."""

import jax.numpy as jnp
import numpy as np
import pytest
from chip8vm import display_to_rgb, create_color_scheme
from chip8vm.rendering import display_to_text


class TestDisplayToRgb:

    def test_shape_and_orientation(self):
        """Pixel (x=3, y=1) lands at image row 1, column 3."""
        display = jnp.zeros((64, 32), dtype=jnp.bool_).at[3, 1].set(True)
        frame = display_to_rgb(display, scale=1, on_color=(255, 255, 255), off_color=(0, 0, 0))
        assert frame.shape == (32, 64, 3)
        assert frame.dtype == np.uint8
        assert tuple(frame[1, 3]) == (255, 255, 255)
        assert tuple(frame[3, 1]) == (0, 0, 0)

    def test_scale(self):
        display = jnp.zeros((64, 32), dtype=jnp.bool_).at[0, 0].set(True)
        frame = display_to_rgb(display, scale=4)
        assert frame.shape == (128, 256, 3)
        assert (frame[:4, :4] == (0, 255, 0)).all()
        assert (frame[4:, 4:] == 0).all()


class TestColorScheme:

    def test_known_scheme(self):
        on_color, off_color = create_color_scheme("amber")
        assert on_color == (255, 176, 0)
        assert off_color == (0, 0, 0)

    def test_unknown_scheme(self):
        with pytest.raises(ValueError):
            create_color_scheme("sepia")


class TestDisplayToText:

    def test_rows_and_columns(self):
        display = jnp.zeros((64, 32), dtype=jnp.bool_).at[2, 1].set(True)
        lines = display_to_text(display).split("\n")
        assert len(lines) == 32
        assert all(len(line) == 64 for line in lines)
        assert lines[1][2] == "#"
        assert lines[0] == "." * 64
