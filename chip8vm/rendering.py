"""Turning the boolean display into images and text."""

from typing import Dict, Tuple

import numpy as np

Color = Tuple[int, int, int]

# name -> (on_color, off_color)
COLOR_SCHEMES: Dict[str, Tuple[Color, Color]] = {
    "classic": ((0, 255, 0), (0, 0, 0)),
    "white": ((255, 255, 255), (0, 0, 0)),
    "amber": ((255, 176, 0), (0, 0, 0)),
    "blue": ((0, 255, 255), (0, 0, 64)),
    "retro": ((255, 255, 0), (64, 0, 64)),
}


def _image_pixels(display) -> np.ndarray:
    # Stored as [x, y]; images are indexed [row, column]
    return np.asarray(display, dtype=np.bool_).T


def display_to_rgb(
    display,
    scale: int = 8,
    on_color: Color = (0, 255, 0),
    off_color: Color = (0, 0, 0),
) -> np.ndarray:
    """Convert the display to an RGB frame.

    Args:
        display: Boolean array of shape (64, 32), indexed [x, y]
        scale: Size in image pixels of one CHIP-8 pixel
        on_color: RGB color for lit pixels
        off_color: RGB color for dark pixels

    Returns:
        uint8 array of shape (32 * scale, 64 * scale, 3)
    """
    pixels = _image_pixels(display)
    frame = np.where(
        pixels[..., None],
        np.asarray(on_color, dtype=np.uint8),
        np.asarray(off_color, dtype=np.uint8),
    )
    if scale > 1:
        frame = frame.repeat(scale, axis=0).repeat(scale, axis=1)
    return frame


def display_to_text(display, on: str = "#", off: str = ".") -> str:
    """Render the display as one line of text per row."""
    return "\n".join("".join(on if lit else off for lit in row) for row in _image_pixels(display))


def create_color_scheme(scheme: str = "classic") -> Tuple[Color, Color]:
    """Look up a predefined (on_color, off_color) pair by name."""
    if scheme not in COLOR_SCHEMES:
        raise ValueError(
            f"Unknown color scheme '{scheme}'. Available: {list(COLOR_SCHEMES)}"
        )
    return COLOR_SCHEMES[scheme]
