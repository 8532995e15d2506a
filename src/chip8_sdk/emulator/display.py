"""
Monochrome Display for the CHIP-8 Emulator
==========================================

The CHIP-8 screen is a 64 × 32 grid of on/off pixels. Programs never set
pixels directly: the draw instruction XORs sprite bits onto the grid and
reports whether any lit pixel was switched off (a "collision").

This module provides an in-memory implementation of that surface plus
the host-side conveniences used by tests and the command-line tools:
text rendering and PNG rendering (via Pillow).

The interpreter only relies on two methods, ``clear()`` and
``toggle_pixel()``; any object providing them can stand in for Display.
"""

from dataclasses import dataclass
from pathlib import Path
from typing import List

from chip8_sdk.cpu.chip8 import DISPLAY_HEIGHT, DISPLAY_WIDTH


@dataclass
class DisplayState:
    """
    Display contents for snapshotting.

    Attributes:
        pixels: Row-major pixel values, one byte per pixel (0 or 1)
    """
    pixels: bytes


class Display:
    """
    64 × 32 XOR-drawn pixel grid.

    Example:
        >>> display = Display()
        >>> display.toggle_pixel(0, 0)
        False
        >>> display.toggle_pixel(0, 0)
        True
    """

    def __init__(self, width: int = DISPLAY_WIDTH, height: int = DISPLAY_HEIGHT):
        self._width = width
        self._height = height
        self._pixels = bytearray(width * height)

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    # =========================================================================
    # Surface operations used by the interpreter
    # =========================================================================

    def clear(self) -> None:
        """Switch every pixel off."""
        self._pixels[:] = bytes(len(self._pixels))

    def toggle_pixel(self, x: int, y: int) -> bool:
        """
        XOR one pixel.

        Coordinates wrap around the screen edges.

        Returns:
            True if the pixel was on (and is now off), i.e. a collision
        """
        index = (y % self._height) * self._width + (x % self._width)
        was_on = self._pixels[index] == 1
        self._pixels[index] ^= 1
        return was_on

    # =========================================================================
    # Pixel access
    # =========================================================================

    def get_pixel(self, x: int, y: int) -> bool:
        return self._pixels[(y % self._height) * self._width + (x % self._width)] == 1

    def set_pixel(self, x: int, y: int, on: bool) -> None:
        self._pixels[(y % self._height) * self._width + (x % self._width)] = 1 if on else 0

    def lit_count(self) -> int:
        """Number of pixels currently on."""
        return sum(self._pixels)

    def get_pixel_buffer(self) -> bytes:
        """
        Get the raw pixel buffer.

        Returns:
            Row-major bytes, one per pixel, 1 for on and 0 for off
        """
        return bytes(self._pixels)

    # =========================================================================
    # Rendering
    # =========================================================================

    def get_text_grid(self, on: str = "#", off: str = ".") -> List[str]:
        """
        Render the screen as text, one string per row.

        Args:
            on: Character for lit pixels
            off: Character for dark pixels
        """
        rows = []
        for y in range(self._height):
            row = self._pixels[y * self._width:(y + 1) * self._width]
            rows.append("".join(on if p else off for p in row))
        return rows

    def get_text(self) -> str:
        """Render the screen as a single newline-separated string."""
        return "\n".join(self.get_text_grid())

    def render_image(self, scale: int = 8) -> bytes:
        """
        Render the display as a PNG image.

        Args:
            scale: Pixel scale factor (default 8, giving 512 × 256)

        Returns:
            PNG image bytes
        """
        from PIL import Image
        import io

        img = Image.new("L", (self._width, self._height), color=0)
        img.putdata([255 if p else 0 for p in self._pixels])
        if scale != 1:
            img = img.resize((self._width * scale, self._height * scale), Image.Resampling.NEAREST)

        buffer = io.BytesIO()
        img.save(buffer, format="PNG")
        return buffer.getvalue()

    def save_image(self, path: str | Path, scale: int = 8) -> None:
        """Write the display to a PNG file."""
        Path(path).write_bytes(self.render_image(scale))

    # =========================================================================
    # Snapshot Support
    # =========================================================================

    def get_state(self) -> DisplayState:
        return DisplayState(pixels=bytes(self._pixels))

    def set_state(self, state: DisplayState) -> None:
        if len(state.pixels) != len(self._pixels):
            raise ValueError(
                f"display snapshot has {len(state.pixels)} pixels, expected {len(self._pixels)}"
            )
        self._pixels[:] = state.pixels
