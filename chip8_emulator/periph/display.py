"""
CHIP-8 Emulator — 64×32 Monochrome Display

Pixels are stored row-major, one byte per pixel (0 or 1), indexed
display.rows[y][x]. The only mutations are clear() (00E0) and
draw_sprite() (Dxyn); both set redraw_pending, which the emulator clears
at the start of every tick and the renderer reads once per frame.

Sprite drawing:
  - each sprite byte is one row of 8 pixels, MSB = leftmost
  - pixels are XORed onto the screen
  - both axes wrap (x mod 64, y mod 32); nothing is clipped
  - collision = any pixel that was lit and got switched off
"""

from typing import List

from ..config import SCREEN_WIDTH, SCREEN_HEIGHT


class Display:
    """Framebuffer + redraw flag."""

    def __init__(self, width: int = SCREEN_WIDTH, height: int = SCREEN_HEIGHT):
        self.width = width
        self.height = height
        self.rows: List[bytearray] = [bytearray(width) for _ in range(height)]
        self.redraw_pending = False

    def clear(self):
        """00E0: all pixels off."""
        self.rows = [bytearray(self.width) for _ in range(self.height)]
        self.redraw_pending = True

    def draw_sprite(self, x: int, y: int, sprite: bytes) -> bool:
        """XOR a sprite at (x, y). Returns True if any lit pixel was erased."""
        collision = 0
        for row, byte in enumerate(sprite):
            line = self.rows[(y + row) % self.height]
            for col in range(8):
                bit = (byte >> (7 - col)) & 1
                px = (x + col) % self.width
                collision |= bit & line[px]
                line[px] ^= bit
        self.redraw_pending = True
        return bool(collision)

    def pixel(self, x: int, y: int) -> int:
        return self.rows[y][x]

    def lit_count(self) -> int:
        return sum(sum(row) for row in self.rows)

    def render_text(self, on: str = '█', off: str = ' ') -> str:
        """One character per pixel, one line per row."""
        return '\n'.join(
            ''.join(on if p else off for p in row) for row in self.rows
        )

    def reset(self):
        self.rows = [bytearray(self.width) for _ in range(self.height)]
        self.redraw_pending = False
