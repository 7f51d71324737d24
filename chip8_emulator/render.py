"""
CHIP-8 Emulator — Terminal Renderer

Draws the 64×32 framebuffer into a terminal with rich. Two pixel rows
share one text line using half-block characters, so the screen fits in
16 lines:

    top  bottom   char
     0     0      ' '
     1     0      '▀'
     0     1      '▄'
     1     1      '█'

The renderer only rebuilds its output when the emulator reports
redraw_pending (or nothing has been drawn yet).
"""

from rich.console import Console
from rich.panel import Panel
from rich.text import Text

HALF_BLOCKS = {
    (0, 0): ' ',
    (1, 0): '▀',
    (0, 1): '▄',
    (1, 1): '█',
}


def display_to_text(display) -> str:
    """Render a Display as half-block text, one line per pair of rows."""
    lines = []
    rows = display.rows
    for y in range(0, display.height, 2):
        top = rows[y]
        bottom = rows[y + 1] if y + 1 < display.height else bytearray(display.width)
        lines.append(''.join(HALF_BLOCKS[(t, b)] for t, b in zip(top, bottom)))
    return '\n'.join(lines)


class TerminalRenderer:
    """Repaints a rich Panel when the emulator asks for it."""

    def __init__(self, console: Console = None, title: str = "CHIP-8"):
        self.console = console or Console()
        self.title = title
        self._panel = None

    def panel(self, emu) -> Panel:
        """Current frame as a Panel. Reuses the last one when nothing changed."""
        if self._panel is None or emu.redraw_pending:
            body = Text(display_to_text(emu.display), style="bold green")
            subtitle = f"PC=${emu.regs.PC:03X}  ticks={emu.ticks}"
            if emu.sound_active:
                subtitle += "  ♪"
            self._panel = Panel(body, title=self.title, subtitle=subtitle,
                                expand=False)
        return self._panel

    def draw(self, emu):
        self.console.print(self.panel(emu))
