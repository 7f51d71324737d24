# CHIP-8 Emulator — Pure-software CHIP-8 virtual machine
# Part of the chip8kit toolkit
#
# Layout:
#   cpu/     register file, opcode decoder, ALU, control-flow actions
#   mem/     4K memory map + built-in hex glyphs
#   periph/  display, keypad (with Fx0A wait state), delay/sound timers
#   emu.py   fetch-decode-execute engine and tick loop
#   render.py  terminal renderer used by chip8kit.py

__version__ = "0.2.0"

from .config import EmulatorConfig
from .errors import (
    Chip8Error, IllegalOpcode, StackError, StackOverflow, StackUnderflow,
    MemoryAccessError, ProgramCounterError, InvalidKey, EmulatorHalted,
)
from .emu import Chip8Emulator, StopReason
