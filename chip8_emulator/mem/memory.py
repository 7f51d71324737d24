"""
CHIP-8 Emulator — 4K Memory with Bounds Checking

Memory map:
  $000–$04F  Glyph table (loaded at construction)
  $050–$1FF  Reserved
  $200–$FFF  Program image (3584 bytes max)

Every access is checked against the 4 KB address space. Nothing wraps:
an address derived from program data that falls outside memory raises
MemoryAccessError instead of silently corrupting other state.
"""

from typing import Optional

from ..config import MEMORY_SIZE, PROGRAM_START, MAX_PROGRAM_SIZE, FONT_BASE
from ..errors import MemoryAccessError
from .font import FONT_SET


class MemoryRegion:
    """A named region in the 4K address space."""
    def __init__(self, name: str, start: int, end: int):
        self.name = name
        self.start = start
        self.end = end  # inclusive

    def contains(self, addr: int) -> bool:
        return self.start <= addr <= self.end


class Memory:
    """4096-byte flat memory (bytearray) pre-loaded with the glyph table."""

    REGIONS = [
        MemoryRegion('FONT',     FONT_BASE, FONT_BASE + len(FONT_SET) - 1),
        MemoryRegion('RESERVED', FONT_BASE + len(FONT_SET), PROGRAM_START - 1),
        MemoryRegion('PROGRAM',  PROGRAM_START, MEMORY_SIZE - 1),
    ]

    def __init__(self):
        self._mem = bytearray(MEMORY_SIZE)
        self._mem[FONT_BASE:FONT_BASE + len(FONT_SET)] = FONT_SET

    def __len__(self) -> int:
        return MEMORY_SIZE

    # --- Bounds ---

    @staticmethod
    def _check(addr: int, length: int, reason: str):
        if addr < 0 or length < 0 or addr + length > MEMORY_SIZE:
            raise MemoryAccessError(addr, max(length, 1), reason)

    def region_of(self, addr: int) -> Optional[str]:
        for region in self.REGIONS:
            if region.contains(addr):
                return region.name
        return None

    # --- Core read/write ---

    def read8(self, addr: int) -> int:
        self._check(addr, 1, "read")
        return self._mem[addr]

    def write8(self, addr: int, value: int):
        self._check(addr, 1, "write")
        self._mem[addr] = value & 0xFF

    def read16(self, addr: int) -> int:
        """Read a big-endian word (instruction fetch)."""
        self._check(addr, 2, "fetch")
        return (self._mem[addr] << 8) | self._mem[addr + 1]

    def read_block(self, addr: int, length: int) -> bytes:
        """Read length bytes starting at addr. The whole range is checked first."""
        self._check(addr, length, "read")
        return bytes(self._mem[addr:addr + length])

    def write_block(self, addr: int, data: bytes):
        """Write data starting at addr. Nothing is written if any byte is out of range."""
        self._check(addr, len(data), "write")
        self._mem[addr:addr + len(data)] = data

    # --- Bulk load ---

    def load_program(self, data: bytes):
        """Copy a program image to $200.

        Raises MemoryAccessError if it is larger than 3584 bytes; memory
        is left untouched in that case.
        """
        data = bytes(data)
        if len(data) > MAX_PROGRAM_SIZE:
            raise MemoryAccessError(PROGRAM_START, len(data), "program load")
        self._mem[PROGRAM_START:PROGRAM_START + len(data)] = data

    def clear(self):
        """Zero memory and reload the glyph table."""
        self._mem = bytearray(MEMORY_SIZE)
        self._mem[FONT_BASE:FONT_BASE + len(FONT_SET)] = FONT_SET
