"""
CHIP-8 Emulator — Machine Geometry + Runtime Configuration

Fixed machine constants live at module level (they never change between
instances). Runtime options that a driver may want to vary live on
EmulatorConfig.

Memory map:
  $000–$04F  Glyph table (16 hex digits × 5 bytes)
  $050–$1FF  Reserved / unused
  $200–$FFF  Program image
"""

from dataclasses import dataclass
from typing import Optional


# =============================================================================
#  MEMORY
# =============================================================================
MEMORY_SIZE = 4096         # 4 KB flat, byte-addressable
FONT_BASE = 0x000          # glyph table load address
PROGRAM_START = 0x200      # program image load address / reset PC
MAX_PROGRAM_SIZE = MEMORY_SIZE - PROGRAM_START   # 3584 bytes


# =============================================================================
#  CPU
# =============================================================================
NUM_REGISTERS = 16         # V0..VF
FLAG_REGISTER = 0xF        # VF doubles as carry/borrow/collision flag
STACK_DEPTH = 16           # return addresses
OPCODE_SIZE = 2            # every instruction is one big-endian word
INDEX_LIMIT = 0x0F00       # Fx1E sets VF when I goes past this


# =============================================================================
#  DISPLAY / INPUT / TIMERS
# =============================================================================
SCREEN_WIDTH = 64
SCREEN_HEIGHT = 32
NUM_KEYS = 16
TICK_RATE_HZ = 60          # external driver cadence; one instruction per tick


@dataclass
class EmulatorConfig:
    """Runtime options for an emulator instance.

    tick_rate_hz is only used when a run loop paces itself against the
    wall clock. seed makes Cxkk reproducible. max_ticks bounds run()
    when the caller passes no explicit limit. trace_limit caps how many
    trace lines are kept; older lines are dropped.
    """
    tick_rate_hz: int = TICK_RATE_HZ
    seed: Optional[int] = None
    trace: bool = False
    trace_limit: int = 10_000
    max_ticks: int = 1_000_000

    @property
    def tick_interval(self) -> float:
        return 1.0 / self.tick_rate_hz
