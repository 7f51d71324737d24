"""
CHIP-8 Emulator — Control-Flow Actions

Instruction handlers never touch PC. Each one returns one of:
  Next          PC += 2
  Skip          PC += 4   (conditional skips, via skip_if)
  Jump(addr)    PC = addr (JP, CALL, RET, JP V0)
and the engine applies it after the handler returns.
"""

from dataclasses import dataclass

from ..config import OPCODE_SIZE


@dataclass(frozen=True)
class Next:
    def apply(self, pc: int) -> int:
        return pc + OPCODE_SIZE


@dataclass(frozen=True)
class Skip:
    def apply(self, pc: int) -> int:
        return pc + 2 * OPCODE_SIZE


@dataclass(frozen=True)
class Jump:
    address: int

    def apply(self, pc: int) -> int:
        return self.address


NEXT = Next()
SKIP = Skip()


def skip_if(cond: bool):
    """Skip the next instruction when cond holds, otherwise advance."""
    return SKIP if cond else NEXT
