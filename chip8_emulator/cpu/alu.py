"""
CHIP-8 Emulator — ALU Operations

Each function returns a tuple: (result_byte, vf_flag).
The caller writes the flag into VF first and the result into Vx second,
so when x == F the result wins.

Flag conventions:
  add8   VF = 1 if the 9-bit sum exceeds $FF (carry)
  sub8   VF = 1 if a > b (NOT borrow; equal operands give 0)
  shr8   VF = bit 0 of the operand (shifted-out bit)
  shl8   VF = bit 7 of the operand (shifted-out bit)

The shifts take Vx only. Vy is ignored, matching the variant where
8xy6/8xyE shift a register in place.
"""


# ══════════════════════════════════════════════
# Flagged arithmetic: return (result, flag)
# ══════════════════════════════════════════════

def add8(a: int, b: int) -> tuple:
    """Add two 8-bit values, flag = carry out of bit 7."""
    result = a + b
    return (result & 0xFF, 1 if result > 0xFF else 0)


def sub8(a: int, b: int) -> tuple:
    """Subtract b from a modulo 256, flag = 1 when a > b."""
    return ((a - b) & 0xFF, 1 if a > b else 0)


def shr8(val: int) -> tuple:
    """Logical shift right, flag = old bit 0."""
    return ((val & 0xFF) >> 1, val & 0x01)


def shl8(val: int) -> tuple:
    """Shift left, flag = old bit 7."""
    return ((val << 1) & 0xFF, (val & 0x80) >> 7)


# ══════════════════════════════════════════════
# Unflagged helpers
# ══════════════════════════════════════════════

def add8_wrap(a: int, b: int) -> int:
    """7xkk: add without touching VF."""
    return (a + b) & 0xFF


def bcd3(val: int) -> bytes:
    """Binary-coded decimal digits of an 8-bit value: hundreds, tens, units."""
    val &= 0xFF
    return bytes([val // 100, (val % 100) // 10, val % 10])
