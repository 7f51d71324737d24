"""
CHIP-8 Emulator — Opcode Decoder / Dispatch Tables

Every instruction is one big-endian 16-bit word. Decoding is two-level:

  1. Primary selector: bits 15–12 (top nibble) → OPCODES
  2. Secondary selector for the shared families:
       $0nnn  low byte   → OPCODES_0
       $8xyn  low nibble → OPCODES_8
       $Exnn  low byte   → OPCODES_E
       $Fxnn  low byte   → OPCODES_F

Each table maps a selector to a mnemonic; the emulator maps mnemonics
to handlers. Anything that falls through either level raises
IllegalOpcode, including every $0nnn other than 00E0/00EE.

Operand fields:
  x    bits 11–8   register selector
  y    bits 7–4    register selector
  n    bits 3–0    4-bit count (sprite height)
  kk   bits 7–0    8-bit immediate
  nnn  bits 11–0   12-bit address
"""

from typing import NamedTuple

from ..errors import IllegalOpcode


# Marker in OPCODES for families that need a second lookup
FAMILY = None


class Fields(NamedTuple):
    x: int
    y: int
    n: int
    kk: int
    nnn: int


# ──────────────────────────────────────────────
# Primary table: top nibble
# ──────────────────────────────────────────────

OPCODES = {
    0x0: FAMILY,          # see OPCODES_0
    0x1: 'JP',            # 1nnn  PC = nnn
    0x2: 'CALL',          # 2nnn  push PC+2, PC = nnn
    0x3: 'SE_VX_KK',      # 3xkk  skip if Vx == kk
    0x4: 'SNE_VX_KK',     # 4xkk  skip if Vx != kk
    0x5: 'SE_VX_VY',      # 5xy0  skip if Vx == Vy
    0x6: 'LD_VX_KK',      # 6xkk  Vx = kk
    0x7: 'ADD_VX_KK',     # 7xkk  Vx += kk, no flag
    0x8: FAMILY,          # see OPCODES_8
    0x9: 'SNE_VX_VY',     # 9xy0  skip if Vx != Vy
    0xA: 'LD_I',          # Annn  I = nnn
    0xB: 'JP_V0',         # Bnnn  PC = nnn + V0
    0xC: 'RND',           # Cxkk  Vx = random & kk
    0xD: 'DRW',           # Dxyn  draw n-row sprite at (Vx, Vy)
    0xE: FAMILY,          # see OPCODES_E
    0xF: FAMILY,          # see OPCODES_F
}

# ── $0nnn: low byte ──
OPCODES_0 = {
    0xE0: 'CLS',          # 00E0  clear display
    0xEE: 'RET',          # 00EE  pop return address
}

# ── $8xyn: low nibble ──
OPCODES_8 = {
    0x0: 'LD_VX_VY',      # Vx = Vy
    0x1: 'OR',            # Vx |= Vy
    0x2: 'AND',           # Vx &= Vy
    0x3: 'XOR',           # Vx ^= Vy
    0x4: 'ADD_VX_VY',     # Vx += Vy, VF = carry
    0x5: 'SUB',           # Vx -= Vy, VF = NOT borrow
    0x6: 'SHR',           # Vx >>= 1, VF = old bit 0
    0x7: 'SUBN',          # Vx = Vy - Vx, VF = NOT borrow
    0xE: 'SHL',           # Vx <<= 1, VF = old bit 7
}

# ── $Exnn: low byte ──
OPCODES_E = {
    0x9E: 'SKP',          # skip if key Vx down
    0xA1: 'SKNP',         # skip if key Vx up
}

# ── $Fxnn: low byte ──
OPCODES_F = {
    0x07: 'LD_VX_DT',     # Vx = delay timer
    0x0A: 'LD_VX_K',      # wait for key, store in Vx
    0x15: 'LD_DT_VX',     # delay timer = Vx
    0x18: 'LD_ST_VX',     # sound timer = Vx
    0x1E: 'ADD_I_VX',     # I += Vx, VF = I > $F00
    0x29: 'LD_F_VX',      # I = small glyph for digit Vx
    0x30: 'LD_HF_VX',     # I = large glyph slot for digit Vx
    0x33: 'LD_B_VX',      # BCD of Vx at I..I+2
    0x55: 'LD_I_VX',      # store V0..Vx at I
    0x65: 'LD_VX_I',      # load V0..Vx from I
}

# Family tables: (selector mask, table)
FAMILIES = {
    0x0: (0x00FF, OPCODES_0),
    0x8: (0x000F, OPCODES_8),
    0xE: (0x00FF, OPCODES_E),
    0xF: (0x00FF, OPCODES_F),
}


def decode_fields(opcode: int) -> Fields:
    """Split an opcode word into its operand fields."""
    return Fields(
        x=(opcode & 0x0F00) >> 8,
        y=(opcode & 0x00F0) >> 4,
        n=opcode & 0x000F,
        kk=opcode & 0x00FF,
        nnn=opcode & 0x0FFF,
    )


def decode_mnemonic(opcode: int, address: int) -> str:
    """Resolve an opcode word to its mnemonic.

    address is only used to label IllegalOpcode.
    """
    opcode &= 0xFFFF
    top = opcode >> 12
    mnem = OPCODES[top]
    if mnem is not FAMILY:
        return mnem
    mask, table = FAMILIES[top]
    mnem = table.get(opcode & mask)
    if mnem is None:
        raise IllegalOpcode(opcode, address)
    return mnem


def decode_opcode(memory, pc: int):
    """Fetch and decode the instruction word at pc.

    Returns: (opcode, mnemonic, fields)

    Raises MemoryAccessError if pc or pc+1 is outside memory and
    IllegalOpcode if the word matches no instruction.
    """
    opcode = memory.read16(pc)
    return opcode, decode_mnemonic(opcode, pc), decode_fields(opcode)
