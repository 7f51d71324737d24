"""
CHIP-8 Emulator — CPU Register Set + Call Stack

Register model:
  V0–VF  — 16 × 8-bit general registers
           VF is also the flag output of 8xy4/8xy5/8xy6/8xy7/8xyE,
           Fx1E and Dxyn
  I      — 16-bit index register (memory-relative addressing)
  PC     — 16-bit program counter, starts at $200, moves in 2-byte steps
  stack  — 16 return addresses, SP = number of entries in use

Stack overflow and underflow are fatal. The stack never wraps.
"""

from ..config import NUM_REGISTERS, STACK_DEPTH, PROGRAM_START, FLAG_REGISTER
from ..errors import StackOverflow, StackUnderflow


class Registers:
    """CHIP-8 register file and call stack."""

    __slots__ = ('V', 'I', 'PC', 'stack', 'SP')

    def __init__(self):
        self.V = bytearray(NUM_REGISTERS)   # V0..VF (8-bit, writes > $FF raise)
        self.I: int = PROGRAM_START         # index register
        self.PC: int = PROGRAM_START        # program counter
        self.stack = [0] * STACK_DEPTH      # return addresses
        self.SP: int = 0                    # entries in use

    # --- Flag register ---

    @property
    def VF(self) -> int:
        return self.V[FLAG_REGISTER]

    @VF.setter
    def VF(self, value: int):
        self.V[FLAG_REGISTER] = value & 0xFF

    # --- Stack operations ---

    def push(self, address: int):
        """Push a return address. Raises StackOverflow when all 16 slots are used."""
        if self.SP >= STACK_DEPTH:
            raise StackOverflow(self.PC, self.SP)
        self.stack[self.SP] = address & 0xFFFF
        self.SP += 1

    def pop(self) -> int:
        """Pop the most recent return address. Raises StackUnderflow when empty."""
        if self.SP == 0:
            raise StackUnderflow(self.PC)
        self.SP -= 1
        return self.stack[self.SP]

    # --- Display ---

    def display(self) -> str:
        """Format register state for trace output."""
        v = ' '.join(f'{b:02X}' for b in self.V)
        return f"PC={self.PC:03X} I={self.I:03X} SP={self.SP:X} V=[{v}]"

    def reset(self):
        """Reset registers to power-on state."""
        self.V = bytearray(NUM_REGISTERS)
        self.I = PROGRAM_START
        self.PC = PROGRAM_START
        self.stack = [0] * STACK_DEPTH
        self.SP = 0
