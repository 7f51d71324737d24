"""
CHIP-8 Emulator — Fault Types

Every fault is fatal for the running program: the emulator stops ticking
and reports the exception until reset() is called.
"""


class Chip8Error(Exception):
    """Base class for all emulator faults."""
    pass


class IllegalOpcode(Chip8Error):
    """Raised when an opcode word matches no defined instruction."""
    def __init__(self, opcode: int, address: int):
        self.opcode = opcode
        self.address = address
        super().__init__(f"Unknown opcode ${opcode:04X} at ${address:03X}")


class StackError(Chip8Error):
    pass


class StackOverflow(StackError):
    """CALL with every stack slot in use."""
    def __init__(self, address: int, depth: int):
        self.address = address
        super().__init__(
            f"Call stack overflow at ${address:03X} (depth {depth})")


class StackUnderflow(StackError):
    """RET with an empty stack."""
    def __init__(self, address: int):
        self.address = address
        super().__init__(f"Return with empty call stack at ${address:03X}")


class MemoryAccessError(Chip8Error):
    """Raised for any access that falls outside the 4 KB address space."""
    def __init__(self, address: int, length: int = 1, reason: str = "access"):
        self.address = address
        self.length = length
        end = address + length - 1
        if length > 1:
            where = f"${address:03X}-${end:03X}"
        else:
            where = f"${address:03X}"
        super().__init__(f"Memory {reason} out of range: {where}")


class ProgramCounterError(Chip8Error):
    """PC would leave memory or land on an odd offset from $200."""
    def __init__(self, target: int, address: int, reason: str):
        self.target = target
        self.address = address
        self.reason = reason
        super().__init__(
            f"PC ${target:03X} {reason} (set by instruction at ${address:03X})")


class InvalidKey(Chip8Error):
    """Raised when a key-skip instruction names a key outside 0x0-0xF."""
    def __init__(self, key: int):
        self.key = key
        super().__init__(f"Key index ${key:02X} outside keypad")


class EmulatorHalted(Chip8Error):
    """Raised when tick() is called after a fault without reset()."""
    def __init__(self, cause: Chip8Error):
        self.cause = cause
        super().__init__(f"Emulator halted by earlier fault: {cause}")
