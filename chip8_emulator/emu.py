"""
CHIP-8 Emulator — Main Emulator Class

This is the top-level class that integrates:
  - CPU registers + call stack (regs.py)
  - 4K memory with glyph table (memory.py)
  - Opcode decoder (decoder.py)
  - ALU operations (alu.py)
  - Control-flow actions (flow.py)
  - Peripherals: display, keypad, timers

Execution model (one tick, driven externally at ~60 Hz):
  1. Store the 16-key snapshot, clear redraw_pending
  2. If waiting on Fx0A: scan keys, maybe resolve the wait, stop here
  3. Otherwise fetch the word at PC, decode, execute
  4. Apply the handler's action (Next / Skip / Jump) to PC. A target
     outside memory or on an odd offset from $200 is a fault.
  5. Count both timers down

Exactly one instruction runs per tick.

Termination reasons (run loop):
  - TIMEOUT:  tick limit reached
  - BREAK:    breakpoint address hit
  - ILLEGAL:  undefined opcode
  - ERROR:    any other fault (stack, memory range, bad PC, bad key index)
"""

import logging
import random
import time
from collections import deque
from enum import Enum
from pathlib import Path
from typing import Callable, Optional, Sequence, Set

from .config import (
    EmulatorConfig, NUM_KEYS, INDEX_LIMIT, OPCODE_SIZE, MEMORY_SIZE, PROGRAM_START,
)
from .errors import Chip8Error, EmulatorHalted, IllegalOpcode, ProgramCounterError
from .cpu.regs import Registers
from .cpu.decoder import decode_opcode
from .cpu.flow import NEXT, Jump, skip_if
from .cpu import alu
from .mem.memory import Memory
from .mem.font import GLYPH_HEIGHT, LARGE_GLYPH_HEIGHT
from .periph.display import Display
from .periph.keypad import Keypad
from .periph.timer import Timers

log = logging.getLogger(__name__)


class StopReason(Enum):
    TIMEOUT = 'TIMEOUT'
    BREAK = 'BREAK'
    ILLEGAL = 'ILLEGAL'
    ERROR = 'ERROR'


NO_KEYS = (False,) * NUM_KEYS


class Chip8Emulator:
    """CHIP-8 Virtual Machine.

    Usage:
        emu = Chip8Emulator()
        emu.load_rom('PONG')
        while True:
            emu.tick(keys)              # 16 booleans, once per frame
            if emu.redraw_pending:
                repaint(emu.display)
    """

    def __init__(self, config: Optional[EmulatorConfig] = None, rng=None):
        self.config = config or EmulatorConfig()

        # Core components
        self.regs = Registers()
        self.mem = Memory()

        # Peripherals
        self.display = Display()
        self.keypad = Keypad()
        self.timers = Timers()

        # Random source for Cxkk: anything with getrandbits(8)
        self.rng = rng if rng is not None else random.Random(self.config.seed)

        self.fault: Optional[Chip8Error] = None
        self.ticks = 0
        self._program = b''

        # Breakpoints: set of PC addresses that trigger BREAK
        self._breakpoints: Set[int] = set()

        # Trace output (oldest lines drop off past trace_limit)
        self._trace = self.config.trace
        self._trace_output = deque(maxlen=self.config.trace_limit)

        # Instruction dispatch table (built in _build_dispatch)
        self._dispatch = self._build_dispatch()

    # ══════════════════════════════════════════════
    # Loading
    # ══════════════════════════════════════════════

    def load_rom(self, path_or_data):
        """Load a program image from a file path or bytes, copied to $200.

        Raises MemoryAccessError if the image exceeds 3584 bytes.
        """
        if isinstance(path_or_data, (str, Path)):
            data = Path(path_or_data).read_bytes()
            source = str(path_or_data)
        else:
            data = bytes(path_or_data)
            source = "<bytes>"
        self.mem.load_program(data)
        self._program = data
        log.info("Loaded %d bytes from %s at $200", len(data), source)

    # ══════════════════════════════════════════════
    # State seen by drivers
    # ══════════════════════════════════════════════

    @property
    def redraw_pending(self) -> bool:
        return self.display.redraw_pending

    @property
    def awaiting_key(self) -> bool:
        return self.keypad.waiting

    @property
    def sound_active(self) -> bool:
        return self.timers.sound_active

    @property
    def halted(self) -> bool:
        return self.fault is not None

    # ══════════════════════════════════════════════
    # Execution
    # ══════════════════════════════════════════════

    def tick(self, keys: Optional[Sequence[bool]] = None):
        """Advance the machine by one tick.

        keys is the full 16-key snapshot for this tick (None = nothing
        held). While waiting on Fx0A the tick only scans keys; otherwise
        it executes one instruction and counts the timers down.

        Faults propagate to the caller and halt the emulator.
        """
        if self.fault is not None:
            raise EmulatorHalted(self.fault)

        self.keypad.update(NO_KEYS if keys is None else keys)
        self.display.redraw_pending = False
        self.ticks += 1

        if self.keypad.waiting:
            key = self.keypad.resolve_wait()
            if key is not None:
                self.regs.V[self.keypad.target_register] = key
            return

        try:
            self.step()
        except Chip8Error as e:
            self._halt(e)
            raise

        self.timers.update()

    def step(self):
        """Fetch, decode and execute one instruction, then update PC.

        Returns the control-flow action the instruction produced.
        Does not touch the timers or the key-wait state; tick() does.
        """
        pc = self.regs.PC
        opcode, mnem, fields = decode_opcode(self.mem, pc)

        if self._trace:
            self._trace_output.append(
                f"${pc:03X}: {opcode:04X} {mnem:10s} {self.regs.display()}"
            )
            log.debug("$%03X: %04X %s", pc, opcode, mnem)

        action = self._dispatch[mnem](fields)
        self.regs.PC = self._checked_pc(action.apply(pc), pc)
        return action

    def run(self, max_ticks: Optional[int] = None, keys=None,
            on_tick: Optional[Callable] = None,
            realtime: bool = False) -> StopReason:
        """Tick until a stop condition.

        Args:
            max_ticks: tick limit before TIMEOUT (default: config.max_ticks)
            keys:      None, a fixed 16-key snapshot, or a callable
                       taking the emulator and returning a snapshot
            on_tick:   called with the emulator after every tick
            realtime:  pace ticks at config.tick_rate_hz

        Returns:
            StopReason indicating why execution stopped
        """
        if max_ticks is None:
            max_ticks = self.config.max_ticks

        interval = self.config.tick_interval
        deadline = time.perf_counter()
        first = True

        for _ in range(max_ticks):
            # Breakpoint check (skipped on the first tick so a run can resume)
            if (not first and not self.keypad.waiting
                    and self.regs.PC in self._breakpoints):
                log.info("Breakpoint at $%03X", self.regs.PC)
                return StopReason.BREAK
            first = False

            snapshot = keys(self) if callable(keys) else keys
            try:
                self.tick(snapshot)
            except IllegalOpcode:
                return StopReason.ILLEGAL
            except Chip8Error:
                return StopReason.ERROR

            if on_tick is not None:
                on_tick(self)

            if realtime:
                deadline += interval
                delay = deadline - time.perf_counter()
                if delay > 0:
                    time.sleep(delay)

        return StopReason.TIMEOUT

    def _checked_pc(self, target: int, pc: int) -> int:
        """Validate the next PC before it is committed. PC stays at pc on a fault."""
        if target < 0 or target + OPCODE_SIZE > MEMORY_SIZE:
            raise ProgramCounterError(target, pc, "outside memory")
        if (target - PROGRAM_START) % OPCODE_SIZE:
            raise ProgramCounterError(target, pc, "misaligned")
        return target

    def _halt(self, exc: Chip8Error):
        self.fault = exc
        region = self.mem.region_of(self.regs.PC) or 'outside memory'
        log.error("Fault at $%03X (%s) after %d ticks: %s",
                  self.regs.PC, region, self.ticks, exc)

    # ══════════════════════════════════════════════
    # Instruction handlers
    # ══════════════════════════════════════════════
    # Handler signature: handler(fields) -> action
    # fields is decoder.Fields(x, y, n, kk, nnn)

    def _build_dispatch(self) -> dict:
        """Build mnemonic → handler dispatch table."""
        return {
            # ── Screen / subroutine ──
            'CLS':       self._op_cls,
            'RET':       self._op_ret,

            # ── Jump / call ──
            'JP':        self._op_jp,
            'CALL':      self._op_call,
            'JP_V0':     self._op_jp_v0,

            # ── Skip-compare ──
            'SE_VX_KK':  self._op_se_vx_kk,
            'SNE_VX_KK': self._op_sne_vx_kk,
            'SE_VX_VY':  self._op_se_vx_vy,
            'SNE_VX_VY': self._op_sne_vx_vy,

            # ── Load / add immediate ──
            'LD_VX_KK':  self._op_ld_vx_kk,
            'ADD_VX_KK': self._op_add_vx_kk,

            # ── Register ALU ($8xyn) ──
            'LD_VX_VY':  self._op_ld_vx_vy,
            'OR':        self._op_or,
            'AND':       self._op_and,
            'XOR':       self._op_xor,
            'ADD_VX_VY': self._op_add_vx_vy,
            'SUB':       self._op_sub,
            'SHR':       self._op_shr,
            'SUBN':      self._op_subn,
            'SHL':       self._op_shl,

            # ── Index / random / draw ──
            'LD_I':      self._op_ld_i,
            'RND':       self._op_rnd,
            'DRW':       self._op_drw,

            # ── Keys ──
            'SKP':       self._op_skp,
            'SKNP':      self._op_sknp,

            # ── Timers / misc ($Fxnn) ──
            'LD_VX_DT':  self._op_ld_vx_dt,
            'LD_VX_K':   self._op_ld_vx_k,
            'LD_DT_VX':  self._op_ld_dt_vx,
            'LD_ST_VX':  self._op_ld_st_vx,
            'ADD_I_VX':  self._op_add_i_vx,
            'LD_F_VX':   self._op_ld_f_vx,
            'LD_HF_VX':  self._op_ld_hf_vx,
            'LD_B_VX':   self._op_ld_b_vx,
            'LD_I_VX':   self._op_ld_i_vx,
            'LD_VX_I':   self._op_ld_vx_i,
        }

    # ── Screen / subroutine ──

    def _op_cls(self, f):
        self.display.clear()
        return NEXT

    def _op_ret(self, f):
        return Jump(self.regs.pop())

    # ── Jump / call ──

    def _op_jp(self, f):
        return Jump(f.nnn)

    def _op_call(self, f):
        self.regs.push(self.regs.PC + OPCODE_SIZE)
        return Jump(f.nnn)

    def _op_jp_v0(self, f):
        return Jump(f.nnn + self.regs.V[0])

    # ── Skip-compare ──

    def _op_se_vx_kk(self, f):
        return skip_if(self.regs.V[f.x] == f.kk)

    def _op_sne_vx_kk(self, f):
        return skip_if(self.regs.V[f.x] != f.kk)

    def _op_se_vx_vy(self, f):
        return skip_if(self.regs.V[f.x] == self.regs.V[f.y])

    def _op_sne_vx_vy(self, f):
        return skip_if(self.regs.V[f.x] != self.regs.V[f.y])

    # ── Load / add immediate ──

    def _op_ld_vx_kk(self, f):
        self.regs.V[f.x] = f.kk
        return NEXT

    def _op_add_vx_kk(self, f):
        self.regs.V[f.x] = alu.add8_wrap(self.regs.V[f.x], f.kk)
        return NEXT

    # ── Register ALU ──
    # Flag first, result second: with x == F the result overwrites the flag.

    def _set_with_flag(self, x: int, result: int, flag: int):
        self.regs.VF = flag
        self.regs.V[x] = result

    def _op_ld_vx_vy(self, f):
        self.regs.V[f.x] = self.regs.V[f.y]
        return NEXT

    def _op_or(self, f):
        self.regs.V[f.x] |= self.regs.V[f.y]
        return NEXT

    def _op_and(self, f):
        self.regs.V[f.x] &= self.regs.V[f.y]
        return NEXT

    def _op_xor(self, f):
        self.regs.V[f.x] ^= self.regs.V[f.y]
        return NEXT

    def _op_add_vx_vy(self, f):
        self._set_with_flag(f.x, *alu.add8(self.regs.V[f.x], self.regs.V[f.y]))
        return NEXT

    def _op_sub(self, f):
        self._set_with_flag(f.x, *alu.sub8(self.regs.V[f.x], self.regs.V[f.y]))
        return NEXT

    def _op_shr(self, f):
        self._set_with_flag(f.x, *alu.shr8(self.regs.V[f.x]))
        return NEXT

    def _op_subn(self, f):
        self._set_with_flag(f.x, *alu.sub8(self.regs.V[f.y], self.regs.V[f.x]))
        return NEXT

    def _op_shl(self, f):
        self._set_with_flag(f.x, *alu.shl8(self.regs.V[f.x]))
        return NEXT

    # ── Index / random / draw ──

    def _op_ld_i(self, f):
        self.regs.I = f.nnn
        return NEXT

    def _op_rnd(self, f):
        self.regs.V[f.x] = self.rng.getrandbits(8) & f.kk
        return NEXT

    def _op_drw(self, f):
        """Dxyn: XOR n sprite rows from memory[I] at (Vx, Vy), VF = collision.

        VF is cleared before the coordinates are read, so DFyn / DxFn draw
        at 0 on that axis.
        """
        sprite = self.mem.read_block(self.regs.I, f.n)
        self.regs.VF = 0
        if self.display.draw_sprite(self.regs.V[f.x], self.regs.V[f.y], sprite):
            self.regs.VF = 1
        return NEXT

    # ── Keys ──

    def _op_skp(self, f):
        return skip_if(self.keypad.is_pressed(self.regs.V[f.x]))

    def _op_sknp(self, f):
        return skip_if(not self.keypad.is_pressed(self.regs.V[f.x]))

    # ── Timers / misc ──

    def _op_ld_vx_dt(self, f):
        self.regs.V[f.x] = self.timers.delay
        return NEXT

    def _op_ld_vx_k(self, f):
        self.keypad.begin_wait(f.x)
        return NEXT

    def _op_ld_dt_vx(self, f):
        self.timers.delay = self.regs.V[f.x]
        return NEXT

    def _op_ld_st_vx(self, f):
        self.timers.sound = self.regs.V[f.x]
        return NEXT

    def _op_add_i_vx(self, f):
        """Fx1E: I += Vx. VF = 1 when I ends up past $F00."""
        self.regs.I = (self.regs.I + self.regs.V[f.x]) & 0xFFFF
        self.regs.VF = 1 if self.regs.I > INDEX_LIMIT else 0
        return NEXT

    def _op_ld_f_vx(self, f):
        self.regs.I = self.regs.V[f.x] * GLYPH_HEIGHT
        return NEXT

    def _op_ld_hf_vx(self, f):
        self.regs.I = self.regs.V[f.x] * LARGE_GLYPH_HEIGHT
        return NEXT

    def _op_ld_b_vx(self, f):
        self.mem.write_block(self.regs.I, alu.bcd3(self.regs.V[f.x]))
        return NEXT

    def _op_ld_i_vx(self, f):
        self.mem.write_block(self.regs.I, bytes(self.regs.V[:f.x + 1]))
        return NEXT

    def _op_ld_vx_i(self, f):
        self.regs.V[:f.x + 1] = self.mem.read_block(self.regs.I, f.x + 1)
        return NEXT

    # ══════════════════════════════════════════════
    # Breakpoint API
    # ══════════════════════════════════════════════

    def add_breakpoint(self, addr: int):
        """Add a breakpoint at PC address. run() stops before executing it."""
        self._breakpoints.add(addr & 0xFFFF)

    def remove_breakpoint(self, addr: int):
        self._breakpoints.discard(addr & 0xFFFF)

    def clear_breakpoints(self):
        self._breakpoints.clear()

    # ══════════════════════════════════════════════
    # Trace / Debug
    # ══════════════════════════════════════════════

    def enable_trace(self, enable: bool = True):
        """Enable instruction trace logging."""
        self._trace = enable

    def get_trace(self) -> str:
        return '\n'.join(self._trace_output)

    def clear_trace(self):
        self._trace_output.clear()

    def reset(self):
        """Full emulator reset. The last loaded program is copied back to $200."""
        self.regs.reset()
        self.mem.clear()
        self.mem.load_program(self._program)
        self.display.reset()
        self.keypad.reset()
        self.timers.reset()
        self.fault = None
        self.ticks = 0
        self._breakpoints.clear()
        self._trace_output.clear()
        log.info("Reset (%d-byte program reloaded)", len(self._program))
