"""
CHIP-8 Emulator — Component Tests

Exercises the building blocks on their own: decoder tables, ALU flag
functions, memory bounds, display geometry, keypad mapping, timers and
the terminal renderer.
"""

import sys
import os
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

import pytest

from chip8_emulator.cpu import alu
from chip8_emulator.cpu.decoder import decode_fields, decode_mnemonic
from chip8_emulator.cpu.flow import NEXT, SKIP, Jump, skip_if
from chip8_emulator.cpu.regs import Registers
from chip8_emulator.errors import IllegalOpcode, MemoryAccessError, StackOverflow
from chip8_emulator.mem.memory import Memory
from chip8_emulator.periph.display import Display
from chip8_emulator.periph.keypad import Keypad, keys_from_chars, map_key
from chip8_emulator.periph.timer import Timers
from chip8_emulator.render import display_to_text


class TestDecoder:

    def test_fields(self):
        f = decode_fields(0xD123)
        assert (f.x, f.y, f.n, f.kk, f.nnn) == (0x1, 0x2, 0x3, 0x23, 0x123)

    def test_primary_table(self):
        cases = [
            (0x1ABC, 'JP'),
            (0x2ABC, 'CALL'),
            (0x3A12, 'SE_VX_KK'),
            (0x4A12, 'SNE_VX_KK'),
            (0x5AB0, 'SE_VX_VY'),
            (0x6A12, 'LD_VX_KK'),
            (0x7A12, 'ADD_VX_KK'),
            (0x9AB0, 'SNE_VX_VY'),
            (0xAABC, 'LD_I'),
            (0xBABC, 'JP_V0'),
            (0xCA12, 'RND'),
            (0xDAB5, 'DRW'),
        ]
        for word, expected in cases:
            assert decode_mnemonic(word, 0x200) == expected, f"{word:04X}"

    def test_family_tables(self):
        cases = [
            (0x00E0, 'CLS'), (0x00EE, 'RET'),
            (0x8AB0, 'LD_VX_VY'), (0x8AB4, 'ADD_VX_VY'), (0x8ABE, 'SHL'),
            (0xEA9E, 'SKP'), (0xEAA1, 'SKNP'),
            (0xFA07, 'LD_VX_DT'), (0xFA0A, 'LD_VX_K'), (0xFA1E, 'ADD_I_VX'),
            (0xFA30, 'LD_HF_VX'), (0xFA33, 'LD_B_VX'), (0xFA65, 'LD_VX_I'),
        ]
        for word, expected in cases:
            assert decode_mnemonic(word, 0x200) == expected, f"{word:04X}"

    def test_unknown_family_member(self):
        with pytest.raises(IllegalOpcode, match=r"\$0123 at \$2A0"):
            decode_mnemonic(0x0123, 0x2A0)


class TestALU:

    def test_add8(self):
        assert alu.add8(0xFF, 0x01) == (0x00, 1)
        assert alu.add8(0x01, 0x01) == (0x02, 0)

    def test_sub8(self):
        assert alu.sub8(0x05, 0x03) == (0x02, 1)
        assert alu.sub8(0x03, 0x05) == (0xFE, 0)

    def test_shifts(self):
        assert alu.shr8(0x03) == (0x01, 1)
        assert alu.shr8(0x02) == (0x01, 0)
        assert alu.shl8(0x80) == (0x00, 1)
        assert alu.shl8(0x41) == (0x82, 0)

    def test_bcd3(self):
        assert alu.bcd3(156) == bytes([1, 5, 6])
        assert alu.bcd3(0) == bytes([0, 0, 0])
        assert alu.bcd3(255) == bytes([2, 5, 5])


class TestFlow:

    def test_actions(self):
        assert NEXT.apply(0x200) == 0x202
        assert SKIP.apply(0x200) == 0x204
        assert Jump(0x2F0).apply(0x200) == 0x2F0

    def test_skip_if(self):
        assert skip_if(True) == SKIP
        assert skip_if(False) == NEXT


class TestRegisters:

    def test_stack_depth(self):
        r = Registers()
        for i in range(16):
            r.push(0x200 + 2 * i)
        with pytest.raises(StackOverflow):
            r.push(0x300)
        assert r.pop() == 0x21E

    def test_register_is_8_bit(self):
        r = Registers()
        with pytest.raises(ValueError):
            r.V[0] = 0x100

    def test_reset(self):
        r = Registers()
        r.V[3] = 9
        r.push(0x202)
        r.PC = 0x400
        r.reset()
        assert r.V[3] == 0
        assert r.SP == 0
        assert r.PC == 0x200


class TestMemory:

    def test_bounds(self):
        mem = Memory()
        mem.write8(0xFFF, 0x12)
        assert mem.read8(0xFFF) == 0x12
        with pytest.raises(MemoryAccessError):
            mem.read8(0x1000)
        with pytest.raises(MemoryAccessError):
            mem.write8(-1, 0)

    def test_regions(self):
        mem = Memory()
        assert mem.region_of(0x000) == 'FONT'
        assert mem.region_of(0x050) == 'RESERVED'
        assert mem.region_of(0x200) == 'PROGRAM'
        assert mem.region_of(0x1000) is None

    def test_clear_keeps_font(self):
        mem = Memory()
        mem.load_program(b'\x12\x00')
        mem.clear()
        assert mem.read16(0x200) == 0
        assert mem.read8(0x000) == 0xF0


class TestDisplay:

    def test_draw_and_collision(self):
        d = Display()
        assert d.draw_sprite(0, 0, b'\xC0') is False
        assert d.draw_sprite(1, 0, b'\x80') is True
        assert d.pixel(0, 0) == 1
        assert d.pixel(1, 0) == 0

    def test_coordinates_wrap_past_screen(self):
        d = Display()
        d.draw_sprite(64 + 3, 32 + 2, b'\x80')
        assert d.pixel(3, 2) == 1

    def test_empty_sprite_still_flags_redraw(self):
        d = Display()
        assert d.draw_sprite(0, 0, b'') is False
        assert d.redraw_pending

    def test_render_text(self):
        d = Display()
        d.draw_sprite(0, 0, b'\x80')
        lines = d.render_text('#', '.').splitlines()
        assert len(lines) == 32
        assert lines[0] == '#' + '.' * 63


class TestKeypad:

    def test_key_map(self):
        assert map_key('7') == 0x0
        assert map_key('U') == 0x4
        assert map_key(';') == 0xB
        assert map_key('/') == 0xF
        assert map_key('q') is None

    def test_keys_from_chars(self):
        snap = keys_from_chars('7/x')
        assert snap[0x0] and snap[0xF]
        assert sum(snap) == 2

    def test_wait_picks_lowest_key(self):
        k = Keypad()
        k.begin_wait(3)
        k.update([False] * 16)
        assert k.resolve_wait() is None
        assert k.waiting
        snap = [False] * 16
        snap[0xA] = snap[0x2] = True
        k.update(snap)
        assert k.resolve_wait() == 0x2
        assert not k.waiting


class TestTimers:

    def test_countdown_and_floor(self):
        t = Timers()
        t.delay = 2
        t.sound = 1
        t.update()
        assert (t.delay, t.sound) == (1, 0)
        t.update()
        t.update()
        assert (t.delay, t.sound) == (0, 0)


class TestRender:

    def test_half_blocks(self):
        d = Display()
        d.draw_sprite(0, 0, b'\x80\x00')   # (0, 0) only
        d.draw_sprite(1, 0, b'\x00\x80')   # (1, 1) only
        d.draw_sprite(2, 0, b'\x80\x80')   # (2, 0) and (2, 1)
        lines = display_to_text(d).splitlines()
        assert len(lines) == 16
        assert all(len(line) == 64 for line in lines)
        assert lines[0][:4] == '▀▄█ '
