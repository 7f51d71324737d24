#!/usr/bin/env python3
"""
chip8kit — CHIP-8 ROM Toolkit
=============================

One CLI for everything:
    chip8kit run   — Run a ROM headless for N ticks, render the screen
    chip8kit info  — ROM summary (size, MD5, fit check, first words)

Usage:
    python chip8kit.py <command> [options]
    python chip8kit.py --help
    python chip8kit.py <command> --help

Examples:
    python chip8kit.py run PONG --ticks 600
    python chip8kit.py run PONG --live --realtime --keys u
    python chip8kit.py run TEST.ch8 --trace --break 0x228
    python chip8kit.py info PONG
"""

import argparse
import hashlib
import logging
import sys
from pathlib import Path

from rich.console import Console
from rich.live import Live

from chip8_emulator import Chip8Emulator, EmulatorConfig, StopReason, Chip8Error, __version__
from chip8_emulator.config import MAX_PROGRAM_SIZE, PROGRAM_START
from chip8_emulator.log_setup import setup_logging
from chip8_emulator.periph.keypad import keys_from_chars
from chip8_emulator.render import TerminalRenderer


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="chip8kit",
        description="CHIP-8 toolkit — run and inspect ROM images",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""commands:
  run        Run a ROM for a number of ticks and show the screen
  info       Identify and summarize a ROM file

keypad (physical → CHIP-8):
  7 8 9 0    0 1 2 3
  U I O P    4 5 6 7
  J K L ;    8 9 A B
  M , . /    C D E F
""",
    )
    parser.add_argument("--version", action="version", version=f"chip8kit {__version__}")
    parser.add_argument("-v", "--verbose", action="store_true",
                        help="Show INFO/DEBUG log messages on the console")
    parser.add_argument("--log-dir", default=None,
                        help="Also write a full DEBUG log file into this directory")
    sub = parser.add_subparsers(dest="command", metavar="command")

    # ── run ──────────────────────────────────────────────────────────────
    p_run = sub.add_parser("run", help="Run a ROM headless and render the screen")
    p_run.add_argument("rom", help="ROM image (raw bytes, loaded at $200)")
    p_run.add_argument("--ticks", type=int, default=600,
                       help="Number of ticks to run (default: 600 = 10 s at 60 Hz)")
    p_run.add_argument("--seed", type=int, default=None,
                       help="Seed for the Cxkk random source")
    p_run.add_argument("--keys", default="",
                       help="Physical keys held down for the whole run, e.g. 'u' or '7p'")
    p_run.add_argument("--break", dest="breakpoints", action="append", default=[],
                       type=lambda x: int(x, 0), metavar="ADDR",
                       help="Stop before executing ADDR (repeatable, hex with 0x)")
    p_run.add_argument("--realtime", action="store_true",
                       help="Pace ticks at 60 Hz instead of running flat out")
    p_run.add_argument("--live", action="store_true",
                       help="Repaint the screen while running")
    p_run.add_argument("--trace", action="store_true",
                       help="Print the instruction trace after the run")

    # ── info ─────────────────────────────────────────────────────────────
    p_info = sub.add_parser("info", help="Identify and summarize a ROM file")
    p_info.add_argument("rom", help="ROM image")
    p_info.add_argument("--words", type=int, default=8,
                        help="Number of leading opcode words to show (default: 8)")

    return parser


def main(argv=None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if not args.command:
        parser.print_help()
        return 0

    setup_logging(
        "chip8_emulator",
        console_level=logging.DEBUG if args.verbose else logging.WARNING,
        log_dir=Path(args.log_dir) if args.log_dir else None,
    )

    handler = COMMANDS[args.command]
    try:
        return handler(args)
    except (Chip8Error, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


# ═════════════════════════════════════════════════════════════════════════════
# COMMAND IMPLEMENTATIONS
# ═════════════════════════════════════════════════════════════════════════════

# ── run ──────────────────────────────────────────────────────────────────
def cmd_run(args) -> int:
    config = EmulatorConfig(seed=args.seed, trace=args.trace)
    emu = Chip8Emulator(config)
    emu.load_rom(args.rom)
    for addr in args.breakpoints:
        emu.add_breakpoint(addr)

    keys = keys_from_chars(args.keys)
    console = Console()
    renderer = TerminalRenderer(console, title=Path(args.rom).name)

    if args.live:
        with Live(renderer.panel(emu), console=console, auto_refresh=False) as live:
            def repaint(e):
                if e.redraw_pending:
                    live.update(renderer.panel(e), refresh=True)
            reason = emu.run(args.ticks, keys=keys, on_tick=repaint,
                             realtime=args.realtime)
    else:
        reason = emu.run(args.ticks, keys=keys, realtime=args.realtime)
        renderer.draw(emu)

    if args.trace:
        console.print(emu.get_trace(), markup=False, highlight=False)

    print(f"Stopped: {reason.value} after {emu.ticks} ticks at PC=${emu.regs.PC:03X}")
    if emu.fault is not None:
        print(f"Fault: {emu.fault}", file=sys.stderr)
    return 1 if reason in (StopReason.ILLEGAL, StopReason.ERROR) else 0


# ── info ─────────────────────────────────────────────────────────────────
def cmd_info(args) -> int:
    data = Path(args.rom).read_bytes()
    size = len(data)
    md5 = hashlib.md5(data).hexdigest()

    print(f"File:     {args.rom}")
    print(f"Size:     {size} bytes")
    print(f"MD5:      {md5}")
    if size > MAX_PROGRAM_SIZE:
        print(f"Fit:      TOO LARGE ({size - MAX_PROGRAM_SIZE} bytes over {MAX_PROGRAM_SIZE})")
    else:
        used = 100.0 * size / MAX_PROGRAM_SIZE
        print(f"Fit:      OK, ${PROGRAM_START:03X}-${PROGRAM_START + max(size, 1) - 1:03X} "
              f"({used:.1f}% of program space)")

    words = []
    for i in range(0, min(size - 1, args.words * 2), 2):
        words.append(f"{(data[i] << 8) | data[i + 1]:04X}")
    if words:
        print(f"Words:    {' '.join(words)}")
    if size % 2:
        print("Note:     odd length, last byte is not a full instruction word")
    return 1 if size > MAX_PROGRAM_SIZE else 0


COMMANDS = {
    "run":  cmd_run,
    "info": cmd_info,
}


if __name__ == "__main__":
    sys.exit(main())
