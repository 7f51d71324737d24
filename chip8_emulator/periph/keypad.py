"""
CHIP-8 Emulator — 16-Key Hex Keypad + Key-Wait State

The driver hands the emulator a full 16-boolean snapshot every tick; the
keypad just stores it. The engine never sees physical key codes.

Key-wait (Fx0A) state machine:
  RUNNING ──Fx0A──> AWAITING (target register recorded)
  AWAITING: each tick scans keys 0..F in order; the first one down is
            returned to the engine and the state goes back to RUNNING.

Physical layout used by the terminal driver (keys 0x0..0xF):

    7 8 9 0        0 1 2 3
    U I O P   →    4 5 6 7
    J K L ;        8 9 A B
    M , . /        C D E F

Keys are level-triggered: a driver that never reports a release makes
the key look held forever. Releasing keys is the driver's job.
"""

import logging
from typing import Iterable, List, Optional, Sequence

from ..config import NUM_KEYS
from ..errors import InvalidKey

log = logging.getLogger(__name__)


KEY_MAP = {
    '7': 0x0, '8': 0x1, '9': 0x2, '0': 0x3,
    'u': 0x4, 'i': 0x5, 'o': 0x6, 'p': 0x7,
    'j': 0x8, 'k': 0x9, 'l': 0xA, ';': 0xB,
    'm': 0xC, ',': 0xD, '.': 0xE, '/': 0xF,
}


def map_key(char: str) -> Optional[int]:
    """Physical character → keypad index, or None if unmapped."""
    return KEY_MAP.get(char.lower())


def keys_from_chars(chars: Iterable[str]) -> List[bool]:
    """Build a 16-key snapshot with every mapped character held down."""
    snapshot = [False] * NUM_KEYS
    for c in chars:
        k = map_key(c)
        if k is not None:
            snapshot[k] = True
    return snapshot


class Keypad:
    """Current key snapshot and Fx0A wait state."""

    def __init__(self):
        self.state: List[bool] = [False] * NUM_KEYS
        self.waiting = False
        self.target_register = 0

    def update(self, snapshot: Sequence[bool]):
        """Replace the whole snapshot. Must be exactly 16 entries."""
        if len(snapshot) != NUM_KEYS:
            raise ValueError(f"Key snapshot must have {NUM_KEYS} entries, got {len(snapshot)}")
        self.state = [bool(k) for k in snapshot]

    def is_pressed(self, key: int) -> bool:
        if not 0 <= key < NUM_KEYS:
            raise InvalidKey(key)
        return self.state[key]

    def first_pressed(self) -> Optional[int]:
        for i, down in enumerate(self.state):
            if down:
                return i
        return None

    # --- Fx0A wait ---

    def begin_wait(self, register: int):
        self.waiting = True
        self.target_register = register
        log.debug("Waiting for key -> V%X", register)

    def resolve_wait(self) -> Optional[int]:
        """Scan for a key while waiting. Returns the key and leaves the wait, or None."""
        key = self.first_pressed()
        if key is not None:
            self.waiting = False
            log.debug("Key %X resolves wait on V%X", key, self.target_register)
        return key

    def reset(self):
        self.state = [False] * NUM_KEYS
        self.waiting = False
        self.target_register = 0
