"""
CHIP-8 Emulator — Delay and Sound Timers

Two independent 8-bit countdowns. Each running tick decrements both,
floored at zero. A tick spent waiting for a key (Fx0A) does not touch
them.

  delay  read by Fx07, written by Fx15
  sound  written by Fx18; nonzero = tone should be playing
"""


class Timers:
    """Delay + sound countdown pair."""

    def __init__(self):
        self._delay = 0
        self._sound = 0

    @property
    def delay(self) -> int:
        return self._delay

    @delay.setter
    def delay(self, value: int):
        self._delay = value & 0xFF

    @property
    def sound(self) -> int:
        return self._sound

    @sound.setter
    def sound(self, value: int):
        self._sound = value & 0xFF

    @property
    def sound_active(self) -> bool:
        """True while a tone should be audible."""
        return self._sound > 0

    def update(self):
        """Count both timers down by one, never below zero."""
        if self._delay > 0:
            self._delay -= 1
        if self._sound > 0:
            self._sound -= 1

    def reset(self):
        self._delay = 0
        self._sound = 0
