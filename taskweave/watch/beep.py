"""Audible completion signals for watch-triggered runs."""

import sys


class Beeper:
    """Terminal bell: one beep on success, three on failure."""

    def success(self) -> None:
        sys.stdout.write("\x07")
        sys.stdout.flush()

    def failure(self) -> None:
        sys.stderr.write("\x07\x07\x07")
        sys.stderr.flush()

