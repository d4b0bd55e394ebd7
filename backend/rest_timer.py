"""Countdown used between sets.

The timer is advisory only: it never blocks set validation.  The host
drives it by calling :meth:`RestTimer.tick` once per second.
"""

from __future__ import annotations

IDLE = "idle"
RUNNING = "running"
PAUSED = "paused"


class RestTimer:
    """Rest countdown with pause, adjustment and early dismissal."""

    def __init__(self):
        self.duration = 0
        self.remaining = 0
        self.is_resting = False
        self.is_paused = False

    @property
    def state(self) -> str:
        if not self.is_resting:
            return IDLE
        return PAUSED if self.is_paused else RUNNING

    @property
    def fraction_remaining(self) -> float:
        """Return the share of the rest period still to go (0..1)."""
        if not self.is_resting or self.duration <= 0:
            return 0.0
        return min(1.0, self.remaining / self.duration)

    def start(self, duration: int) -> bool:
        """Start a rest of ``duration`` seconds; ignored if not positive."""
        if duration <= 0:
            return False
        self.duration = int(duration)
        self.remaining = int(duration)
        self.is_resting = True
        self.is_paused = False
        return True

    def tick(self) -> None:
        """Advance the countdown by one second."""
        if not self.is_resting or self.is_paused:
            return
        if self.remaining > 0:
            self.remaining -= 1
        self._settle()

    def pause(self) -> None:
        if self.is_resting:
            self.is_paused = True

    def resume(self) -> None:
        if self.is_resting:
            self.is_paused = False

    def toggle_pause(self) -> None:
        if self.is_paused:
            self.resume()
        else:
            self.pause()

    def adjust(self, seconds: int) -> None:
        """Add (or remove, if negative) ``seconds`` from the countdown."""
        if not self.is_resting:
            return
        self.remaining = max(0, self.remaining + int(seconds))
        self._settle()

    def reset(self) -> None:
        """Restart the countdown from the original duration."""
        if self.is_resting:
            self.remaining = self.duration

    def dismiss(self) -> None:
        """Hide the timer, leaving the remaining time untouched."""
        self.is_resting = False
        self.is_paused = False

    def skip(self) -> None:
        """End the rest immediately."""
        self.dismiss()
        self.remaining = 0

    def _settle(self) -> None:
        # reaching zero ends the rest silently, paused or not
        if self.remaining == 0:
            self.is_resting = False
            self.is_paused = False
