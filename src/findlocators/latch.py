from __future__ import annotations

from dataclasses import dataclass


@dataclass(slots=True)
class LocatorTestLatch:
    """Admits one locator test at a time; later requests are dropped, not queued."""

    held: bool = False
    dropped: int = 0

    def acquire(self) -> bool:
        if self.held:
            self.dropped += 1
            return False
        self.held = True
        return True

    def release(self) -> None:
        self.held = False
