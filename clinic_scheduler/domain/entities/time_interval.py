from __future__ import annotations

from dataclasses import dataclass
from datetime import time


@dataclass(frozen=True, order=True)
class TimeInterval:
    start: time
    end: time

    def __post_init__(self) -> None:
        if self.start >= self.end:
            raise ValueError(f"Interval start {self.start} must be before end {self.end}")
