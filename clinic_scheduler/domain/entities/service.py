from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Service:
    id: str
    name: str
    duration_minutes: int
    is_active: bool = True
    description: str | None = None
    price: int | None = None

    def __post_init__(self) -> None:
        if self.duration_minutes <= 0:
            raise ValueError(f"Service {self.id} must have a positive duration")
