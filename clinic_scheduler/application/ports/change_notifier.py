from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Callable

from clinic_scheduler.domain.entities.availability_change import AvailabilityChange

ChangeListener = Callable[[AvailabilityChange], None]


class ChangeNotifierPort(ABC):
    @abstractmethod
    def publish(self, change: AvailabilityChange) -> None:
        """Announce that availability on change.appointment_date may have changed."""
        raise NotImplementedError

    @abstractmethod
    def subscribe(self, listener: ChangeListener) -> None:
        raise NotImplementedError

    @abstractmethod
    def unsubscribe(self, listener: ChangeListener) -> None:
        raise NotImplementedError
