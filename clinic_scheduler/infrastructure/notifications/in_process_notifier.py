from __future__ import annotations

import logging
import threading

from clinic_scheduler.application.ports.change_notifier import ChangeListener, ChangeNotifierPort
from clinic_scheduler.application.utils.time_format import format_date
from clinic_scheduler.domain.entities.availability_change import AvailabilityChange


class InProcessChangeNotifier(ChangeNotifierPort):
    """
    Fan-out of availability changes to listeners in this process, e.g. a
    calendar view that refreshes a date. Listeners run synchronously after
    the commit; a failing listener is logged and never undoes the commit.
    """

    def __init__(self) -> None:
        self._listeners: list[ChangeListener] = []
        self._lock = threading.Lock()
        self._logger = logging.getLogger(__name__)

    def subscribe(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener not in self._listeners:
                self._listeners.append(listener)

    def unsubscribe(self, listener: ChangeListener) -> None:
        with self._lock:
            if listener in self._listeners:
                self._listeners.remove(listener)

    def publish(self, change: AvailabilityChange) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(change)
            except Exception:
                self._logger.exception(
                    "Availability listener failed",
                    extra={
                        "appointment_id": change.appointment_id,
                        "date": format_date(change.appointment_date),
                        "reason": change.reason,
                    },
                )
