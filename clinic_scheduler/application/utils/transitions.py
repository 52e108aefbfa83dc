from __future__ import annotations

from enum import Enum

from clinic_scheduler.domain.entities.appointment import STRICT_TRANSITIONS, AppointmentStatus


class TransitionPolicy(str, Enum):
    PERMISSIVE = "permissive"  # any status may follow any other
    STRICT = "strict"  # pending -> approved/rescheduled/cancelled workflow

    def allows(self, current: AppointmentStatus, new: AppointmentStatus) -> bool:
        if current == new or self is TransitionPolicy.PERMISSIVE:
            return True
        return new in STRICT_TRANSITIONS[current]
