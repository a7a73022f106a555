# tm_core/appointments/rules.py
"""
Appointment status workflow.

    scheduled   -> completed | canceled | rescheduled
    rescheduled -> completed | canceled | rescheduled
    completed, canceled: terminal
"""

from __future__ import annotations

from tm_core.appointments.models import AppointmentStatus
from tm_core.common.api.exceptions import InvalidStatusTransition

ALLOWED_TRANSITIONS: dict[str, frozenset[str]] = {
    AppointmentStatus.SCHEDULED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED, AppointmentStatus.RESCHEDULED}
    ),
    AppointmentStatus.RESCHEDULED: frozenset(
        {AppointmentStatus.COMPLETED, AppointmentStatus.CANCELED, AppointmentStatus.RESCHEDULED}
    ),
    AppointmentStatus.COMPLETED: frozenset(),
    AppointmentStatus.CANCELED: frozenset(),
}

TERMINAL_STATUSES = frozenset(s for s, targets in ALLOWED_TRANSITIONS.items() if not targets)


def is_terminal(status: str) -> bool:
    return status in TERMINAL_STATUSES


def can_transition(current: str, target: str) -> bool:
    return target in ALLOWED_TRANSITIONS.get(current, frozenset())


def assert_transition(current: str, target: str) -> None:
    if not can_transition(current, target):
        raise InvalidStatusTransition(
            detail=f"Cannot move appointment from '{current}' to '{target}'.",
        )
