from __future__ import annotations

from datetime import date
from typing import Optional

from ..core.enums import AttendanceAction, AttendanceState
from ..core.exceptions import InvalidTransition

# Guarded transition table. Anything not listed is rejected; a revoked
# check-out therefore blocks a second check-out for the rest of the day.
TRANSITIONS: dict[tuple[AttendanceState, AttendanceAction], AttendanceState] = {
    (AttendanceState.NO_RECORD, AttendanceAction.CHECK_IN): AttendanceState.CHECKED_IN,
    (AttendanceState.AWAITING_CHECK_IN, AttendanceAction.CHECK_IN): AttendanceState.CHECKED_IN,
    (AttendanceState.CHECKED_IN, AttendanceAction.UNDO_CHECK_IN): AttendanceState.NO_RECORD,
    (AttendanceState.CHECKED_OUT, AttendanceAction.UNDO_CHECK_IN): AttendanceState.NO_RECORD,
    (AttendanceState.CHECK_OUT_REVOKED, AttendanceAction.UNDO_CHECK_IN): AttendanceState.NO_RECORD,
    (AttendanceState.CHECKED_IN, AttendanceAction.CHECK_OUT): AttendanceState.CHECKED_OUT,
    (AttendanceState.CHECKED_OUT, AttendanceAction.UNDO_CHECK_OUT): AttendanceState.CHECK_OUT_REVOKED,
}

_REJECTIONS = {
    AttendanceAction.CHECK_IN: "Check-in not allowed (already checked in or undo used)",
    AttendanceAction.UNDO_CHECK_IN: "Undo not allowed",
    AttendanceAction.CHECK_OUT: "Check-out not allowed (already checked out or undo used)",
    AttendanceAction.UNDO_CHECK_OUT: "Undo not allowed",
}


def is_allowed(state: AttendanceState, action: AttendanceAction) -> bool:
    return (state, action) in TRANSITIONS


def transition(
    state: AttendanceState,
    action: AttendanceAction,
    *,
    employee_id: Optional[int] = None,
    day: Optional[date] = None,
) -> AttendanceState:
    try:
        return TRANSITIONS[(state, action)]
    except KeyError:
        raise InvalidTransition(_REJECTIONS[action], employee_id=employee_id, day=day) from None
