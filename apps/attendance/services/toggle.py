"""
Attendance toggle resolution.

Pure functions: they only look at the record handed to them and never
touch the database, so the caller decides how the read is locked.
"""

from datetime import datetime
from typing import Optional

ACTION_CHECKIN = 'checkin'
ACTION_CHECKOUT = 'checkout'
ACTION_NOOP = 'noop'


def resolve_toggle_action(record) -> str:
    """
    Decide what a tap means given today's record for the employee.

    No record -> check in. Open record -> check out. Completed record -> noop.
    """
    if record is None:
        return ACTION_CHECKIN
    if record.time_out is None:
        return ACTION_CHECKOUT
    return ACTION_NOOP


def compute_duration_minutes(time_in: datetime, time_out: Optional[datetime]) -> int:
    """Whole minutes between check-in and check-out, floored and never negative."""
    if time_in is None or time_out is None:
        return 0
    seconds = (time_out - time_in).total_seconds()
    if seconds <= 0:
        return 0
    return int(seconds // 60)
