from .attendance_service import AttendanceService
from .device_service import DeviceService
from .toggle import (
    ACTION_CHECKIN,
    ACTION_CHECKOUT,
    ACTION_NOOP,
    compute_duration_minutes,
    resolve_toggle_action,
)

__all__ = [
    'AttendanceService',
    'DeviceService',
    'ACTION_CHECKIN',
    'ACTION_CHECKOUT',
    'ACTION_NOOP',
    'compute_duration_minutes',
    'resolve_toggle_action',
]
