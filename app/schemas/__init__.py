# app/schemas/__init__.py
from .common import (
    ApiResponse,
    ok,
    fail
)

from .availability import (
    SlotOut,
    WeeklyRuleIn,
    WeeklyScheduleIn,
    WeeklyRuleOut
)

from .appointment import (
    AppointmentCreate,
    AppointmentOut
)
