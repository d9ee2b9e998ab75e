"""Remote scheduler integration module."""

from taskdigest.scheduler.client import SchedulerClient, SchedulerResponseError
from taskdigest.scheduler.models import (
    NOT_SCHEDULED,
    Schedule,
    ScheduleExecution,
    ScheduleInfo,
    ScheduleRun,
)

__all__ = [
    "NOT_SCHEDULED",
    "SchedulerClient",
    "SchedulerResponseError",
    "Schedule",
    "ScheduleExecution",
    "ScheduleInfo",
    "ScheduleRun",
]
