"""Data models for the remote scheduler."""

from typing import Any

from pydantic import BaseModel, field_validator

NOT_SCHEDULED = "Not scheduled"


class Schedule(BaseModel):
    """Schedule as returned by the scheduler service."""

    id: str = ""
    is_active: bool = False
    next_run_time: str | None = None
    cron_expression: str | None = None
    timezone: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ScheduleExecution(BaseModel):
    """One entry of the scheduler's execution log."""

    id: str = ""
    success: bool = False
    executed_at: str | None = None

    @field_validator("id", mode="before")
    @classmethod
    def coerce_id(cls, v: Any) -> str:
        return "" if v is None else str(v)


class ScheduleInfo(BaseModel):
    """Display mirror of a schedule."""

    id: str
    status: str  # "active" | "paused"
    next_run: str
    cron_expression: str | None = None
    timezone: str | None = None

    @property
    def is_active(self) -> bool:
        return self.status == "active"

    @classmethod
    def from_schedule(cls, schedule: Schedule) -> "ScheduleInfo":
        return cls(
            id=schedule.id,
            status="active" if schedule.is_active else "paused",
            next_run=schedule.next_run_time or NOT_SCHEDULED,
            cron_expression=schedule.cron_expression,
            timezone=schedule.timezone,
        )


class ScheduleRun(BaseModel):
    """Display mirror of one logged execution."""

    id: str
    status: str  # "success" | "failed"
    started_at: str | None = None
    completed_at: str | None = None

    @classmethod
    def from_execution(cls, execution: ScheduleExecution) -> "ScheduleRun":
        # The log only records a single timestamp per execution.
        return cls(
            id=execution.id,
            status="success" if execution.success else "failed",
            started_at=execution.executed_at,
            completed_at=execution.executed_at,
        )
