"""Data models for agent runs and the tasks they extract."""

import json
from datetime import UTC, datetime
from enum import Enum
from typing import Any

import structlog
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

logger = structlog.get_logger()


class Priority(str, Enum):
    """Priority labels the agent is instructed to use."""

    HIGH = "High"
    MEDIUM = "Medium"
    LOW = "Low"


class SourceEmail(BaseModel):
    """The message a task was extracted from."""

    subject: str | None = None
    sender: str | None = None


class Task(BaseModel):
    """A single action item extracted by the agent."""

    model_config = ConfigDict(populate_by_name=True)

    description: str = ""
    priority: str = ""
    source_email: SourceEmail | None = Field(default=None, alias="sourceEmail")
    deadline: str | None = None

    @field_validator("description", "priority", mode="before")
    @classmethod
    def coerce_text(cls, v: Any) -> str:
        if v is None:
            return ""
        return str(v)

    @field_validator("deadline", mode="before")
    @classmethod
    def blank_deadline_is_none(cls, v: Any) -> str | None:
        if v is None or v == "":
            return None
        return str(v)


def _utc_now_iso() -> str:
    return datetime.now(tz=UTC).isoformat()


def _parse_tasks(raw: Any) -> list[Task]:
    """Validate task items, dropping any the agent returned malformed."""
    if not isinstance(raw, list):
        return []

    tasks = []
    for item in raw:
        if not isinstance(item, dict):
            logger.warning("agent_task_dropped", reason="not_an_object")
            continue
        try:
            tasks.append(Task.model_validate(item))
        except ValidationError as e:
            logger.warning("agent_task_dropped", reason="invalid", error=str(e))
    return tasks


def _parse_count(raw: Any) -> int:
    if isinstance(raw, bool) or not isinstance(raw, int | float):
        return 0
    if raw != raw:  # NaN
        return 0
    return int(raw)


class AgentRunResult(BaseModel):
    """One completed analysis run."""

    model_config = ConfigDict(populate_by_name=True)

    tasks: list[Task] = Field(default_factory=list)
    emails_processed: int = Field(default=0, alias="emailsProcessed")
    generated_at: str = Field(default_factory=_utc_now_iso, alias="generatedAt")
    status: str = "unknown"

    @classmethod
    def from_agent_payload(cls, data: dict[str, Any]) -> "AgentRunResult":
        """Build a run result from the agent's result object.

        Every field is optional on the wire; missing or mistyped values fall
        back to an empty task list, zero emails, the current time and an
        "unknown" status.
        """
        generated_at = data.get("generatedAt")
        status = data.get("status")
        return cls(
            tasks=_parse_tasks(data.get("tasks")),
            emails_processed=_parse_count(data.get("emailsProcessed")),
            generated_at=str(generated_at) if generated_at else _utc_now_iso(),
            status=str(status) if status is not None else "unknown",
        )


class HistoryEntry(BaseModel):
    """Snapshot of a past run, kept in local storage."""

    model_config = ConfigDict(populate_by_name=True)

    date: str
    tasks: list[Task] = Field(default_factory=list)
    emails_processed: int = Field(default=0, alias="emailsProcessed")
    status: str = "unknown"

    @classmethod
    def from_run(cls, result: AgentRunResult) -> "HistoryEntry":
        return cls(
            date=result.generated_at,
            tasks=list(result.tasks),
            emails_processed=result.emails_processed,
            status=result.status,
        )


class AgentEnvelope(BaseModel):
    """Response envelope returned by the agent execution service."""

    success: bool = False
    response: Any = None
    error: Any = None

    def result_payload(self) -> dict[str, Any] | None:
        """Extract the nested result object.

        Text + JSON agents may return the result as a JSON-encoded string;
        that string is decoded. Anything that is not an object yields None.
        """
        if not isinstance(self.response, dict):
            return None

        result = self.response.get("result")
        if isinstance(result, str):
            try:
                result = json.loads(result)
            except json.JSONDecodeError:
                logger.warning("agent_result_not_json", preview=result[:200])
                return None

        return result if isinstance(result, dict) else None
