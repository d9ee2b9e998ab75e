"""Remote agent integration module."""

from taskdigest.agent.client import AgentClient, AgentResponseError
from taskdigest.agent.models import (
    AgentEnvelope,
    AgentRunResult,
    HistoryEntry,
    Priority,
    SourceEmail,
    Task,
)

__all__ = [
    "AgentClient",
    "AgentResponseError",
    "AgentEnvelope",
    "AgentRunResult",
    "HistoryEntry",
    "Priority",
    "SourceEmail",
    "Task",
]
