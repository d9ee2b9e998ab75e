"""Pytest configuration and shared fixtures."""

from pathlib import Path
from unittest.mock import AsyncMock

import pytest

from taskdigest.agent.client import AgentClient
from taskdigest.agent.models import AgentEnvelope, HistoryEntry, SourceEmail, Task
from taskdigest.config import Settings
from taskdigest.dashboard.controller import DashboardController
from taskdigest.dashboard.store import HistoryStore, LocalStore, PreferencesStore
from taskdigest.scheduler.client import SchedulerClient
from taskdigest.scheduler.models import Schedule, ScheduleExecution


@pytest.fixture
def settings(tmp_path: Path) -> Settings:
    """Settings isolated from the environment's .env file."""
    return Settings(
        _env_file=None,
        storage_dir=str(tmp_path / "storage"),
        display_timezone="UTC",
        trigger_refresh_delay_seconds=0,
        agent_api_url="http://agent.test",
        scheduler_api_url="http://scheduler.test",
        agent_id="agent-1",
        schedule_id="schedule-1",
    )


@pytest.fixture
def local_store(settings: Settings) -> LocalStore:
    return LocalStore(settings.storage_dir)


@pytest.fixture
def sample_task_data() -> dict:
    """Raw task as returned by the agent."""
    return {
        "description": "Reply to Bob",
        "priority": "High",
        "sourceEmail": {"subject": "Quarterly plan", "sender": "bob@example.com"},
        "deadline": "Today, 5:00 PM",
    }


@pytest.fixture
def agent_result_payload(sample_task_data: dict) -> dict:
    """Raw result object nested in the agent envelope."""
    return {
        "tasks": [
            sample_task_data,
            {
                "description": "File expenses",
                "priority": "Low",
                "sourceEmail": {"subject": "Expenses", "sender": "ap@example.com"},
            },
        ],
        "emailsProcessed": 12,
        "generatedAt": "2026-10-19T13:00:00+00:00",
        "status": "success",
    }


@pytest.fixture
def agent_envelope(agent_result_payload: dict) -> AgentEnvelope:
    return AgentEnvelope(success=True, response={"result": agent_result_payload})


@pytest.fixture
def schedule() -> Schedule:
    return Schedule(
        id="schedule-1",
        is_active=True,
        next_run_time="2026-10-19T20:30:00Z",
        cron_expression="30 16 * * *",
        timezone="America/New_York",
    )


@pytest.fixture
def executions() -> list[ScheduleExecution]:
    return [
        ScheduleExecution(id="run-2", success=True, executed_at="2026-10-18T20:30:00Z"),
        ScheduleExecution(id="run-1", success=False, executed_at="2026-10-17T20:30:00Z"),
    ]


@pytest.fixture
def mock_agent_client(agent_envelope: AgentEnvelope) -> AsyncMock:
    client = AsyncMock(spec=AgentClient)
    client.call_agent.return_value = agent_envelope
    return client


@pytest.fixture
def mock_scheduler_client(schedule: Schedule, executions: list[ScheduleExecution]) -> AsyncMock:
    client = AsyncMock(spec=SchedulerClient)
    client.get_schedule.return_value = schedule
    client.get_logs.return_value = executions
    client.pause_schedule.return_value = True
    client.resume_schedule.return_value = True
    client.trigger_now.return_value = True
    return client


@pytest.fixture
def controller(
    settings: Settings,
    local_store: LocalStore,
    mock_agent_client: AsyncMock,
    mock_scheduler_client: AsyncMock,
) -> DashboardController:
    return DashboardController(
        agent_client=mock_agent_client,
        scheduler_client=mock_scheduler_client,
        history_store=HistoryStore(local_store, limit=settings.history_limit),
        preferences_store=PreferencesStore(local_store),
        settings=settings,
    )


@pytest.fixture
def history_entry_factory():
    """Factory to create history entries."""

    def _create_entry(index: int = 0, task_count: int = 1, **kwargs) -> HistoryEntry:
        defaults = {
            "date": f"2026-09-{(index % 28) + 1:02d}T12:00:00+00:00",
            "tasks": [
                Task(
                    description=f"Task {index}-{n}",
                    priority="Medium",
                    source_email=SourceEmail(subject="Subject", sender="someone@example.com"),
                )
                for n in range(task_count)
            ],
            "emails_processed": index,
            "status": "success",
        }
        defaults.update(kwargs)
        return HistoryEntry(**defaults)

    return _create_entry
