"""Unit tests for agent data models."""

import json

from taskdigest.agent.models import AgentEnvelope, AgentRunResult, HistoryEntry, Task


class TestTask:
    """Tests for Task model."""

    def test_task_from_wire(self, sample_task_data: dict) -> None:
        """Test building a task from the agent's camelCase fields."""
        task = Task.model_validate(sample_task_data)

        assert task.description == "Reply to Bob"
        assert task.priority == "High"
        assert task.source_email is not None
        assert task.source_email.subject == "Quarterly plan"
        assert task.source_email.sender == "bob@example.com"
        assert task.deadline == "Today, 5:00 PM"

    def test_task_missing_fields(self) -> None:
        """Test that missing and null fields fall back to empty values."""
        task = Task.model_validate({"description": None, "deadline": ""})

        assert task.description == ""
        assert task.priority == ""
        assert task.source_email is None
        assert task.deadline is None

    def test_task_dump_uses_wire_names(self, sample_task_data: dict) -> None:
        """Test that stored tasks keep the agent's field names."""
        dumped = Task.model_validate(sample_task_data).model_dump(by_alias=True)

        assert "sourceEmail" in dumped
        assert dumped["sourceEmail"]["sender"] == "bob@example.com"


class TestAgentRunResult:
    """Tests for AgentRunResult.from_agent_payload."""

    def test_full_payload(self, agent_result_payload: dict) -> None:
        result = AgentRunResult.from_agent_payload(agent_result_payload)

        assert len(result.tasks) == 2
        assert result.emails_processed == 12
        assert result.generated_at == "2026-10-19T13:00:00+00:00"
        assert result.status == "success"

    def test_empty_payload_defaults(self) -> None:
        """Test defaults when the agent omits every field."""
        result = AgentRunResult.from_agent_payload({})

        assert result.tasks == []
        assert result.emails_processed == 0
        assert result.status == "unknown"
        assert result.generated_at  # current time is filled in

    def test_mistyped_fields(self) -> None:
        """Test that wrongly typed values are replaced by defaults."""
        result = AgentRunResult.from_agent_payload(
            {"tasks": "none today", "emailsProcessed": "47", "status": None}
        )

        assert result.tasks == []
        assert result.emails_processed == 0
        assert result.status == "unknown"

    def test_boolean_and_nan_counts(self) -> None:
        assert AgentRunResult.from_agent_payload({"emailsProcessed": True}).emails_processed == 0
        assert AgentRunResult.from_agent_payload({"emailsProcessed": float("nan")}).emails_processed == 0
        assert AgentRunResult.from_agent_payload({"emailsProcessed": 9.0}).emails_processed == 9

    def test_malformed_tasks_dropped(self, sample_task_data: dict) -> None:
        """Test that non-object task items are skipped."""
        result = AgentRunResult.from_agent_payload({"tasks": [sample_task_data, "oops", 3]})

        assert len(result.tasks) == 1
        assert result.tasks[0].description == "Reply to Bob"


class TestHistoryEntry:
    """Tests for HistoryEntry model."""

    def test_from_run(self, agent_result_payload: dict) -> None:
        result = AgentRunResult.from_agent_payload(agent_result_payload)

        entry = HistoryEntry.from_run(result)

        assert entry.date == result.generated_at
        assert entry.tasks == result.tasks
        assert entry.emails_processed == 12
        assert entry.status == "success"

    def test_stored_form(self, agent_result_payload: dict) -> None:
        entry = HistoryEntry.from_run(AgentRunResult.from_agent_payload(agent_result_payload))

        dumped = entry.model_dump(by_alias=True)

        assert dumped["emailsProcessed"] == 12
        assert set(dumped) == {"date", "tasks", "emailsProcessed", "status"}


class TestAgentEnvelope:
    """Tests for AgentEnvelope.result_payload."""

    def test_object_result(self, agent_result_payload: dict) -> None:
        envelope = AgentEnvelope(success=True, response={"result": agent_result_payload})

        assert envelope.result_payload() == agent_result_payload

    def test_json_string_result(self, agent_result_payload: dict) -> None:
        """Test that a JSON-encoded result string is decoded."""
        envelope = AgentEnvelope(
            success=True, response={"result": json.dumps(agent_result_payload)}
        )

        assert envelope.result_payload() == agent_result_payload

    def test_plain_text_result(self) -> None:
        envelope = AgentEnvelope(success=True, response={"result": "All done!"})

        assert envelope.result_payload() is None

    def test_missing_response(self) -> None:
        assert AgentEnvelope(success=True).result_payload() is None
        assert AgentEnvelope(success=True, response={"result": [1, 2]}).result_payload() is None
