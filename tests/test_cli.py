from unittest.mock import AsyncMock, patch

import httpx
import pytest
from click.testing import CliRunner

from taskdigest.agent.models import AgentEnvelope
from taskdigest.cli import main
from taskdigest.dashboard.store import HistoryStore


@pytest.fixture
def cli_env(settings, controller):
    """Point the CLI at test settings and a controller with mocked clients."""
    with patch("taskdigest.cli.get_settings", return_value=settings), \
         patch("taskdigest.cli.create_controller", return_value=controller) as mock_create, \
         patch("taskdigest.cli.configure_logging"):
        yield mock_create


def test_run_command(cli_env, controller, mock_agent_client):
    runner = CliRunner()
    result = runner.invoke(main, ["run"])

    assert result.exit_code == 0
    assert "Running email task agent..." in result.output
    assert "Reply to Bob" in result.output
    assert "12 emails processed" in result.output

    mock_agent_client.call_agent.assert_awaited_once()
    mock_agent_client.close.assert_awaited_once()
    assert len(controller.history_store.load()) == 1


def test_run_command_failure(cli_env, mock_agent_client):
    mock_agent_client.call_agent.side_effect = httpx.ConnectError("refused")

    runner = CliRunner()
    result = runner.invoke(main, ["run"])

    assert result.exit_code == 1
    assert "Agent run failed:" in result.output


def test_run_command_unsuccessful_envelope(cli_env, mock_agent_client):
    mock_agent_client.call_agent.return_value = AgentEnvelope(success=False, error="quota")

    runner = CliRunner()
    result = runner.invoke(main, ["run"])

    assert result.exit_code == 1


def test_history_command_empty(cli_env):
    runner = CliRunner()
    result = runner.invoke(main, ["history"])

    assert result.exit_code == 0
    assert "No history available." in result.output


def test_history_command(cli_env, local_store, history_entry_factory):
    HistoryStore(local_store).save(
        [history_entry_factory(index=7, task_count=2), history_entry_factory(index=3)]
    )

    runner = CliRunner()
    result = runner.invoke(main, ["history", "--limit", "1"])

    assert result.exit_code == 0
    assert "Task History" in result.output
    assert "Sep 8" in result.output
    assert "Sep 4" not in result.output


def test_schedule_status(cli_env):
    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "status"])

    assert result.exit_code == 0
    assert "Status: active" in result.output
    assert "Schedule: Daily at 4:30 PM" in result.output
    assert "Timezone: America/New_York" in result.output
    assert "Next run:" in result.output


def test_schedule_status_unavailable(cli_env, mock_scheduler_client):
    mock_scheduler_client.get_schedule.return_value = None

    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "status"])

    assert result.exit_code == 1
    assert "Schedule unavailable." in result.output


def test_schedule_pause(cli_env, mock_scheduler_client):
    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "pause"])

    assert result.exit_code == 0
    mock_scheduler_client.pause_schedule.assert_awaited_once_with("schedule-1")


def test_schedule_pause_failure(cli_env, mock_scheduler_client):
    mock_scheduler_client.pause_schedule.side_effect = httpx.ConnectError("refused")

    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "pause"])

    assert result.exit_code == 1
    assert "Failed to pause schedule." in result.output
    assert "Status: active" not in result.output


def test_schedule_resume_rejected(cli_env, mock_scheduler_client, schedule):
    mock_scheduler_client.get_schedule.return_value = schedule.model_copy(update={"is_active": False})
    mock_scheduler_client.resume_schedule.return_value = False

    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "resume"])

    assert result.exit_code == 1
    assert "Failed to resume schedule." in result.output


def test_schedule_resume_already_active(cli_env, mock_scheduler_client):
    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "resume"])

    assert result.exit_code == 0
    mock_scheduler_client.resume_schedule.assert_not_awaited()
    mock_scheduler_client.pause_schedule.assert_not_awaited()


def test_schedule_trigger(cli_env, mock_scheduler_client):
    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "trigger"])

    assert result.exit_code == 0
    assert "Scheduled run triggered." in result.output
    mock_scheduler_client.trigger_now.assert_awaited_once_with("schedule-1")


def test_schedule_trigger_rejected(cli_env, mock_scheduler_client):
    mock_scheduler_client.trigger_now.return_value = False

    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "trigger"])

    assert result.exit_code == 1
    assert "Failed to trigger scheduled run." in result.output


def test_schedule_runs_limit(cli_env, mock_scheduler_client):
    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "runs", "--limit", "3"])

    assert result.exit_code == 0
    assert "Recent Runs" in result.output
    assert "failed" in result.output

    # The controller is built from a copy of the settings with the new limit
    passed_settings = cli_env.call_args.args[0]
    assert passed_settings.schedule_log_limit == 3


def test_schedule_runs_failure(cli_env, mock_scheduler_client):
    mock_scheduler_client.get_logs.side_effect = httpx.ConnectError("refused")

    runner = CliRunner()
    result = runner.invoke(main, ["schedule", "runs"])

    assert result.exit_code == 1
    assert "Failed to load scheduled runs." in result.output
    assert "No run history available." not in result.output


def test_settings_command_update(cli_env):
    runner = CliRunner()
    result = runner.invoke(main, ["settings", "--email", "me@example.com", "--time", "07:15"])

    assert result.exit_code == 0
    assert "Settings saved." in result.output
    assert "Recipient Email: me@example.com" in result.output
    assert "Scheduled Time: 07:15" in result.output

    result = runner.invoke(main, ["settings"])
    assert "Recipient Email: me@example.com" in result.output


def test_settings_command_invalid_time(cli_env):
    runner = CliRunner()
    result = runner.invoke(main, ["settings", "--time", "25:00"])

    assert result.exit_code == 1
    assert "Invalid time:" in result.output


def test_settings_command_rejects_non_ascii_digits(cli_env):
    runner = CliRunner()
    result = runner.invoke(main, ["settings", "--time", "\u0661\u0662:\u0663\u0660"])

    assert result.exit_code == 1
    assert "Invalid time:" in result.output

    result = runner.invoke(main, ["settings"])
    assert "Scheduled Time: 16:30" in result.output


def test_serve_command(cli_env):
    with patch("taskdigest.cli.DashboardWebServer") as MockServer:
        MockServer.return_value.start = AsyncMock()
        MockServer.return_value.get_url.return_value = "http://127.0.0.1:9000"

        runner = CliRunner()
        result = runner.invoke(main, ["serve", "--port", "9000"])

    assert result.exit_code == 0
    assert "Web Dashboard: http://127.0.0.1:9000" in result.output
    assert MockServer.call_args.kwargs["port"] == 9000
    MockServer.return_value.start.assert_awaited_once()
