"""Page-level state for the dashboard.

The controller owns everything the page shows: the current run, the rolling
history, the mirrored schedule and its recent executions, and the loading and
connectivity flags. Every user action is a single best-effort remote call.
Failures are logged; agent failures flip the connectivity flag, scheduler
failures leave the previous state on screen.
"""

import asyncio
from datetime import datetime
from typing import Any

import httpx
import structlog

from taskdigest.agent.client import AgentClient, AgentResponseError
from taskdigest.agent.models import AgentRunResult, HistoryEntry, Task
from taskdigest.config import Settings
from taskdigest.dashboard.formatting import (
    cron_to_human,
    format_date,
    format_next_run,
    priority_class,
    resolve_timezone,
    task_count_label,
)
from taskdigest.dashboard.sample_data import sample_history, sample_run
from taskdigest.dashboard.store import HistoryStore, LocalStore, Preferences, PreferencesStore
from taskdigest.scheduler.client import SchedulerClient, SchedulerResponseError
from taskdigest.scheduler.models import NOT_SCHEDULED, ScheduleInfo, ScheduleRun

logger = structlog.get_logger()

CONNECTED = "connected"
DISCONNECTED = "disconnected"

HISTORY_PREVIEW_TASKS = 3

_AGENT_ERRORS = (httpx.HTTPError, AgentResponseError)
_SCHEDULER_ERRORS = (httpx.HTTPError, SchedulerResponseError)


class DashboardController:
    """State container behind the dashboard page."""

    def __init__(
        self,
        agent_client: AgentClient,
        scheduler_client: SchedulerClient,
        history_store: HistoryStore,
        preferences_store: PreferencesStore,
        settings: Settings,
    ):
        """Initialize controller.

        Args:
            agent_client: Client for the remote agent
            scheduler_client: Client for the remote scheduler
            history_store: Persistent run history
            preferences_store: Persistent settings dialog fields
            settings: Application settings
        """
        self.agent_client = agent_client
        self.scheduler_client = scheduler_client
        self.history_store = history_store
        self.preferences_store = preferences_store
        self.settings = settings
        self.display_tz = resolve_timezone(settings.display_timezone)

        self.sample_data_mode = False
        self.current_run: AgentRunResult | None = None
        self.history: list[HistoryEntry] = []
        self.expanded_tasks: set[int] = set()
        self.loading = False

        self.schedule_info: ScheduleInfo | None = None
        self.schedule_runs: list[ScheduleRun] = []
        self.schedule_loading = False

        self.connection_status = CONNECTED

        self._follow_ups: set[asyncio.Task] = set()

    # --- Loading ---

    async def initialize(self) -> None:
        """Load schedule state and stored history for a fresh page."""
        await self.load_schedule_info()
        await self.load_schedule_runs()
        self.load_history()

    def load_history(self) -> None:
        self.history = self.history_store.load()
        logger.info("history_loaded", entries=len(self.history))

    async def load_schedule_info(self) -> bool:
        """Mirror the remote schedule. On failure the previous state is kept.

        Returns:
            False if the scheduler could not be reached
        """
        try:
            schedule = await self.scheduler_client.get_schedule(self.settings.schedule_id)
        except _SCHEDULER_ERRORS as e:
            logger.error("schedule_info_load_failed", schedule_id=self.settings.schedule_id, error=str(e))
            return False

        if schedule is not None:
            self.schedule_info = ScheduleInfo.from_schedule(schedule)
        return True

    async def load_schedule_runs(self) -> bool:
        """Mirror the most recent executions. On failure the previous list is kept.

        Returns:
            False if the scheduler could not be reached
        """
        try:
            executions = await self.scheduler_client.get_logs(
                self.settings.schedule_id, limit=self.settings.schedule_log_limit
            )
        except _SCHEDULER_ERRORS as e:
            logger.error("schedule_runs_load_failed", schedule_id=self.settings.schedule_id, error=str(e))
            return False

        self.schedule_runs = [ScheduleRun.from_execution(ex) for ex in executions]
        return True

    # --- Actions ---

    def set_sample_data_mode(self, enabled: bool) -> None:
        """Swap demonstration content in or out.

        Turning sample data off clears the displayed run and history; the
        stored history is not touched.
        """
        self.sample_data_mode = enabled
        self.expanded_tasks.clear()
        if enabled:
            self.current_run = sample_run()
            self.history = sample_history()
        else:
            self.current_run = None
            self.history = []
        logger.info("sample_data_mode_changed", enabled=enabled)

    async def run_now(self) -> bool:
        """Run the agent once and record the result.

        Does nothing while another run is in flight.

        Returns:
            True if the agent returned a usable result
        """
        if self.loading:
            logger.info("agent_run_in_progress")
            return False

        self.loading = True
        try:
            envelope = await self.agent_client.call_agent(
                self.settings.agent_message,
                self.settings.agent_id,
                user_id=self.settings.agent_user_id,
            )
            payload = envelope.result_payload() if envelope.success else None
            if payload is None:
                logger.warning("agent_run_unsuccessful", error=envelope.error)
                self.connection_status = DISCONNECTED
                return False

            result = AgentRunResult.from_agent_payload(payload)
            self.current_run = result
            self.expanded_tasks.clear()

            self.history = [HistoryEntry.from_run(result), *self.history][: self.settings.history_limit]
            try:
                self.history_store.save(self.history)
            except OSError as e:
                # The run stays on screen even if it could not be stored
                logger.error("history_save_failed", error=str(e))

            self.connection_status = CONNECTED
            logger.info(
                "agent_run_recorded",
                tasks=len(result.tasks),
                emails_processed=result.emails_processed,
                status=result.status,
            )
            return True

        except _AGENT_ERRORS as e:
            logger.error("agent_run_failed", error=str(e))
            self.connection_status = DISCONNECTED
            return False
        finally:
            self.loading = False

    async def trigger_schedule_now(self) -> bool:
        """Trigger the schedule and refresh once the run has had time to start.

        Returns:
            True if the scheduler accepted the trigger
        """
        if self.schedule_loading:
            logger.info("schedule_action_in_progress", action="trigger")
            return False

        self.schedule_loading = True
        try:
            triggered = await self.scheduler_client.trigger_now(self.settings.schedule_id)
        except _SCHEDULER_ERRORS as e:
            logger.error("schedule_trigger_failed", schedule_id=self.settings.schedule_id, error=str(e))
            return False
        finally:
            self.schedule_loading = False

        if triggered:
            self._start_follow_up()
        return triggered

    def _start_follow_up(self) -> None:
        task = asyncio.create_task(self._refresh_after_trigger())
        self._follow_ups.add(task)
        task.add_done_callback(self._follow_ups.discard)

    async def _refresh_after_trigger(self) -> None:
        await asyncio.sleep(self.settings.trigger_refresh_delay_seconds)
        await self.load_schedule_runs()
        await self.run_now()

    async def toggle_schedule(self) -> bool:
        """Pause an active schedule or resume a paused one, then re-fetch it.

        Returns:
            True if the scheduler accepted the change
        """
        if self.schedule_info is None or self.schedule_loading:
            return False

        self.schedule_loading = True
        try:
            if self.schedule_info.is_active:
                changed = await self.scheduler_client.pause_schedule(self.settings.schedule_id)
            else:
                changed = await self.scheduler_client.resume_schedule(self.settings.schedule_id)
            await self.load_schedule_info()
            return changed
        except _SCHEDULER_ERRORS as e:
            logger.error("schedule_toggle_failed", schedule_id=self.settings.schedule_id, error=str(e))
            return False
        finally:
            self.schedule_loading = False

    def toggle_task_expanded(self, index: int) -> bool:
        """Expand or collapse a task card.

        Returns:
            Whether the card is now expanded

        Raises:
            IndexError: If there is no task at index
        """
        if not 0 <= index < len(self.display_tasks):
            raise IndexError(f"No task at index {index}")

        if index in self.expanded_tasks:
            self.expanded_tasks.discard(index)
            return False
        self.expanded_tasks.add(index)
        return True

    def get_preferences(self) -> Preferences:
        return self.preferences_store.load()

    def save_preferences(self, recipient_email: str, scheduled_time: str) -> Preferences:
        preferences = Preferences(recipient_email=recipient_email, scheduled_time=scheduled_time)
        self.preferences_store.save(preferences)
        return preferences

    async def aclose(self) -> None:
        """Cancel pending follow-ups and close both clients."""
        for task in list(self._follow_ups):
            task.cancel()
        if self._follow_ups:
            await asyncio.gather(*self._follow_ups, return_exceptions=True)
        await self.agent_client.close()
        await self.scheduler_client.close()

    # --- View model ---

    @property
    def display_tasks(self) -> list[Task]:
        return self.current_run.tasks if self.current_run else []

    @property
    def display_status(self) -> str:
        return self.current_run.status if self.current_run else "ready"

    def snapshot(self, now: datetime | None = None) -> dict[str, Any]:
        """Build the JSON view model the page renders.

        Args:
            now: Reference time for countdowns (defaults to the current time)
        """
        tz = self.display_tz
        run = self.current_run
        info = self.schedule_info
        status = self.display_status

        return {
            "sample_data_mode": self.sample_data_mode,
            "connection_status": self.connection_status,
            "loading": self.loading,
            "schedule_loading": self.schedule_loading,
            "overview": {
                "next_run": format_next_run(info.next_run, tz, now) if info else NOT_SCHEDULED,
                "schedule_description": (
                    cron_to_human(info.cron_expression) if info and info.cron_expression else None
                ),
                "last_run_status": "Success" if status == "success" else "Ready",
                "last_run_ok": status == "success",
                "emails_processed": run.emails_processed if run else 0,
            },
            "tasks": {
                "has_run": run is not None,
                "count_label": task_count_label(len(run.tasks)) if run else None,
                "description": (
                    f"Generated {format_date(run.generated_at, tz)}" if run else "No tasks generated yet"
                ),
                "empty_hint": (
                    "Toggle off sample data to run live agent"
                    if self.sample_data_mode
                    else 'Click "Run Now" to analyze emails or toggle on Sample Data'
                ),
                "items": [self._task_card(i, task) for i, task in enumerate(self.display_tasks)],
            },
            "history": [self._history_entry(entry) for entry in self.history],
            "schedule": self._schedule_panel(),
            "runs": [self._run_row(run_) for run_ in self.schedule_runs],
            "actions": {
                "run_label": "Running..." if self.loading else "Run Now",
                "run_disabled": self.loading,
                "toggle_visible": info is not None,
                "toggle_label": "Pause Schedule" if info and info.is_active else "Resume Schedule",
                "toggle_disabled": self.schedule_loading,
                "trigger_disabled": self.schedule_loading or self.loading,
            },
            "agent_info": {
                "name": "Email Task Agent",
                "type": "Text + JSON",
                "status": "Processing" if self.loading else "Ready",
            },
        }

    def _task_card(self, index: int, task: Task) -> dict[str, Any]:
        source = task.source_email
        subject = source.subject if source else None
        sender = source.sender if source else None
        return {
            "index": index,
            "description": task.description,
            "priority": task.priority,
            "priority_class": priority_class(task.priority),
            "subject": subject or "No subject",
            "sender": sender or "Unknown",
            "source": f"{subject or 'N/A'} ({sender or 'N/A'})",
            "deadline": task.deadline,
            "expanded": index in self.expanded_tasks,
        }

    def _history_entry(self, entry: HistoryEntry) -> dict[str, Any]:
        hidden = len(entry.tasks) - HISTORY_PREVIEW_TASKS
        return {
            "date": format_date(entry.date, self.display_tz),
            "emails_label": f"{entry.emails_processed} emails",
            "status": entry.status,
            "status_ok": entry.status == "success",
            "tasks": [
                {"description": t.description, "priority": t.priority}
                for t in entry.tasks[:HISTORY_PREVIEW_TASKS]
            ],
            "more_label": f"+{hidden} more tasks" if hidden > 0 else None,
        }

    def _schedule_panel(self) -> dict[str, Any] | None:
        info = self.schedule_info
        if info is None:
            return None
        return {
            "id": info.id,
            "status": info.status,
            "is_active": info.is_active,
            "schedule": cron_to_human(info.cron_expression) if info.cron_expression else "Not set",
            "timezone": info.timezone or "Not set",
            "next_run": format_date(info.next_run, self.display_tz) if info.next_run else NOT_SCHEDULED,
        }

    def _run_row(self, run: ScheduleRun) -> dict[str, Any]:
        if run.status in ("success", "completed"):
            badge = "default"
        elif run.status == "failed":
            badge = "destructive"
        else:
            badge = "outline"
        return {
            "id": run.id,
            "started": format_date(run.started_at, self.display_tz) if run.started_at else "Unknown time",
            "completed": (
                f"Completed: {format_date(run.completed_at, self.display_tz)}" if run.completed_at else None
            ),
            "status": run.status or "unknown",
            "badge": badge,
        }


def create_controller(settings: Settings) -> DashboardController:
    """Wire a controller to real clients and local storage."""
    store = LocalStore(settings.storage_dir)
    return DashboardController(
        agent_client=AgentClient(
            settings.agent_api_url,
            api_key=settings.agent_api_key,
            timeout=settings.request_timeout_seconds,
        ),
        scheduler_client=SchedulerClient(
            settings.scheduler_api_url,
            api_key=settings.scheduler_api_key,
            timeout=settings.request_timeout_seconds,
        ),
        history_store=HistoryStore(store, limit=settings.history_limit),
        preferences_store=PreferencesStore(store, default_scheduled_time=settings.default_scheduled_time),
        settings=settings,
    )
