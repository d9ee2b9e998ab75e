"""HTTP client for the remote scheduler service.

Cron evaluation, execution history and pause/resume state all live in the
scheduler. This client only queries and controls a schedule by id.
"""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from taskdigest.scheduler.models import Schedule, ScheduleExecution

logger = structlog.get_logger()


class SchedulerResponseError(Exception):
    """Raised when the scheduler replies with a body that is not an envelope."""


class SchedulerClient:
    """HTTP client for scheduler API communication."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize scheduler client.

        Args:
            base_url: Scheduler service base URL
            api_key: API key sent as the x-api-key header
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = {}
        if api_key:
            headers["x-api-key"] = api_key
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "SchedulerClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def _request(self, method: str, path: str, **kwargs: Any) -> dict[str, Any]:
        """Send a request and decode the JSON envelope.

        Raises:
            httpx.HTTPError: If the request fails or returns a non-2xx status
            SchedulerResponseError: If the body is not a JSON object
        """
        url = f"{self.base_url}{path}"
        try:
            response = await self.client.request(method, url, **kwargs)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error("scheduler_request_failed", method=method, url=url, error=str(e))
            raise

        try:
            data = response.json()
        except ValueError as e:
            logger.error("scheduler_response_not_json", url=url, error=str(e))
            raise SchedulerResponseError(f"Scheduler response from {path} is not JSON") from e

        if not isinstance(data, dict):
            logger.error("scheduler_response_not_object", url=url)
            raise SchedulerResponseError(f"Scheduler response from {path} is not an object")

        return data

    async def get_schedule(self, schedule_id: str) -> Schedule | None:
        """Fetch a schedule by id.

        Returns:
            The schedule, or None if the scheduler reported no success
        """
        data = await self._request("GET", f"/schedules/{schedule_id}")
        raw = data.get("schedule")
        if not data.get("success") or not isinstance(raw, dict):
            logger.warning("schedule_not_returned", schedule_id=schedule_id)
            return None

        try:
            return Schedule.model_validate(raw)
        except ValidationError as e:
            logger.error("schedule_invalid", schedule_id=schedule_id, error=str(e))
            raise SchedulerResponseError(f"Schedule {schedule_id} is malformed") from e

    async def pause_schedule(self, schedule_id: str) -> bool:
        data = await self._request("POST", f"/schedules/{schedule_id}/pause")
        logger.info("schedule_paused", schedule_id=schedule_id, success=bool(data.get("success")))
        return bool(data.get("success"))

    async def resume_schedule(self, schedule_id: str) -> bool:
        data = await self._request("POST", f"/schedules/{schedule_id}/resume")
        logger.info("schedule_resumed", schedule_id=schedule_id, success=bool(data.get("success")))
        return bool(data.get("success"))

    async def trigger_now(self, schedule_id: str) -> bool:
        """Ask the scheduler to run the schedule immediately."""
        data = await self._request("POST", f"/schedules/{schedule_id}/trigger")
        logger.info("schedule_triggered", schedule_id=schedule_id, success=bool(data.get("success")))
        return bool(data.get("success"))

    async def get_logs(self, schedule_id: str, limit: int = 10) -> list[ScheduleExecution]:
        """Fetch the most recent executions of a schedule.

        Args:
            schedule_id: Schedule identifier
            limit: Maximum number of executions to return

        Returns:
            Executions newest first, or an empty list if none were returned
        """
        data = await self._request(
            "GET", f"/schedules/{schedule_id}/logs", params={"limit": limit}
        )
        raw = data.get("executions")
        if not data.get("success") or not isinstance(raw, list):
            return []

        executions = []
        for item in raw:
            if not isinstance(item, dict):
                continue
            try:
                executions.append(ScheduleExecution.model_validate(item))
            except ValidationError as e:
                logger.warning("schedule_execution_dropped", schedule_id=schedule_id, error=str(e))
        return executions
