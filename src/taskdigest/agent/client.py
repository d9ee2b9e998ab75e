"""HTTP client for the remote agent execution service.

The agent reads the user's mailbox, extracts action items and replies with a
result envelope. Nothing about the analysis happens locally; this module only
sends the instruction and decodes the envelope.
"""

from typing import Any

import httpx
import structlog
from pydantic import ValidationError

from taskdigest.agent.models import AgentEnvelope

logger = structlog.get_logger()


class AgentResponseError(Exception):
    """Raised when the agent service replies with a body that is not an envelope."""


class AgentClient:
    """HTTP client for agent API communication."""

    def __init__(
        self,
        base_url: str,
        api_key: str | None = None,
        timeout: float = 60.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """Initialize agent client.

        Args:
            base_url: Agent service base URL
            api_key: API key sent as the x-api-key header
            timeout: Request timeout in seconds
            transport: Optional transport override (used by tests)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        headers = {"Content-Type": "application/json"}
        if api_key:
            headers["x-api-key"] = api_key
        self.client = httpx.AsyncClient(timeout=timeout, headers=headers, transport=transport)

    async def close(self) -> None:
        """Close the HTTP client."""
        await self.client.aclose()

    async def __aenter__(self) -> "AgentClient":
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    async def call_agent(
        self,
        message: str,
        agent_id: str,
        user_id: str | None = None,
        session_id: str | None = None,
    ) -> AgentEnvelope:
        """Send an instruction to an agent and wait for its reply.

        Args:
            message: Natural-language instruction for the agent
            agent_id: Identifier of the agent to invoke
            user_id: Optional user identifier
            session_id: Optional session identifier

        Returns:
            Decoded response envelope

        Raises:
            httpx.HTTPError: If the request fails or returns a non-2xx status
            AgentResponseError: If the body is not a JSON object
        """
        payload = {
            "message": message,
            "agent_id": agent_id,
            "user_id": user_id,
            "session_id": session_id,
        }

        try:
            response = await self.client.post(f"{self.base_url}/chat", json=payload)
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(
                "agent_call_failed",
                agent_id=agent_id,
                base_url=self.base_url,
                error=str(e),
            )
            raise

        try:
            data = response.json()
        except ValueError as e:
            logger.error("agent_response_not_json", agent_id=agent_id, error=str(e))
            raise AgentResponseError("Agent response is not valid JSON") from e

        if not isinstance(data, dict):
            logger.error("agent_response_not_object", agent_id=agent_id)
            raise AgentResponseError("Agent response is not a JSON object")

        try:
            envelope = AgentEnvelope.model_validate(data)
        except ValidationError as e:
            logger.error("agent_response_invalid", agent_id=agent_id, error=str(e))
            raise AgentResponseError("Agent response envelope is invalid") from e

        logger.info(
            "agent_call_completed",
            agent_id=agent_id,
            success=envelope.success,
        )

        return envelope
