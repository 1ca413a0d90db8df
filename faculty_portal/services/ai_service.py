"""Relay to the external AI assistant HTTP service."""

import logging
from typing import Optional

import httpx

from ..config import settings

logger = logging.getLogger(__name__)


class AIServiceError(Exception):
    """Raised when the AI service is unreachable or answers badly."""

    pass


class AIService:
    """
    Thin client for the configured AI endpoint.

    The endpoint accepts {"message", "context"} and answers {"response"}.
    """

    def __init__(
        self,
        endpoint: Optional[str] = None,
        timeout: Optional[float] = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.endpoint = endpoint if endpoint is not None else settings.ai_api_endpoint
        self.timeout = timeout or settings.ai_request_timeout
        self._transport = transport

    @property
    def enabled(self) -> bool:
        return bool(self.endpoint)

    @staticmethod
    def mentions_assistant(text: str) -> bool:
        """Whether a chat message addresses the assistant."""
        return settings.ai_marker.lower() in text.lower()

    @staticmethod
    def strip_marker(text: str) -> str:
        marker = settings.ai_marker
        index = text.lower().find(marker.lower())
        if index == -1:
            return text.strip()
        return (text[:index] + text[index + len(marker):]).strip()

    async def ask(self, message: str, context: Optional[str] = None) -> str:
        """
        Send a prompt to the AI service.

        Args:
            message: User prompt
            context: Optional conversation context

        Returns:
            The assistant's reply text

        Raises:
            AIServiceError: If the service is not configured or the call fails
        """
        if not self.enabled:
            raise AIServiceError("AI endpoint is not configured")

        try:
            async with httpx.AsyncClient(
                timeout=self.timeout, transport=self._transport
            ) as client:
                resp = await client.post(
                    self.endpoint,
                    json={"message": message, "context": context},
                )
                resp.raise_for_status()
                data = resp.json()
        except (httpx.HTTPError, ValueError) as e:
            logger.error(f"AI request failed: {e}")
            raise AIServiceError("Failed to get AI response") from e

        reply = data.get("response") if isinstance(data, dict) else None
        if not isinstance(reply, str) or not reply.strip():
            raise AIServiceError("AI service returned no response")
        return reply


# Global service instance
ai_service = AIService()


def get_ai_service() -> AIService:
    return ai_service
