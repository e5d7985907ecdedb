"""HTTP client for the OpenAI-compatible model endpoint.

One `ModelClient.complete` call is one round trip. Transport failures and
non-success statuses are mapped onto the service's error taxonomy here, so the
orchestrator only ever sees `UpstreamUnavailable` and its subclasses.
"""

from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from calculator_server.config import Settings
from calculator_server.exceptions import Misconfigured, QuotaExceeded, RateLimited, UpstreamUnavailable
from calculator_server.schemas import (
    TOOL_CHOICE_AUTO,
    ChatCompletionRequest,
    ChatCompletionResponse,
    MessageDict,
    ToolSchemaDict,
)

logger = logging.getLogger(__name__)


class AppState:
    """Shared application state for the FastAPI service."""

    def __init__(self) -> None:
        self.http_client: Optional[httpx.AsyncClient] = None
        self._http_client_lock = asyncio.Lock()
        self.timeout_seconds: float = 30.0

    def _new_client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            timeout=self.timeout_seconds,
            limits=httpx.Limits(max_keepalive_connections=20, max_connections=100),
        )

    async def initialize(self, settings: Settings) -> None:
        self.timeout_seconds = settings.model_timeout_seconds
        self.http_client = self._new_client()

    async def cleanup(self) -> None:
        if self.http_client is not None:
            await self.http_client.aclose()
            self.http_client = None

    async def get_http_client(self) -> httpx.AsyncClient:
        """Get or lazily create the shared HTTP client."""
        if self.http_client is not None:
            return self.http_client
        async with self._http_client_lock:
            if self.http_client is None:
                self.http_client = self._new_client()
        return self.http_client


app_state = AppState()


def _auth_headers(api_key: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"}


def _raise_for_upstream_status(response: httpx.Response) -> None:
    """Map a non-success status from the model endpoint to an error."""
    try:
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        status_code = e.response.status_code
        logger.error("Model endpoint error: status=%s body=%s", status_code, e.response.text)
        if status_code == 429:
            raise RateLimited(status_code=status_code) from e
        if status_code == 402:
            raise QuotaExceeded(status_code=status_code) from e
        raise UpstreamUnavailable(f"AI gateway error: {status_code}", status_code=status_code) from e


class ModelClient:
    """Sends chat completion requests to the model endpoint."""

    def __init__(
        self,
        http_client: httpx.AsyncClient,
        api_url: Optional[str],
        api_key: Optional[str],
        model: str,
    ) -> None:
        # Configuration errors surface before any network attempt.
        if not api_key:
            raise Misconfigured("MODEL_API_KEY is not configured")
        if not api_url:
            raise Misconfigured("MODEL_API_URL is not configured")
        self.http_client = http_client
        self.api_url = api_url
        self.api_key = api_key
        self.model = model

    @classmethod
    def from_settings(cls, http_client: httpx.AsyncClient, settings: Settings) -> "ModelClient":
        return cls(
            http_client=http_client,
            api_url=settings.model_api_url,
            api_key=settings.model_api_key,
            model=settings.model_name,
        )

    def build_request(
        self,
        messages: List[MessageDict],
        tools: Optional[List[ToolSchemaDict]] = None,
    ) -> Dict[str, Any]:
        # exclude_unset rather than exclude_none: messages must go out unchanged,
        # null content included.
        if tools:
            request = ChatCompletionRequest(
                model=self.model, messages=messages, tools=tools, tool_choice=TOOL_CHOICE_AUTO
            )
        else:
            request = ChatCompletionRequest(model=self.model, messages=messages)
        return request.model_dump(mode="json", exclude_unset=True)

    async def complete(
        self,
        messages: List[MessageDict],
        tools: Optional[List[ToolSchemaDict]] = None,
    ) -> ChatCompletionResponse:
        """Run one round trip against the model endpoint.

        Args:
            messages: Full conversation to send
            tools: Tool schemas to offer; when given, tool_choice is "auto"

        Raises:
            RateLimited: On HTTP 429
            QuotaExceeded: On HTTP 402
            UpstreamUnavailable: On any other failure or an unreadable body
        """
        payload = self.build_request(messages, tools)

        try:
            resp = await self.http_client.post(
                self.api_url,
                json=payload,
                headers=_auth_headers(self.api_key),
            )
        except httpx.TimeoutException as e:
            logger.error("Model endpoint timed out: %s", e)
            raise UpstreamUnavailable("Model endpoint timed out") from e
        except httpx.RequestError as e:
            logger.error("Network error communicating with model endpoint: %s", e)
            raise UpstreamUnavailable("Network error communicating with model endpoint") from e

        _raise_for_upstream_status(resp)

        try:
            return ChatCompletionResponse.model_validate(resp.json())
        except (ValueError, ValidationError) as e:
            logger.error("Model endpoint returned an invalid response: %s", resp.text)
            raise UpstreamUnavailable("Model endpoint returned an invalid response") from e
