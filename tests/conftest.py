"""Shared pytest fixtures for calculator_server tests.

Fixtures are designed to be isolated per-test to avoid cross-test interference.
"""

from __future__ import annotations

import json
import re
from typing import Any, Dict, Iterator, List, Optional, Tuple

import httpx
import pytest
from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from fastapi.testclient import TestClient

from calculator_server.config import Settings, get_settings
from calculator_server.schemas import DIVISION_BY_ZERO_MESSAGE, ChatCompletionRequest
from calculator_server.server import app as calculator_app

MOCK_MODEL_URL = "http://mock-model:9001/v1/chat/completions"

TEST_SETTINGS = Settings(
    model_api_url=MOCK_MODEL_URL,
    model_api_key="test-key",
    model_name="test/model-1",
    model_timeout_seconds=5.0,
    log_request_bodies=True,
)

_NUMBER = r"(-?\d+(?:\.\d+)?(?:e[+-]?\d+)?)"

# (pattern, operation, index of a, index of b)
_QUESTION_PATTERNS: List[Tuple[re.Pattern, str, int, int]] = [
    (re.compile(rf"{_NUMBER}\s+multiplied by\s+{_NUMBER}", re.I), "multiply", 1, 2),
    (re.compile(rf"{_NUMBER}\s+divided by\s+{_NUMBER}", re.I), "divide", 1, 2),
    (re.compile(rf"subtract\s+{_NUMBER}\s+from\s+{_NUMBER}", re.I), "subtract", 2, 1),
    (re.compile(rf"{_NUMBER}\s+plus\s+{_NUMBER}", re.I), "add", 1, 2),
]


def _parse_number(text: str) -> Any:
    return float(text) if "." in text or "e" in text.lower() else int(text)


def plan_tool_call(question: str) -> Optional[Dict[str, Any]]:
    """Deterministic stand-in for the model's tool selection."""
    for pattern, operation, a_idx, b_idx in _QUESTION_PATTERNS:
        match = pattern.search(question)
        if match:
            arguments = {"a": _parse_number(match.group(a_idx)), "b": _parse_number(match.group(b_idx))}
            return {
                "id": f"call_{operation}_1",
                "type": "function",
                "function": {"name": operation, "arguments": json.dumps(arguments)},
            }
    return None


def _completion(message: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "id": "chatcmpl-test",
        "object": "chat.completion",
        "created": 1700000000,
        "model": "test/model-1",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
    }


@pytest.fixture
def model_tracker() -> Dict[str, Any]:
    """Record requests seen by the mock model and control its failures.

    Keys:
        requests: Chat completion payloads, in order
        headers: Request headers, in order
        status_by_round: {round_number: http_status} to fail a given round
    """
    return {
        "requests": [],
        "headers": [],
        "status_by_round": {},
    }


def create_mock_model_app(tracker: Dict[str, Any]) -> FastAPI:
    """Create a mock OpenAI-compatible chat completions endpoint."""
    app = FastAPI(title="Mock Model")

    @app.post("/v1/chat/completions")
    async def completions(body: ChatCompletionRequest, request: Request):
        tracker["requests"].append(body.model_dump(mode="json", exclude_none=True))
        tracker["headers"].append(dict(request.headers))
        round_number = len(tracker["requests"])

        status = tracker["status_by_round"].get(round_number)
        if status is not None:
            return JSONResponse({"error": {"message": "mock failure"}}, status_code=status)

        last_message = body.messages[-1]
        if last_message.get("role") == "tool":
            content = last_message.get("content", "")
            if content == DIVISION_BY_ZERO_MESSAGE:
                return _completion({"role": "assistant", "content": "You can't divide a number by zero."})
            if content.startswith("Error:"):
                return _completion({"role": "assistant", "content": f"I couldn't compute that ({content})."})
            return _completion({"role": "assistant", "content": f"The answer is {content}."})

        tool_call = plan_tool_call(str(last_message.get("content", ""))) if body.tools else None
        if tool_call is None:
            return _completion({"role": "assistant", "content": "Hello! Ask me an arithmetic question."})
        return _completion({"role": "assistant", "content": None, "tool_calls": [tool_call]})

    return app


def patch_httpx_for_mock_model(client: TestClient, monkeypatch: pytest.MonkeyPatch) -> None:
    """Patch httpx.AsyncClient.post to route model calls to the mock app."""

    original_post = httpx.AsyncClient.post

    async def mock_post(self, url, **kwargs):
        if "/v1/chat/completions" in str(url):
            resp = client.post("/v1/chat/completions", **kwargs)
            return httpx.Response(
                status_code=resp.status_code,
                content=resp.content,
                headers={"content-type": resp.headers.get("content-type", "application/json")},
                request=httpx.Request("POST", url),
            )
        return await original_post(self, url, **kwargs)

    monkeypatch.setattr(httpx.AsyncClient, "post", mock_post)


@pytest.fixture
def mock_model(
    model_tracker: Dict[str, Any],
    monkeypatch: pytest.MonkeyPatch,
) -> Tuple[TestClient, Dict[str, Any]]:
    """Mock model endpoint that records every chat completion request."""
    app = create_mock_model_app(model_tracker)
    client = TestClient(app)
    patch_httpx_for_mock_model(client, monkeypatch)
    return client, model_tracker


@pytest.fixture
def calculator_client(mock_model) -> Iterator[TestClient]:
    """Calculator app wired to the mock model endpoint."""
    calculator_app.dependency_overrides[get_settings] = lambda: TEST_SETTINGS
    try:
        with TestClient(calculator_app) as client:
            yield client
    finally:
        calculator_app.dependency_overrides.clear()
