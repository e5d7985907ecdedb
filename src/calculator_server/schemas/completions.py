"""Chat completions schemas for the model endpoint.

These define the contract for calculator server -> model gateway
communication via an OpenAI-compatible /v1/chat/completions endpoint.
"""

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field

from calculator_server.schemas.messages import MessageDict

ToolSchemaDict = Dict[str, Any]


class ChatCompletionRequest(BaseModel):
    """OpenAI-compatible chat completions request.

    `tools` and `tool_choice` are only set for the planning round; they are
    dropped from the payload when unset.
    """

    model: str
    messages: List[MessageDict] = Field(..., min_length=1)
    tools: Optional[List[ToolSchemaDict]] = None
    tool_choice: Optional[str] = None


class ChatCompletionChoice(BaseModel):
    """Single choice in a chat completions response."""

    index: int = 0
    # Kept as a raw dict so it can be threaded back to the model verbatim.
    message: MessageDict = Field(default_factory=dict)
    finish_reason: Optional[str] = None

    model_config = ConfigDict(extra="allow")


class ChatCompletionResponse(BaseModel):
    """Subset of the OpenAI chat completions response the server relies on."""

    id: Optional[str] = None
    model: Optional[str] = None
    choices: List[ChatCompletionChoice] = Field(default_factory=list)
    usage: Optional[Dict[str, Any]] = None

    model_config = ConfigDict(extra="allow")

    @property
    def assistant_message(self) -> MessageDict:
        """The first choice's message, or an empty dict if there is none."""
        if not self.choices:
            return {}
        return self.choices[0].message

    @property
    def tool_calls(self) -> List[Dict[str, Any]]:
        tool_calls = self.assistant_message.get("tool_calls") or []
        if isinstance(tool_calls, list):
            return tool_calls
        return []

    @property
    def text(self) -> Optional[str]:
        """Assistant text content, or None when the model returned no text."""
        content = self.assistant_message.get("content")
        if isinstance(content, str) and content:
            return content
        return None
