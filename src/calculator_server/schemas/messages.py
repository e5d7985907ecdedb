"""Chat message schemas for the model endpoint.

These mirror the OpenAI chat completions message format. Only the messages
the server writes itself are modelled; assistant messages from the model are
passed through as raw dicts.
"""

from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

from calculator_server.schemas.constants import VALID_MESSAGE_ROLES

# Messages travel as plain dicts so vendor-specific fields survive unchanged.
MessageDict = Dict[str, Any]


class Message(BaseModel):
    """Chat message structure compatible with OpenAI-style payloads."""

    role: str = Field(..., description="Message role: system, user, assistant, tool")
    content: Union[str, List[Dict[str, Any]], None] = None
    tool_call_id: Optional[str] = Field(None, max_length=256)

    # Allow optional keys like `name` or vendor-specific fields
    model_config = ConfigDict(extra="allow")

    @field_validator("role")
    @classmethod
    def validate_role(cls, v: str) -> str:
        """Validate role is one of the allowed values."""
        if v not in VALID_MESSAGE_ROLES:
            raise ValueError(
                f"Invalid role '{v}'. Must be one of: {sorted(VALID_MESSAGE_ROLES)}"
            )
        return v

    def to_dict(self) -> MessageDict:
        return self.model_dump(mode="json", exclude_none=True)


def system_message(content: str) -> MessageDict:
    return Message(role="system", content=content).to_dict()


def user_message(content: str) -> MessageDict:
    return Message(role="user", content=content).to_dict()


def tool_result_message(tool_call_id: str, content: str) -> MessageDict:
    """Build the tool-result message that answers a tool call by id."""
    return Message(role="tool", tool_call_id=tool_call_id, content=content).to_dict()
