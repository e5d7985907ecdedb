"""OpenAI-compatible tool definition schemas.

These schemas follow the OpenAI function calling format and are sent to the
model in the `tools` array of the planning round.
"""

from typing import Dict, List, Literal, Optional

from pydantic import BaseModel, Field


class FunctionPropertySchema(BaseModel):
    """Schema of a single function parameter."""

    type: str
    description: Optional[str] = None


class FunctionParametersSchema(BaseModel):
    type: Literal["object"] = "object"
    properties: Dict[str, FunctionPropertySchema] = Field(default_factory=dict)
    required: List[str] = Field(default_factory=list)


class FunctionSchema(BaseModel):
    name: str
    description: str
    parameters: FunctionParametersSchema


class FunctionToolSchema(BaseModel):
    """Tool definition following OpenAI tools format.

    Example:
        {
            "type": "function",
            "function": {
                "name": "add",
                "description": "Add two numbers together",
                "parameters": {
                    "type": "object",
                    "properties": {
                        "a": {"type": "number", "description": "First number"},
                        "b": {"type": "number", "description": "Second number"}
                    },
                    "required": ["a", "b"]
                }
            }
        }
    """

    type: Literal["function"] = "function"
    function: FunctionSchema


class ToolsResponse(BaseModel):
    """Response body for GET /tools."""

    tools: List[FunctionToolSchema] = Field(default_factory=list)
