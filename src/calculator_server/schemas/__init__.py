"""Pydantic schemas for the calculator server.

Two contracts live here:
- caller -> calculator server: `CalculateRequest` / `CalculationReply`
- calculator server -> model endpoint: OpenAI-compatible chat completions
"""

from calculator_server.schemas.calculation import (
    CalculateRequest,
    CalculationReply,
    NumberValue,
    ToolArguments,
)
from calculator_server.schemas.completions import (
    ChatCompletionChoice,
    ChatCompletionRequest,
    ChatCompletionResponse,
    ToolSchemaDict,
)
from calculator_server.schemas.constants import (
    DIVISION_BY_ZERO_MESSAGE,
    FALLBACK_DIRECT_ANSWER,
    RESULT_OUT_OF_RANGE_MESSAGE,
    TOOL_CHOICE_AUTO,
    VALID_MESSAGE_ROLES,
)
from calculator_server.schemas.messages import (
    Message,
    MessageDict,
    system_message,
    tool_result_message,
    user_message,
)
from calculator_server.schemas.tools import (
    FunctionParametersSchema,
    FunctionPropertySchema,
    FunctionSchema,
    FunctionToolSchema,
    ToolsResponse,
)

__all__ = [
    # Type aliases
    "MessageDict",
    "NumberValue",
    "ToolSchemaDict",
    # Constants
    "DIVISION_BY_ZERO_MESSAGE",
    "FALLBACK_DIRECT_ANSWER",
    "RESULT_OUT_OF_RANGE_MESSAGE",
    "TOOL_CHOICE_AUTO",
    "VALID_MESSAGE_ROLES",
    # Calculation API
    "CalculateRequest",
    "CalculationReply",
    "ToolArguments",
    # Chat completions
    "ChatCompletionChoice",
    "ChatCompletionRequest",
    "ChatCompletionResponse",
    # Messages
    "Message",
    "system_message",
    "tool_result_message",
    "user_message",
    # Tool schemas
    "FunctionPropertySchema",
    "FunctionParametersSchema",
    "FunctionSchema",
    "FunctionToolSchema",
    "ToolsResponse",
]
