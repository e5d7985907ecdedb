"""Error taxonomy for the calculator service.

Every error carries a user-facing message, the HTTP status the reply maps to,
and a short category used in logs. All of them are caught by
`CalculationOrchestrator.handle` and turned into an error-shaped reply.
"""

from typing import Optional


class CalculatorError(Exception):
    """Base class for all calculator service errors."""

    http_status: int = 500
    category: str = "internal_error"
    default_message: str = "An unexpected error occurred"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)


class InvalidInput(CalculatorError):
    """The caller sent an empty or missing message."""

    http_status = 400
    category = "invalid_input"
    default_message = "Message is required"


class Misconfigured(CalculatorError):
    """The service cannot reach the model because it is not configured."""

    category = "misconfigured"
    default_message = "Model endpoint is not configured"


class UpstreamUnavailable(CalculatorError):
    """The model endpoint was unreachable or returned a non-success status."""

    category = "upstream_unavailable"
    default_message = "Model endpoint is unavailable"

    def __init__(self, message: Optional[str] = None, status_code: Optional[int] = None) -> None:
        super().__init__(message)
        self.status_code = status_code


class RateLimited(UpstreamUnavailable):
    http_status = 429
    category = "rate_limited"
    default_message = "Rate limit exceeded. Please try again later."


class QuotaExceeded(UpstreamUnavailable):
    http_status = 402
    category = "quota_exceeded"
    default_message = "Payment required. Please add funds to continue."


class MalformedToolCall(CalculatorError):
    """The model requested a tool with unparseable or missing arguments."""

    category = "malformed_tool_call"
    default_message = "Model requested a tool with invalid arguments"

    def __init__(self, message: Optional[str] = None, tool_call_id: Optional[str] = None) -> None:
        super().__init__(message)
        self.tool_call_id = tool_call_id


class UnknownTool(CalculatorError):
    """The model requested an operation that is not in the catalog."""

    category = "unknown_tool"
    default_message = "Model requested an unknown tool"

    def __init__(self, tool_name: str, available: Optional[list] = None) -> None:
        message = f"Unknown function '{tool_name}'"
        if available:
            message += f". Available: {sorted(available)}"
        super().__init__(message)
        self.tool_name = tool_name


__all__ = [
    "CalculatorError",
    "InvalidInput",
    "Misconfigured",
    "UpstreamUnavailable",
    "RateLimited",
    "QuotaExceeded",
    "MalformedToolCall",
    "UnknownTool",
]
