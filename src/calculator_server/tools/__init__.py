"""Tool implementations for the calculator server.

Public API:
- DEFAULT_CATALOG: The four arithmetic operations offered to the model
- CALCULATOR_TOOL_SCHEMAS: Tool schemas for LLM tool calling
- get_tool_call_info: Parse a model tool call into validated operands
"""

from calculator_server.tools.calculator import (
    CALCULATOR_TOOL_SCHEMAS,
    DEFAULT_CATALOG,
    ComputationOutcome,
    Computed,
    DomainError,
    Operation,
    Parameter,
    ToolCatalog,
    ToolInvocation,
    format_number,
    get_tool_call_info,
)

__all__ = [
    "CALCULATOR_TOOL_SCHEMAS",
    "DEFAULT_CATALOG",
    "ComputationOutcome",
    "Computed",
    "DomainError",
    "Operation",
    "Parameter",
    "ToolCatalog",
    "ToolInvocation",
    "format_number",
    "get_tool_call_info",
]
