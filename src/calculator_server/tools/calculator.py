"""Calculator tool catalog.

Four pure arithmetic operations offered to the model as tools, the schemas the
model sees for them, and the parsing of the model's tool calls into validated
operands.
"""

import json
import logging
import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, NamedTuple, Optional, Tuple, Union

from pydantic import ValidationError

from calculator_server.exceptions import MalformedToolCall, UnknownTool
from calculator_server.schemas import (
    DIVISION_BY_ZERO_MESSAGE,
    RESULT_OUT_OF_RANGE_MESSAGE,
    FunctionParametersSchema,
    FunctionPropertySchema,
    FunctionSchema,
    FunctionToolSchema,
    ToolArguments,
    ToolSchemaDict,
)

logger = logging.getLogger(__name__)

Number = Union[int, float]


# =============================================================================
# Computation Outcomes
# =============================================================================


def format_number(value: Number) -> str:
    """Render a number the way it is narrated to the model (25.0 -> "25")."""
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)


@dataclass(frozen=True)
class Computed:
    """A successful numeric result."""

    value: Number

    def serialize(self) -> str:
        return format_number(self.value)


@dataclass(frozen=True)
class DomainError:
    """A narratable computation error, such as division by zero."""

    message: str

    @property
    def value(self) -> str:
        return self.message

    def serialize(self) -> str:
        return self.message


ComputationOutcome = Union[Computed, DomainError]


# =============================================================================
# Calculator Operations
# =============================================================================


def add(a: Number, b: Number) -> Number:
    return a + b


def subtract(a: Number, b: Number) -> Number:
    return a - b


def multiply(a: Number, b: Number) -> Number:
    return a * b


def divide(a: Number, b: Number) -> Union[Number, DomainError]:
    """Divide a by b.

    Returns:
        Quotient of a and b, or a DomainError when b is zero
    """
    if b == 0:
        logger.warning(f"divide({a}, {b}) - Division by zero!")
        return DomainError(DIVISION_BY_ZERO_MESSAGE)
    return a / b


# =============================================================================
# Catalog
# =============================================================================


@dataclass(frozen=True)
class Parameter:
    name: str
    description: str
    type: str = "number"


@dataclass(frozen=True)
class Operation:
    """A callable operation offered to the model."""

    name: str
    description: str
    parameters: Tuple[Parameter, ...]
    function: Callable[[Number, Number], Union[Number, DomainError]]

    def to_tool_schema(self) -> FunctionToolSchema:
        return FunctionToolSchema(
            function=FunctionSchema(
                name=self.name,
                description=self.description,
                parameters=FunctionParametersSchema(
                    properties={
                        p.name: FunctionPropertySchema(type=p.type, description=p.description)
                        for p in self.parameters
                    },
                    required=[p.name for p in self.parameters],
                ),
            ),
        )


class ToolCatalog:
    """Fixed, ordered registry of calculator operations."""

    def __init__(self, operations: Tuple[Operation, ...]) -> None:
        self._operations = tuple(operations)
        self._by_name: Dict[str, Operation] = {op.name: op for op in self._operations}

    def list(self) -> Tuple[Operation, ...]:
        """Operations in display order."""
        return self._operations

    def names(self) -> List[str]:
        return [op.name for op in self._operations]

    def get(self, name: str) -> Operation:
        operation = self._by_name.get(name)
        if operation is None:
            logger.warning("Unknown calculator function: %s", name)
            raise UnknownTool(name, available=self.names())
        return operation

    def tool_schemas(self) -> List[ToolSchemaDict]:
        """Tool definitions in the shape the chat completions API expects."""
        return [op.to_tool_schema().model_dump(mode="json", exclude_none=True) for op in self._operations]

    def execute(self, name: str, a: Number, b: Number) -> ComputationOutcome:
        """Run the named operation.

        Results outside the finite float range, including integer results too
        large to convert to a float, come back as a DomainError.

        Raises:
            UnknownTool: If name is not in the catalog
        """
        operation = self.get(name)
        try:
            result = operation.function(a, b)
            if isinstance(result, DomainError):
                return result
            # math.isfinite raises OverflowError for ints beyond the float range.
            if not math.isfinite(result):
                raise OverflowError(f"{name} result is not finite")
        except OverflowError as e:
            logger.warning(f"{name}({a}, {b}) - Result out of range: {e}")
            return DomainError(RESULT_OUT_OF_RANGE_MESSAGE)
        logger.debug(f"{name}({a}, {b}) = {result}")
        return Computed(result)


def _number_parameter(name: str, description: str) -> Parameter:
    return Parameter(name=name, description=description)


DEFAULT_CATALOG = ToolCatalog(
    (
        Operation(
            name="add",
            description="Add two numbers together",
            parameters=(_number_parameter("a", "First number"), _number_parameter("b", "Second number")),
            function=add,
        ),
        Operation(
            name="subtract",
            description="Subtract second number from first number",
            parameters=(
                _number_parameter("a", "First number"),
                _number_parameter("b", "Second number to subtract"),
            ),
            function=subtract,
        ),
        Operation(
            name="multiply",
            description="Multiply two numbers together",
            parameters=(_number_parameter("a", "First number"), _number_parameter("b", "Second number")),
            function=multiply,
        ),
        Operation(
            name="divide",
            description="Divide first number by second number",
            parameters=(
                _number_parameter("a", "Dividend (number to be divided)"),
                _number_parameter("b", "Divisor (number to divide by)"),
            ),
            function=divide,
        ),
    )
)

CALCULATOR_TOOL_SCHEMAS: List[ToolSchemaDict] = DEFAULT_CATALOG.tool_schemas()


# =============================================================================
# Tool Call Parsing
# =============================================================================


class ToolInvocation(NamedTuple):
    tool_call_id: str
    name: str
    arguments: ToolArguments


def get_tool_call_info(tool_call: Dict[str, Any]) -> ToolInvocation:
    """Extract id, function name and operands from a tool call.

    Args:
        tool_call: Tool call dict with structure:
            {
                "id": "call_123",
                "type": "function",
                "function": {
                    "name": "add",
                    "arguments": '{"a": 15, "b": 23}'  # Can be dict or JSON string
                }
            }

    Raises:
        MalformedToolCall: If the name is missing or the operands are not two numbers
    """
    tool_call_id: Optional[str] = tool_call.get("id") if isinstance(tool_call, dict) else None
    function = tool_call.get("function") if isinstance(tool_call, dict) else None
    if not isinstance(function, dict):
        raise MalformedToolCall("Tool call has no function", tool_call_id=tool_call_id)

    name = function.get("name")
    if not isinstance(name, str) or not name:
        raise MalformedToolCall("Tool call has no function name", tool_call_id=tool_call_id)

    raw_arguments = function.get("arguments")
    if isinstance(raw_arguments, str):
        try:
            raw_arguments = json.loads(raw_arguments)
        except ValueError as e:
            # JSONDecodeError, or an integer literal past the int conversion limit
            reason = e.msg if isinstance(e, json.JSONDecodeError) else str(e)
            raise MalformedToolCall(
                f"Invalid JSON arguments for {name}: {reason}", tool_call_id=tool_call_id
            ) from e
    if not isinstance(raw_arguments, dict):
        raise MalformedToolCall(f"Arguments for {name} must be an object", tool_call_id=tool_call_id)

    try:
        arguments = ToolArguments.model_validate(raw_arguments)
    except ValidationError as e:
        fields = ", ".join(sorted({str(err["loc"][0]) for err in e.errors() if err["loc"]})) or "a, b"
        raise MalformedToolCall(
            f"Invalid arguments for {name}: expected numbers for {fields}", tool_call_id=tool_call_id
        ) from e

    return ToolInvocation(tool_call_id=tool_call_id or "", name=name, arguments=arguments)
