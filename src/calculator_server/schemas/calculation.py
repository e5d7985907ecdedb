"""Request/reply schemas for POST /calculate.

The reply uses camelCase keys on the wire (`toolUsed`, `finalAnswer`) because
that is what the chat front end renders.
"""

import math
from typing import Any, Dict, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, StrictFloat, StrictInt, field_validator, model_validator

# Booleans and numeric strings are rejected rather than coerced.
NumberValue = Union[StrictInt, StrictFloat]
ResultValue = Union[StrictInt, StrictFloat, str]


class CalculateRequest(BaseModel):
    """Body of POST /calculate.

    `message` is optional here so that an empty or missing message reaches the
    orchestrator and is reported as invalid input with the usual error body.
    """

    message: Optional[str] = None


class ToolArguments(BaseModel):
    """The two operands of a calculator tool call."""

    a: NumberValue
    b: NumberValue

    model_config = ConfigDict(extra="ignore")

    @field_validator("a", "b")
    @classmethod
    def validate_finite(cls, v: Union[int, float]) -> Union[int, float]:
        if isinstance(v, float) and not math.isfinite(v):
            raise ValueError("must be a finite number")
        return v


class CalculationReply(BaseModel):
    """Reply returned to the caller.

    Shapes:
    - direct answer: toolUsed/arguments/result are None, finalAnswer is set
    - computed answer: toolUsed, arguments, result and finalAnswer are set
    - failure: only error is set
    """

    tool_used: Optional[str] = Field(default=None, alias="toolUsed")
    arguments: Optional[ToolArguments] = None
    result: Optional[ResultValue] = None
    final_answer: Optional[str] = Field(default=None, alias="finalAnswer")
    error: Optional[str] = None

    # Status for the HTTP layer; never serialized.
    http_status: int = Field(default=200, exclude=True)

    model_config = ConfigDict(populate_by_name=True)

    @model_validator(mode="after")
    def validate_shape(self) -> "CalculationReply":
        if self.error is not None:
            if any(v is not None for v in (self.tool_used, self.arguments, self.result, self.final_answer)):
                raise ValueError("error replies must not carry calculation fields")
            return self
        if self.final_answer is None:
            raise ValueError("finalAnswer is required unless error is set")
        if self.tool_used is None:
            if self.arguments is not None or self.result is not None:
                raise ValueError("arguments and result require toolUsed")
        elif self.arguments is None or self.result is None:
            raise ValueError("toolUsed requires arguments and result")
        return self

    @classmethod
    def direct(cls, final_answer: str) -> "CalculationReply":
        return cls(final_answer=final_answer)

    @classmethod
    def computed(
        cls,
        tool_used: str,
        arguments: ToolArguments,
        result: Union[int, float, str],
        final_answer: str,
    ) -> "CalculationReply":
        return cls(tool_used=tool_used, arguments=arguments, result=result, final_answer=final_answer)

    @classmethod
    def failure(cls, error: str, http_status: int = 500) -> "CalculationReply":
        return cls(error=error, http_status=http_status)

    @property
    def is_error(self) -> bool:
        return self.error is not None

    def to_payload(self) -> Dict[str, Any]:
        """JSON body for the HTTP response; `error` only appears on failures."""
        payload = self.model_dump(mode="json", by_alias=True)
        if self.error is None:
            payload.pop("error", None)
        return payload
