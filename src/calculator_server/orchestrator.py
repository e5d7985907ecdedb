"""Two-round calculation protocol.

Protocol flow:
- Round 1: the user message and the tool catalog go to the model, which
  either answers directly or requests a tool.
- The first requested tool is executed locally.
- Round 2: the round-1 assistant message and the tool result go back to the
  model, which narrates the final answer.
"""

from __future__ import annotations

import logging
from typing import Optional

from calculator_server.exceptions import CalculatorError, InvalidInput
from calculator_server.model_client import ModelClient
from calculator_server.schemas import (
    FALLBACK_DIRECT_ANSWER,
    CalculationReply,
    system_message,
    tool_result_message,
    user_message,
)
from calculator_server.tools.calculator import DEFAULT_CATALOG, ToolCatalog, get_tool_call_info

logger = logging.getLogger(__name__)

NARRATION_PROMPT = (
    "You are a helpful calculator assistant. "
    "Provide a clear, friendly response with the calculation result."
)


def validate_message(message: Optional[str]) -> str:
    """Return the message if it is a non-blank string, else raise InvalidInput."""
    if not isinstance(message, str) or not message.strip():
        raise InvalidInput()
    return message


def build_planning_prompt(catalog: ToolCatalog) -> str:
    operations = ", ".join(f"{op.name} ({op.description.lower()})" for op in catalog.list())
    return (
        "You are a helpful calculator assistant. When users ask math questions, "
        "use the appropriate tool to calculate the answer. "
        f"Available operations are: {operations}."
    )


class CalculationOrchestrator:
    """Runs the plan -> execute -> narrate protocol for one message."""

    def __init__(self, model_client: ModelClient, catalog: ToolCatalog = DEFAULT_CATALOG) -> None:
        self.model_client = model_client
        self.catalog = catalog

    async def handle(self, message: Optional[str]) -> CalculationReply:
        """Run the protocol and convert every failure into an error reply."""
        try:
            return await self.run(message)
        except CalculatorError as e:
            logger.warning("Calculation failed (%s): %s", e.category, e.message)
            return CalculationReply.failure(e.message, http_status=e.http_status)
        except Exception:
            logger.exception("Unexpected error during calculation")
            return CalculationReply.failure(CalculatorError.default_message)

    async def run(self, message: Optional[str]) -> CalculationReply:
        """Run the protocol, raising CalculatorError subclasses on failure."""
        message = validate_message(message)

        logger.info("Received message: %s", message)

        # Round 1: let the model pick a tool.
        planning = await self.model_client.complete(
            [system_message(build_planning_prompt(self.catalog)), user_message(message)],
            tools=self.catalog.tool_schemas(),
        )
        assistant_message = planning.assistant_message
        tool_calls = planning.tool_calls

        if not tool_calls:
            final_answer = planning.text or FALLBACK_DIRECT_ANSWER
            logger.info("No tool requested, answering directly")
            return CalculationReply.direct(final_answer)

        if len(tool_calls) > 1:
            logger.info("Model requested %d tool calls, using only the first", len(tool_calls))

        invocation = get_tool_call_info(tool_calls[0])
        logger.info("Tool requested: %s %s", invocation.name, invocation.arguments.model_dump())

        outcome = self.catalog.execute(invocation.name, invocation.arguments.a, invocation.arguments.b)
        logger.info("Calculation result: %s", outcome.serialize())

        # Round 2: the assistant message is threaded back unchanged so the
        # endpoint can match the tool result to its tool_call_id.
        narration = await self.model_client.complete(
            [
                system_message(NARRATION_PROMPT),
                user_message(message),
                assistant_message,
                tool_result_message(invocation.tool_call_id, outcome.serialize()),
            ]
        )
        final_answer = narration.text or f"The result is {outcome.serialize()}"
        logger.info("Final answer: %s", final_answer)

        return CalculationReply.computed(
            tool_used=invocation.name,
            arguments=invocation.arguments,
            result=outcome.value,
            final_answer=final_answer,
        )
