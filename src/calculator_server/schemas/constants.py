"""Constants used across schema modules.

This module defines shared constants to avoid circular imports.
"""

# Valid message roles for chat messages
VALID_MESSAGE_ROLES = {"system", "user", "assistant", "tool"}

# Tool choice sent with the planning round
TOOL_CHOICE_AUTO = "auto"

# Result value used when the divisor is zero
DIVISION_BY_ZERO_MESSAGE = "Error: division by zero"

# Answer used when the model replies without text and without a tool call
FALLBACK_DIRECT_ANSWER = "I couldn't understand that math question. Please try rephrasing."

# Result value used when a computation leaves the finite float range
RESULT_OUT_OF_RANGE_MESSAGE = "Error: result out of range"
