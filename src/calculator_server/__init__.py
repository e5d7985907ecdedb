"""Calculator Server - natural-language arithmetic over model tool calling.

A chat model chooses one of four arithmetic tools, the server executes it
locally, and the model narrates the result.
"""

from importlib.metadata import version, PackageNotFoundError

from calculator_server.exceptions import (
    CalculatorError,
    InvalidInput,
    MalformedToolCall,
    Misconfigured,
    QuotaExceeded,
    RateLimited,
    UnknownTool,
    UpstreamUnavailable,
)
from calculator_server.model_client import ModelClient
from calculator_server.orchestrator import CalculationOrchestrator
from calculator_server.schemas import CalculateRequest, CalculationReply, ToolArguments
from calculator_server.tools import DEFAULT_CATALOG, ToolCatalog

__all__ = [
    # Protocol
    "CalculationOrchestrator",
    "ModelClient",
    "ToolCatalog",
    "DEFAULT_CATALOG",
    # Exceptions
    "CalculatorError",
    "InvalidInput",
    "Misconfigured",
    "UpstreamUnavailable",
    "RateLimited",
    "QuotaExceeded",
    "MalformedToolCall",
    "UnknownTool",
    # Schemas
    "CalculateRequest",
    "CalculationReply",
    "ToolArguments",
]

# Single source of version truth: read from pyproject.toml via importlib.metadata
try:
    __version__ = version("calculator-server")
except PackageNotFoundError:
    # Package is not installed (e.g., running from source)
    __version__ = "0.1.0-dev"
