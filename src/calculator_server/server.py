"""FastAPI calculator server.

POST /calculate takes a natural-language arithmetic question and returns the
computed answer together with the operation the model selected:
- The model endpoint picks one of the catalog tools (round 1).
- The server executes it locally.
- The model narrates the result (round 2).
"""

import json
import logging
import time
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, Response
from starlette.middleware.base import BaseHTTPMiddleware

from calculator_server.config import Settings, get_settings
from calculator_server.exceptions import CalculatorError, InvalidInput
from calculator_server.model_client import ModelClient, app_state
from calculator_server.orchestrator import CalculationOrchestrator, validate_message
from calculator_server.schemas import CalculateRequest, CalculationReply, ToolsResponse
from calculator_server.tools.calculator import DEFAULT_CATALOG

CORS_HEADERS = {
    "Access-Control-Allow-Origin": "*",
    "Access-Control-Allow-Headers": "authorization, x-client-info, apikey, content-type",
    "Access-Control-Allow-Methods": "POST, GET, OPTIONS",
}


# Custom formatter that explicitly uses local time
class LocalTimeFormatter(logging.Formatter):
    """Formatter that uses local time with timezone info."""
    converter = time.localtime

    def formatTime(self, record, datefmt=None):
        ct = self.converter(record.created)
        if datefmt:
            s = time.strftime(datefmt, ct)
            tz = time.strftime("%Z", ct)
            return f"{s} {tz}"
        else:
            t = time.strftime("%Y-%m-%d %H:%M:%S", ct)
            tz = time.strftime("%Z", ct)
            return f"{t},{int(record.msecs):03d} {tz}"


# Configure logging for all calculator_server modules
root_logger = logging.getLogger("calculator_server")
if not root_logger.handlers:
    handler = logging.StreamHandler()
    formatter = LocalTimeFormatter(
        "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    handler.setFormatter(formatter)
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.INFO)

logger = logging.getLogger(__name__)


# =============================================================================
# Middleware
# =============================================================================


def _format_body(body: bytes) -> str:
    try:
        return json.dumps(json.loads(body), indent=2, ensure_ascii=False) if body else "{}"
    except json.JSONDecodeError:
        return body.decode("utf-8", errors="replace")


class RequestResponseLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming requests and outgoing responses."""

    # Paths where we skip response logging (only log request payload)
    SKIP_RESPONSE_LOG_PATHS = {"/tools"}

    async def dispatch(self, request: Request, call_next):
        # Skip logging entirely for health checks to reduce noise
        if request.url.path == "/health" or not get_settings().log_request_bodies:
            return await call_next(request)

        request_body = await request.body()
        logger.info(
            f">>> INCOMING REQUEST: {request.method} {request.url.path}\n"
            f"Body:\n{_format_body(request_body)}"
        )

        response = await call_next(request)

        if request.url.path in self.SKIP_RESPONSE_LOG_PATHS:
            return response

        response_body = b""
        async for chunk in response.body_iterator:
            response_body += chunk

        logger.info(
            f"<<< OUTGOING RESPONSE: {request.method} {request.url.path} - Status: {response.status_code}\n"
            f"Body:\n{_format_body(response_body)}"
        )

        # Return a new response with the same body
        return Response(
            content=response_body,
            status_code=response.status_code,
            headers=dict(response.headers),
            media_type=response.media_type,
        )


class CORSHeadersMiddleware(BaseHTTPMiddleware):
    """Answer preflight requests and attach permissive CORS headers."""

    async def dispatch(self, request: Request, call_next):
        if request.method == "OPTIONS":
            return Response(status_code=200, headers=CORS_HEADERS)
        response = await call_next(request)
        response.headers.update(CORS_HEADERS)
        return response


# =============================================================================
# Lifespan Management
# =============================================================================


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Lifespan context manager for startup/shutdown."""
    logger.info("Starting calculator server...")
    await app_state.initialize(get_settings())
    logger.info("Calculator server startup complete")

    yield

    logger.info("Shutting down calculator server...")
    await app_state.cleanup()
    logger.info("Calculator server shutdown complete")


# =============================================================================
# FastAPI Application
# =============================================================================


app = FastAPI(
    title="Calculator Server",
    description="Natural-language calculator backed by model tool calling",
    version="0.1.0",
    lifespan=lifespan,
)

# Added last runs first: CORS wraps logging.
app.add_middleware(RequestResponseLoggingMiddleware)
app.add_middleware(CORSHeadersMiddleware)


def _error_response(error: CalculatorError) -> JSONResponse:
    reply = CalculationReply.failure(error.message, http_status=error.http_status)
    return JSONResponse(content=reply.to_payload(), status_code=reply.http_status)


@app.exception_handler(CalculatorError)
async def calculator_error_handler(request: Request, exc: CalculatorError) -> JSONResponse:
    logger.warning("Request failed (%s): %s", exc.category, exc.message)
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.warning("Invalid request body: %s", exc.errors())
    return _error_response(InvalidInput("Request body must be JSON of the form {\"message\": \"...\"}"))


async def get_orchestrator(settings: Settings) -> CalculationOrchestrator:
    http_client = await app_state.get_http_client()
    return CalculationOrchestrator(ModelClient.from_settings(http_client, settings))


# =============================================================================
# API Endpoints
# =============================================================================


@app.get("/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "healthy", "service": "calculator-server"}


@app.get("/tools", response_model=ToolsResponse)
async def list_tools() -> ToolsResponse:
    """Tool definitions offered to the model."""
    return ToolsResponse(tools=[op.to_tool_schema() for op in DEFAULT_CATALOG.list()])


@app.post("/calculate")
async def calculate(
    request: CalculateRequest,
    settings: Settings = Depends(get_settings),
) -> JSONResponse:
    """Answer an arithmetic question.

    Returns 200 for every completed protocol outcome, including narrated
    computation errors; 400, 402, 429 or 500 with an `error` field otherwise.
    """
    # Input is validated before the model client is configured.
    message = validate_message(request.message)
    orchestrator = await get_orchestrator(settings)
    reply = await orchestrator.handle(message)
    if reply.is_error:
        logger.info("Returning error reply with status %d", reply.http_status)
    return JSONResponse(content=reply.to_payload(), status_code=reply.http_status)


# =============================================================================
# Main Entry Point
# =============================================================================


def main() -> None:
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "calculator_server.server:app",
        host=settings.server_host,
        port=settings.server_port,
        log_level="info",
        reload=False,
        access_log=True,
        log_config={
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "()": "calculator_server.server.LocalTimeFormatter",
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
                "access": {
                    "()": "calculator_server.server.LocalTimeFormatter",
                    "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                    "datefmt": "%Y-%m-%d %H:%M:%S",
                },
            },
            "handlers": {
                "default": {
                    "formatter": "default",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                },
                "access": {
                    "formatter": "access",
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                },
            },
            "loggers": {
                "uvicorn": {"handlers": ["default"], "level": "INFO"},
                "uvicorn.error": {"level": "INFO"},
                "uvicorn.access": {"handlers": ["access"], "level": "INFO", "propagate": False},
            },
        },
    )


if __name__ == "__main__":
    main()
