"""
Request-level error handlers shared by the API app.
"""
import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


def _describe(error: dict) -> str:
    loc = ".".join(str(part) for part in error.get("loc", ()) if part != "body")
    msg = error.get("msg", "invalid value")
    return f"{loc}: {msg}" if loc else msg


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed form input is a client error like any other validation failure."""
    detail = "; ".join(_describe(e) for e in exc.errors()) or "Invalid request"
    logger.debug("Rejected %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(status_code=400, content={"detail": detail})


def register_error_handlers(app: FastAPI) -> None:
    app.add_exception_handler(RequestValidationError, request_validation_handler)
