"""Custom exceptions and centralized FastAPI error handlers."""

import logging

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class GemCalculatorError(Exception):
    """Base exception with HTTP status code."""

    def __init__(self, message: str, status_code: int = 500):
        super().__init__(message)
        self.status_code = status_code


class UpstreamError(GemCalculatorError):
    """Upstream provider answered, but not with something we can use."""

    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider} error: {detail}", status_code=502)
        self.provider = provider


class UpstreamUnavailableError(GemCalculatorError):
    def __init__(self, provider: str, detail: str):
        super().__init__(f"{provider} unavailable: {detail}", status_code=503)
        self.provider = provider


def register_error_handlers(app: FastAPI) -> None:
    """Map calculator, cache and validation failures to JSON error bodies."""

    @app.exception_handler(GemCalculatorError)
    async def upstream_failure(_request: Request, exc: GemCalculatorError):
        body = {"error": str(exc)}
        if isinstance(exc, (UpstreamError, UpstreamUnavailableError)):
            body["provider"] = exc.provider
        return JSONResponse(body, status_code=exc.status_code)

    @app.exception_handler(ValueError)
    async def bad_parameters(_request: Request, exc: ValueError):
        return JSONResponse({"error": str(exc)}, status_code=400)

    @app.exception_handler(OSError)
    async def cache_storage_failure(request: Request, exc: OSError):
        # Only the disk cache does file I/O while serving.
        logger.error("Cache storage failure on %s %s: %s", request.method, request.url.path, exc)
        return JSONResponse({"error": f"Cache storage error: {exc.strerror or exc}"}, status_code=500)

    @app.exception_handler(Exception)
    async def unhandled(request: Request, exc: Exception):
        logger.exception("Unhandled error on %s %s", request.method, request.url.path)
        return JSONResponse({"error": "Gem calculator failed to handle the request"}, status_code=500)
