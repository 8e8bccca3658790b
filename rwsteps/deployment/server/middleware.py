"""
rwsteps/deployment/server/middleware.py
=======================================
Cross-cutting HTTP concerns: CORS, per-request timing, and the mapping
from rwsteps errors to JSON error bodies.

Error body:
    {"error": "MarkerNotFound", "message": "...", "context": {"pair_index": 0}}
"""
from __future__ import annotations
import time
import logging
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from rwsteps.core.exceptions import RwStepsError, UnknownRuleSet
from rwsteps.version import __version__

logger = logging.getLogger(__name__)

# First matching class wins; anything else is a 422.
_ERROR_STATUS = (
    (UnknownRuleSet, 404),
)


def error_status(exc: RwStepsError) -> int:
    for cls, status in _ERROR_STATUS:
        if isinstance(exc, cls):
            return status
    return 422


def error_body(exc: RwStepsError) -> dict:
    return {"error": type(exc).__name__, "message": str(exc), "context": exc.context}


def setup_middleware(app: FastAPI) -> None:
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
    )

    @app.middleware("http")
    async def time_requests(request: Request, call_next):
        started = time.perf_counter()
        response = await call_next(request)
        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Rwsteps-Version"] = __version__
        logger.info(f"{request.method} {request.url.path} {response.status_code} in {elapsed_ms:.1f}ms")
        return response

    @app.exception_handler(RwStepsError)
    async def translation_failed(request: Request, exc: RwStepsError):
        status = error_status(exc)
        logger.warning(f"{request.url.path} failed with {status}: {type(exc).__name__}: {exc}")
        return JSONResponse(status_code=status, content=error_body(exc))
