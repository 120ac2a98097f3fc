import logging

from fastapi import Request
from fastapi.responses import JSONResponse

from powermarket.exceptions import DataUnavailable, InvalidRequest
from powermarket.services.pipeline import MarketPipeline

logger = logging.getLogger(__name__)


def get_pipeline(request: Request) -> MarketPipeline:
    return request.app.state.pipeline


def error_response(error: Exception, operation: str) -> JSONResponse:
    """Map a failure to a status code: 400 bad input, 503 no data, 500 otherwise."""
    if isinstance(error, InvalidRequest):
        status_code = 400
        logger.warning(f"[API] {operation}: invalid request: {error}")
    elif isinstance(error, DataUnavailable):
        status_code = 503
        logger.warning(f"[API] {operation}: data unavailable: {error}")
    else:
        status_code = 500
        logger.error(f"[API] {operation} failed: {error}", exc_info=error)

    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": str(error), "error_type": type(error).__name__},
    )
