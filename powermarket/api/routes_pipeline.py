"""Pipeline Run API Routes"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from powermarket.api.dependencies import error_response, get_pipeline
from powermarket.services.pipeline import MarketPipeline

router = APIRouter(tags=["pipeline"])


@router.post("/run")
def run_pipeline(
    payload: Optional[Dict[str, Any]] = Body(None),
    pipeline: MarketPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Forecast followed by bid optimization in one call"""
    try:
        return JSONResponse(content=pipeline.run((payload or {}).get("config")))
    except Exception as e:
        return error_response(e, "pipeline run")
