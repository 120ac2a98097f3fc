"""Price Forecast API Routes"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from powermarket.api.dependencies import error_response, get_pipeline
from powermarket.services.pipeline import MarketPipeline

router = APIRouter(tags=["forecast"])


@router.post("")
@router.post("/")
def predict(
    payload: Optional[Dict[str, Any]] = Body(None),
    pipeline: MarketPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Price forecast from the recent observation window"""
    try:
        config = (payload or {}).get("config")
        return JSONResponse(content=pipeline.predict(config))
    except Exception as e:
        return error_response(e, "predict")
