"""Bid Optimization API Routes"""
from typing import Any, Dict, Optional

from fastapi import APIRouter, Body, Depends
from fastapi.responses import JSONResponse

from powermarket.api.dependencies import error_response, get_pipeline
from powermarket.services.pipeline import MarketPipeline

router = APIRouter(tags=["optimize"])


@router.post("")
@router.post("/")
def optimize(
    payload: Optional[Dict[str, Any]] = Body(None),
    pipeline: MarketPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Bidding schedule for a forecast under a cost model"""
    try:
        payload = payload or {}
        result = pipeline.optimize(payload.get("predictions"), payload.get("config"))
        return JSONResponse(content=result)
    except Exception as e:
        return error_response(e, "optimize")
