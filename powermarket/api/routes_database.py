"""Database Status API Routes"""
from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse

from powermarket.api.dependencies import error_response, get_pipeline
from powermarket.services.pipeline import MarketPipeline

router = APIRouter(tags=["database"])


@router.get("/status")
def get_status(pipeline: MarketPipeline = Depends(get_pipeline)) -> JSONResponse:
    """Store summary: record count, time range and monthly distribution"""
    try:
        return JSONResponse(content=pipeline.status())
    except Exception as e:
        return error_response(e, "database status")
