"""Historical Prices API Routes"""
from fastapi import APIRouter, Depends, Query
from fastapi.responses import JSONResponse

from powermarket.api.dependencies import error_response, get_pipeline
from powermarket.services.pipeline import MarketPipeline

router = APIRouter(tags=["historical"])


@router.get("")
@router.get("/")
def get_historical_prices(
    time_range: str = Query("1d", alias="timeRange", description="One of 1d, 7d, 30d, all"),
    include_predictions: bool = Query(False, alias="includePredictions"),
    pipeline: MarketPipeline = Depends(get_pipeline),
) -> JSONResponse:
    """Most recent observations in the range, with min/max/mean price"""
    try:
        result = pipeline.historical(time_range=time_range, include_predictions=include_predictions)
        return JSONResponse(content=result)
    except Exception as e:
        return error_response(e, "historical prices")
