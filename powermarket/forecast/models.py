from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import List


class ForecastRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    prediction_date: datetime = datetime(2025, 7, 1)
    prediction_hours: int = 96      # number of 15-minute points, despite the name
    confidence_level: float = 0.95


class ForecastPoint(BaseModel):
    model_config = ConfigDict(frozen=True, allow_inf_nan=False)

    timestamp: datetime
    predicted_price: float
    confidence_lower: float
    confidence_upper: float
    confidence_level: float


class ForecastStatistics(BaseModel):
    average_price: float
    total_points: int
    confidence_level: float
    based_on_real_data: bool = True
    real_data_points: int


class ForecastResult(BaseModel):
    predictions: List[ForecastPoint]
    statistics: ForecastStatistics
    base_price: float
    price_spread: float
    window_size: int = Field(description="Observations the statistics were computed from")
