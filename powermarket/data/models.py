from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Dict, Optional


class Observation(BaseModel):
    model_config = ConfigDict(frozen=True)

    timestamp: datetime
    price: float
    load: float = 0.0
    demand: float = 0.0
    supply: float = 0.0


class TimeRange(BaseModel):
    start: datetime
    end: datetime


class StoreStatus(BaseModel):
    model_config = ConfigDict(frozen=True)

    count: int
    min_timestamp: Optional[datetime] = None
    max_timestamp: Optional[datetime] = None
    time_range: Optional[TimeRange] = None  # first/last in store order
    monthly_distribution: Dict[str, int] = Field(default_factory=dict)
