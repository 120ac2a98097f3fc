from pydantic import BaseModel, ConfigDict, Field
from datetime import datetime
from typing import Any, Dict, List, Literal

Strategy = Literal["AGGRESSIVE", "CONSERVATIVE"]
RiskLevel = Literal["LOW", "MEDIUM", "HIGH"]


class CostModel(BaseModel):
    # Wire names are camelCase (generationCost); snake_case is accepted too.
    model_config = ConfigDict(frozen=True, populate_by_name=True, allow_inf_nan=False)

    generation_cost: float = Field(375.0, ge=0, alias="generationCost")
    upward_cost: float = Field(530.0, ge=0, alias="upwardCost")
    downward_cost: float = Field(310.0, ge=0, alias="downwardCost")


class BidDecision(BaseModel):
    model_config = ConfigDict(frozen=True)

    time_period: datetime
    bid_price: float
    bid_capacity: float
    expected_profit: float
    predicted_price: float


class OptimizationResult(BaseModel):
    expected_profit: float
    optimal_capacity: float
    strategy: Strategy
    risk_level: RiskLevel
    bidding_schedule: List[BidDecision]
    optimization_info: Dict[str, Any] = Field(default_factory=dict)
