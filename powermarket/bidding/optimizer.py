import logging
import math
from typing import List, Sequence

from powermarket.bidding.models import BidDecision, CostModel, OptimizationResult
from powermarket.exceptions import InvalidRequest
from powermarket.forecast.models import ForecastPoint

logger = logging.getLogger(__name__)


class BidOptimizer:
    def __init__(
        self,
        base_capacity: float = 100.0,           # MW
        high_price_ratio: float = 1.5,          # predicted > cost * 1.5 -> high-price period
        high_price_capacity: float = 150.0,
        high_price_discount: float = 0.95,      # undercut to raise clearing probability
        low_price_ratio: float = 1.2,           # predicted < cost * 1.2 -> low-price period
        low_price_capacity: float = 50.0,
        low_price_floor_ratio: float = 1.1,     # never bid below cost * 1.1 in low-price periods
        low_price_discount: float = 0.9,
        high_risk_ratio: float = 1.10,
        medium_risk_ratio: float = 1.05,
    ) -> None:
        self.base_capacity = base_capacity
        self.high_price_ratio = high_price_ratio
        self.high_price_capacity = high_price_capacity
        self.high_price_discount = high_price_discount
        self.low_price_ratio = low_price_ratio
        self.low_price_capacity = low_price_capacity
        self.low_price_floor_ratio = low_price_floor_ratio
        self.low_price_discount = low_price_discount
        self.high_risk_ratio = high_risk_ratio
        self.medium_risk_ratio = medium_risk_ratio

    def decide(self, point: ForecastPoint, cost: CostModel) -> BidDecision:
        """Bid for a single period; no state is carried between periods."""
        predicted = point.predicted_price
        generation_cost = cost.generation_cost

        bid_price = predicted
        bid_capacity = self.base_capacity

        if predicted > generation_cost * self.high_price_ratio:
            bid_capacity = self.high_price_capacity
            bid_price = predicted * self.high_price_discount
        elif predicted < generation_cost * self.low_price_ratio:
            bid_capacity = self.low_price_capacity
            bid_price = max(generation_cost * self.low_price_floor_ratio, predicted * self.low_price_discount)

        return BidDecision(
            time_period=point.timestamp,
            bid_price=bid_price,
            bid_capacity=bid_capacity,
            expected_profit=(bid_price - generation_cost) * bid_capacity,
            predicted_price=predicted,
        )

    def classify_risk(self, avg_bid_price: float, avg_predicted_price: float) -> str:
        if avg_bid_price > avg_predicted_price * self.high_risk_ratio:
            return "HIGH"
        if avg_bid_price > avg_predicted_price * self.medium_risk_ratio:
            return "MEDIUM"
        return "LOW"

    def optimize(self, forecast: Sequence[ForecastPoint], cost: CostModel) -> OptimizationResult:
        if not forecast:
            raise InvalidRequest("Forecast sequence is empty")

        schedule: List[BidDecision] = [self.decide(point, cost) for point in forecast]

        total_profit = sum(d.expected_profit for d in schedule)
        if not math.isfinite(total_profit):
            raise InvalidRequest("Expected profit overflows; prices or costs are too large")
        avg_capacity = sum(d.bid_capacity for d in schedule) / len(schedule)
        avg_bid_price = sum(d.bid_price for d in schedule) / len(schedule)
        avg_predicted_price = sum(p.predicted_price for p in forecast) / len(forecast)

        strategy = "AGGRESSIVE" if total_profit > 0 else "CONSERVATIVE"
        risk_level = self.classify_risk(avg_bid_price, avg_predicted_price)

        logger.info(
            f"[Optimizer] {len(schedule)} periods, expected profit {total_profit:.0f}, "
            f"strategy {strategy}, risk {risk_level}"
        )

        # upward/downward costs are reported back but do not affect the bids
        return OptimizationResult(
            expected_profit=total_profit,
            optimal_capacity=avg_capacity,
            strategy=strategy,
            risk_level=risk_level,
            bidding_schedule=schedule,
            optimization_info={
                "algorithm": "threshold bidding on forecast price",
                "based_on_real_data": True,
                "cost_parameters": cost.model_dump(by_alias=True),
            },
        )
