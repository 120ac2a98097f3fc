import logging
import math
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

from powermarket.data.models import Observation
from powermarket.exceptions import DataUnavailable, InvalidRequest
from powermarket.forecast.models import ForecastPoint, ForecastRequest, ForecastResult, ForecastStatistics
from powermarket.forecast.noise import NoiseSource, UniformNoise

logger = logging.getLogger(__name__)


class ForecastEngine:
    """Seasonal-heuristic price forecast.

    The window mean is scaled by an hour-of-day / day-of-week factor and
    perturbed by noise proportional to the window's price spread. The
    confidence band half-width shrinks as the requested confidence grows.
    """

    def __init__(
        self,
        window_size: int = 168,
        interval: timedelta = timedelta(minutes=15),
        morning_peak_hours: range = range(8, 11),    # 08:00-10:59
        evening_peak_hours: range = range(18, 21),   # 18:00-20:59
        morning_peak_factor: float = 1.2,
        evening_peak_factor: float = 1.3,
        weekend_factor: float = 0.9,
        noise_scale: float = 0.3,
        noise: Optional[NoiseSource] = None,
    ) -> None:
        self.window_size = window_size
        self.interval = interval
        self.morning_peak_hours = morning_peak_hours
        self.evening_peak_hours = evening_peak_hours
        self.morning_peak_factor = morning_peak_factor
        self.evening_peak_factor = evening_peak_factor
        self.weekend_factor = weekend_factor
        self.noise_scale = noise_scale
        self.noise = noise if noise is not None else UniformNoise()

    def time_factor(self, timestamp: datetime) -> float:
        # Each band is a separate multiplier; they compound if bands ever overlap.
        factor = 1.0
        if timestamp.hour in self.morning_peak_hours:
            factor *= self.morning_peak_factor
        if timestamp.hour in self.evening_peak_hours:
            factor *= self.evening_peak_factor
        if timestamp.weekday() >= 5:
            factor *= self.weekend_factor
        return factor

    def _validate(self, request: ForecastRequest):
        if request.prediction_hours <= 0:
            raise InvalidRequest(f"prediction_hours must be positive, got {request.prediction_hours}")
        level = request.confidence_level
        if math.isnan(level) or not 0.0 < level < 1.0:
            raise InvalidRequest(f"confidence_level must be in (0, 1), got {level}")
        try:
            request.prediction_date + (request.prediction_hours - 1) * self.interval
        except OverflowError:
            raise InvalidRequest(
                f"{request.prediction_hours} points from {request.prediction_date.isoformat()} "
                f"run past the latest representable date"
            )

    def forecast(
        self,
        window: Sequence[Observation],
        request: ForecastRequest,
        real_data_points: Optional[int] = None,
    ) -> ForecastResult:
        if not window:
            raise DataUnavailable("No historical data loaded")
        self._validate(request)

        prices = [obs.price for obs in window]
        base_price = sum(prices) / len(prices)
        var = sum((p - base_price) ** 2 for p in prices) / len(prices)
        price_spread = math.sqrt(var)
        if not (math.isfinite(base_price) and math.isfinite(price_spread)):
            raise DataUnavailable("Historical prices are outside the representable numeric range")

        confidence_range = price_spread * (1.0 - request.confidence_level) * 2.0
        noise_amplitude = self.noise_scale * price_spread

        predictions: List[ForecastPoint] = []
        for i in range(request.prediction_hours):
            timestamp = request.prediction_date + i * self.interval
            predicted = base_price * self.time_factor(timestamp) + self.noise.draw(noise_amplitude)
            predicted = max(0.0, predicted)

            predictions.append(
                ForecastPoint(
                    timestamp=timestamp,
                    predicted_price=predicted,
                    confidence_lower=max(0.0, predicted - confidence_range),
                    confidence_upper=predicted + confidence_range,
                    confidence_level=request.confidence_level,
                )
            )

        average_price = sum(p.predicted_price for p in predictions) / len(predictions)
        logger.info(
            f"[Forecast] {len(predictions)} points from {len(window)} observations, "
            f"average predicted price {average_price:.2f}"
        )

        return ForecastResult(
            predictions=predictions,
            statistics=ForecastStatistics(
                average_price=average_price,
                total_points=len(predictions),
                confidence_level=request.confidence_level,
                based_on_real_data=True,
                real_data_points=real_data_points if real_data_points is not None else len(window),
            ),
            base_price=base_price,
            price_spread=price_spread,
            window_size=len(window),
        )
