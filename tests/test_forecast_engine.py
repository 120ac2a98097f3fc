import math
from datetime import datetime, timedelta

import pytest

from conftest import make_observations
from powermarket.exceptions import DataUnavailable, InvalidRequest
from powermarket.forecast.engine import ForecastEngine
from powermarket.forecast.models import ForecastRequest
from powermarket.forecast.noise import UniformNoise, ZeroNoise

WINDOW = make_observations([100.0, 110.0, 90.0, 105.0])
BASE_PRICE = 101.25
SPREAD = math.sqrt(54.6875)  # population std of the window

TUESDAY = datetime(2025, 7, 1)
SATURDAY = datetime(2025, 7, 5)


class FixedNoise:
    def __init__(self, value):
        self.value = value

    def draw(self, amplitude):
        return self.value


def request(start=TUESDAY, hours=4, confidence=0.95):
    return ForecastRequest(prediction_date=start, prediction_hours=hours, confidence_level=confidence)


class TestTimeFactor:
    def test_morning_peak(self, engine):
        assert engine.time_factor(TUESDAY.replace(hour=8)) == 1.2
        assert engine.time_factor(TUESDAY.replace(hour=10, minute=45)) == 1.2

    def test_evening_peak(self, engine):
        assert engine.time_factor(TUESDAY.replace(hour=18)) == 1.3
        assert engine.time_factor(TUESDAY.replace(hour=20, minute=45)) == 1.3

    def test_off_peak_weekday(self, engine):
        assert engine.time_factor(TUESDAY.replace(hour=3)) == 1.0
        assert engine.time_factor(TUESDAY.replace(hour=11)) == 1.0
        assert engine.time_factor(TUESDAY.replace(hour=21)) == 1.0

    def test_weekend(self, engine):
        assert engine.time_factor(SATURDAY.replace(hour=3)) == 0.9
        assert engine.time_factor(SATURDAY.replace(hour=9)) == pytest.approx(1.2 * 0.9)
        assert engine.time_factor((SATURDAY + timedelta(days=1)).replace(hour=19)) == pytest.approx(1.3 * 0.9)

    def test_overlapping_bands_compound(self):
        engine = ForecastEngine(morning_peak_hours=range(8, 20), noise=ZeroNoise())
        assert engine.time_factor(TUESDAY.replace(hour=18)) == pytest.approx(1.2 * 1.3)


class TestForecast:
    def test_single_morning_point_without_noise(self, engine):
        result = engine.forecast(WINDOW, request(start=TUESDAY.replace(hour=9), hours=1))

        assert len(result.predictions) == 1
        point = result.predictions[0]
        assert point.predicted_price == pytest.approx(121.5)
        assert result.base_price == pytest.approx(BASE_PRICE)
        assert result.price_spread == pytest.approx(SPREAD)

    def test_confidence_band(self, engine):
        result = engine.forecast(WINDOW, request(hours=1, confidence=0.95))
        point = result.predictions[0]
        half_width = SPREAD * 0.05 * 2

        assert point.predicted_price == pytest.approx(BASE_PRICE)
        assert point.confidence_lower == pytest.approx(BASE_PRICE - half_width)
        assert point.confidence_upper == pytest.approx(BASE_PRICE + half_width)
        assert point.confidence_level == 0.95

    def test_horizon_and_spacing(self, engine):
        start = TUESDAY.replace(hour=7, minute=30)
        result = engine.forecast(WINDOW, request(start=start, hours=96))

        timestamps = [p.timestamp for p in result.predictions]
        assert len(timestamps) == 96
        assert timestamps[0] == start
        assert all(b - a == timedelta(minutes=15) for a, b in zip(timestamps, timestamps[1:]))

    def test_bounds_hold_with_random_noise(self):
        engine = ForecastEngine(noise=UniformNoise(seed=7))
        result = engine.forecast(WINDOW, request(hours=200, confidence=0.5))

        for point in result.predictions:
            assert 0 <= point.confidence_lower <= point.predicted_price <= point.confidence_upper

    def test_noise_stays_within_bound(self):
        engine = ForecastEngine(noise=UniformNoise(seed=11))
        result = engine.forecast(WINDOW, request(start=TUESDAY.replace(hour=8), hours=48))

        for point in result.predictions:
            expected = BASE_PRICE * engine.time_factor(point.timestamp)
            assert abs(point.predicted_price - expected) <= 0.3 * SPREAD

    def test_seeded_noise_is_repeatable(self):
        first = ForecastEngine(noise=UniformNoise(seed=3)).forecast(WINDOW, request())
        second = ForecastEngine(noise=UniformNoise(seed=3)).forecast(WINDOW, request())
        assert first.predictions == second.predictions

    def test_negative_prediction_is_clamped(self):
        engine = ForecastEngine(noise=FixedNoise(-1000.0))
        result = engine.forecast(WINDOW, request(hours=1))
        point = result.predictions[0]

        assert point.predicted_price == 0.0
        assert point.confidence_lower == 0.0
        assert point.confidence_upper == pytest.approx(SPREAD * 0.05 * 2)

    def test_flat_window_has_zero_width_band(self, engine):
        result = engine.forecast(make_observations([50.0] * 10), request(hours=2))
        for point in result.predictions:
            assert point.confidence_lower == point.predicted_price == point.confidence_upper

    def test_statistics(self, engine):
        result = engine.forecast(WINDOW, request(hours=4), real_data_points=5000)
        stats = result.statistics

        assert stats.total_points == 4
        assert stats.confidence_level == 0.95
        assert stats.based_on_real_data is True
        assert stats.real_data_points == 5000
        assert stats.average_price == pytest.approx(
            sum(p.predicted_price for p in result.predictions) / 4
        )
        assert result.window_size == 4


class TestForecastFailures:
    def test_empty_window(self, engine):
        with pytest.raises(DataUnavailable):
            engine.forecast([], request())

    @pytest.mark.parametrize("hours", [0, -5])
    def test_non_positive_horizon(self, engine, hours):
        with pytest.raises(InvalidRequest):
            engine.forecast(WINDOW, request(hours=hours))

    @pytest.mark.parametrize("confidence", [0.0, 1.0, -0.1, 1.5, float("nan")])
    def test_confidence_outside_open_interval(self, engine, confidence):
        with pytest.raises(InvalidRequest):
            engine.forecast(WINDOW, request(confidence=confidence))

    def test_horizon_past_latest_date(self, engine):
        with pytest.raises(InvalidRequest):
            engine.forecast(WINDOW, request(start=datetime(9999, 12, 31, 23), hours=96))

    def test_last_representable_slot_is_accepted(self, engine):
        result = engine.forecast(WINDOW, request(start=datetime(9999, 12, 31, 23), hours=4))
        assert result.predictions[-1].timestamp == datetime(9999, 12, 31, 23, 45)

    def test_window_too_large_to_average(self, engine):
        with pytest.raises(DataUnavailable):
            engine.forecast(make_observations([1.7e308, 1.7e308]), request())
