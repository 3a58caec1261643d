"""
Weather Scoring Algorithm
=========================

Multi-criteria weather desirability using weighted evaluation:
- Rain amount (25%): less precipitation is better, 10 mm/day scores 0
- Rain chance (25%): lower precipitation probability is better
- Sunshine (30%): 12 sunshine hours per day is a perfect score
- Temperature (15%): step function around 22.5 C
- Wind (5%): calmer is better, 50 km/h scores 0

Missing daily values are excluded from every aggregate rather than being
counted as zero.

Author: Weather Chaser Team
"""

import logging
from dataclasses import replace
from typing import Dict, Iterable, List, Optional

from ..data_pipeline.data_models import DailyWeatherSeries, GridPoint, PointWeather, ScoredLocation
from ..utils.data_utils import average_valid, sum_valid
from ..utils.error_handler import InputValidationError

# Import configuration
from config import config


SORTABLE_KEYS = (
    "score", "avg_temp", "sun_hours_per_day", "total_rain_mm",
    "avg_rain_chance_pct", "avg_wind_speed", "avg_humidity",
)


def rank_locations(locations: Iterable[ScoredLocation], key: str = "score",
                   descending: bool = True) -> List[ScoredLocation]:
    """
    Stable-sort locations by a summary key and assign 1-based ranks

    Ties keep their prior relative order, so re-ranking an already ranked
    list yields identical ranks. Locations missing the key (e.g. humidity)
    sort last.

    Args:
        locations: Locations to order
        key (str): One of SORTABLE_KEYS
        descending (bool): Highest first when True

    Returns:
        List[ScoredLocation]: New list with ranks 1..N
    """
    if key not in SORTABLE_KEYS:
        raise InputValidationError(f"Cannot sort by '{key}'; expected one of {SORTABLE_KEYS}")

    items = list(locations)
    present = [loc for loc in items if getattr(loc, key) is not None]
    missing = [loc for loc in items if getattr(loc, key) is None]

    present.sort(key=lambda loc: getattr(loc, key), reverse=descending)

    return [replace(loc, rank=i + 1) for i, loc in enumerate(present + missing)]


class WeatherScorer:
    """
    Turns daily weather series into composite 0-100 desirability scores
    """

    def __init__(self, weights: Optional[Dict[str, float]] = None,
                 optimal_temperature: Optional[float] = None):
        """Initialize Weather Scorer with configuration weights"""
        self.logger = logging.getLogger(__name__)

        self.weights = weights or {
            'rain_amount': config.RAIN_AMOUNT_WEIGHT,    # 0.25
            'rain_chance': config.RAIN_CHANCE_WEIGHT,    # 0.25
            'sun': config.SUN_WEIGHT,                    # 0.30
            'temperature': config.TEMPERATURE_WEIGHT,    # 0.15
            'wind': config.WIND_WEIGHT                   # 0.05
        }
        self.optimal_temperature = (optimal_temperature if optimal_temperature is not None
                                    else config.OPTIMAL_TEMPERATURE)

    def score_locations(self, results: Iterable[PointWeather]) -> List[ScoredLocation]:
        """
        Score every point that has weather and rank them by score

        Args:
            results: Weather fetch results, failed points included

        Returns:
            List[ScoredLocation]: Ranked locations, best first
        """
        scored = []
        dropped = 0

        for result in results:
            if result.series is None or not result.series.has_data:
                dropped += 1
                continue
            scored.append(self.score_series(result.point, result.series))

        if dropped:
            self.logger.info(f"Dropped {dropped} points without weather data")

        ranked = rank_locations(scored, key="score")
        self.logger.info(f"Scored {len(ranked)} locations")
        return ranked

    def score_series(self, point: GridPoint, series: DailyWeatherSeries) -> ScoredLocation:
        """
        Score one point's weather series

        The returned location has rank 0 until the full set is ranked.
        """
        num_days = series.num_days
        if num_days <= 0:
            raise InputValidationError(f"Weather series for point {point.index} has no days")

        avg_temp_max = average_valid(series.temp_max)
        avg_temp_min = average_valid(series.temp_min)
        avg_temp = (avg_temp_max + avg_temp_min) / 2

        total_rain = sum_valid(series.precipitation_sum)
        avg_rain_per_day = total_rain / num_days
        avg_rain_chance = average_valid(series.precipitation_probability)

        total_sun_hours = sum_valid(series.sunshine_seconds) / 3600
        avg_sun_hours = total_sun_hours / num_days

        avg_wind = average_valid(series.wind_speed_max)
        avg_humidity = (average_valid(series.humidity, default=None)
                        if series.humidity is not None else None)

        rain_amount_score = max(0.0, 100 - avg_rain_per_day * 10)  # 10mm = 0 score
        rain_chance_score = max(0.0, 100 - avg_rain_chance)
        sun_score = min(100.0, (avg_sun_hours / 12) * 100)          # 12 hours = perfect
        temp_score = self.calculate_temp_score(avg_temp)
        wind_score = max(0.0, 100 - avg_wind * 2)                   # 50 km/h = 0 score

        total_score = (
            rain_amount_score * self.weights['rain_amount'] +
            rain_chance_score * self.weights['rain_chance'] +
            sun_score * self.weights['sun'] +
            temp_score * self.weights['temperature'] +
            wind_score * self.weights['wind']
        )
        total_score = min(100.0, max(0.0, round(total_score, 1)))

        return ScoredLocation(
            lat=point.lat,
            lon=point.lon,
            score=total_score,
            rank=0,
            avg_temp=round(avg_temp, 1),
            sun_hours_per_day=round(avg_sun_hours, 1),
            total_rain_mm=round(total_rain, 1),
            avg_rain_chance_pct=round(avg_rain_chance),
            avg_wind_speed=round(avg_wind, 1),
            avg_humidity=round(avg_humidity, 1) if avg_humidity is not None else None,
            raw_series=series,
            index=point.index
        )

    def calculate_temp_score(self, temp: float) -> float:
        """Step score by distance from the optimal temperature"""
        diff = abs(temp - self.optimal_temperature)

        if diff <= 2.5:
            return 100.0
        if diff <= 5:
            return 90.0
        if diff <= 10:
            return 70.0
        if diff <= 15:
            return 50.0
        if diff <= 20:
            return 30.0
        return 10.0

    def get_score_statistics(self, locations: List[ScoredLocation]) -> Dict:
        """
        Get summary statistics for a set of scored locations
        """
        if not locations:
            return {}

        scores = [loc.score for loc in locations]

        return {
            'count': len(scores),
            'min_score': min(scores),
            'max_score': max(scores),
            'avg_score': round(sum(scores) / len(scores), 1),
            'scores_above_50': sum(1 for s in scores if s > 50),
        }
