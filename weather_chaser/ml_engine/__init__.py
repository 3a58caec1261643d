"""
ML Engine Module
================

Core algorithms of a weather search:
- Grid generation over a center+radius or a drawn shape
- Weighted weather scoring and ranking
- Greedy multi-day route planning with distance and direction constraints

Classes:
    GridGenerator: Produces sample coordinates
    WeatherScorer: Converts weather series into 0-100 scores
    DistanceProvider: Road distance with great-circle fallback
    RoutePlanner: Builds day-by-day itineraries
"""

from .grid_generator import GridGenerator, point_in_polygon
from .weather_scorer import WeatherScorer, rank_locations
from .distance_provider import DistanceProvider
from .route_planner import RoutePlanner

__all__ = [
    "GridGenerator",
    "WeatherScorer",
    "DistanceProvider",
    "RoutePlanner",
    "point_in_polygon",
    "rank_locations",
]


def get_scoring_weights():
    """
    Return the configured scoring weights
    """
    from config import config
    return {
        "rain_amount": config.RAIN_AMOUNT_WEIGHT,    # 0.25
        "rain_chance": config.RAIN_CHANCE_WEIGHT,    # 0.25
        "sun": config.SUN_WEIGHT,                    # 0.30
        "temperature": config.TEMPERATURE_WEIGHT,    # 0.15
        "wind": config.WIND_WEIGHT                   # 0.05
    }


def get_routing_params():
    """
    Return the configured route planning parameters
    """
    from config import config
    return {
        "direction_penalty": config.DIRECTION_PENALTY,
        "efficiency_bonus_max": config.EFFICIENCY_BONUS_MAX,
        "average_driving_speed_kmh": config.AVERAGE_DRIVING_SPEED_KMH,
        "road_prefilter_factor": config.ROAD_PREFILTER_FACTOR,
    }
