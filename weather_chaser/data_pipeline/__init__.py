"""
Data Pipeline Module
===================

External collaborators of a search: geocoding, weather retrieval and road
routing, plus the shared data models.

Author: Weather Chaser Team
"""

from .data_models import (
    Coordinates, GridPoint, GeoShape, DailyWeatherSeries, PointWeather,
    ScoredLocation, RoadInfo, TravelLeg, RouteStop, Route
)
from .geocoder import Geocoder
from .weather_loader import WeatherDataLoader, WeatherAnalyzer
from .road_router import OSRMRouter

__all__ = [
    # Collaborators
    "Geocoder",
    "WeatherDataLoader",
    "WeatherAnalyzer",
    "OSRMRouter",

    # Data models
    "Coordinates",
    "GridPoint",
    "GeoShape",
    "DailyWeatherSeries",
    "PointWeather",
    "ScoredLocation",
    "RoadInfo",
    "TravelLeg",
    "RouteStop",
    "Route",
]
