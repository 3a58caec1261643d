"""
Search Service Tests
====================

Runs whole search cycles with fake collaborators in place of the HTTP
services.

Usage:
    pytest test_search_service.py

Author: Weather Chaser Team
"""

from unittest.mock import MagicMock

import pytest

from weather_chaser.data_pipeline.data_models import (
    Coordinates, DailyWeatherSeries, GeoShape, PointWeather
)
from weather_chaser.ml_engine.distance_provider import DistanceProvider
from weather_chaser.ml_engine.route_planner import RoutePlanner
from weather_chaser.search_service import WeatherSearchService
from weather_chaser.utils.error_handler import (
    GeocodingError, InputValidationError, NoUsableDataError
)


def make_series(sun_hours):
    return DailyWeatherSeries(
        dates=("2026-07-01", "2026-07-02"),
        temp_max=(25.0, 25.0),
        temp_min=(20.0, 20.0),
        precipitation_sum=(0.0, 0.0),
        precipitation_probability=(0.0, 0.0),
        sunshine_seconds=(sun_hours * 3600,) * 2,
        wind_speed_max=(5.0, 5.0),
    )


class FakeWeatherLoader:
    """Returns weather for every point except those whose index is listed as failing"""

    def __init__(self, failing=()):
        self.failing = set(failing)
        self.requests = []

    def fetch_weather_for_grid(self, points, days):
        self.requests.append((len(points), days))
        return [
            PointWeather(point=p, series=None if p.index in self.failing
                         else make_series(sun_hours=p.index % 12))
            for p in points
        ]


def make_service(loader=None, geocoder=None):
    if geocoder is None:
        geocoder = MagicMock()
        geocoder.geocode.return_value = Coordinates(lat=46.9480, lon=7.4474)
    planner = RoutePlanner(distance_provider=DistanceProvider(road_router=None))
    return WeatherSearchService(
        geocoder=geocoder,
        weather_loader=loader or FakeWeatherLoader(),
        route_planner=planner,
    )


def test_search_location_scores_and_ranks_points():
    loader = FakeWeatherLoader(failing={0, 5})
    service = make_service(loader)

    result = service.search_location("Bern", radius_km=50, grid_size=9, days=2)

    assert result.center == Coordinates(lat=46.9480, lon=7.4474)
    assert len(result.grid_points) == 9
    assert result.failed_points == 2
    assert len(result.locations) == 7
    assert [loc.rank for loc in result.locations] == list(range(1, 8))
    scores = [loc.score for loc in result.locations]
    assert scores == sorted(scores, reverse=True)
    assert result.locations[0].index == 8  # most sunshine
    assert loader.requests == [(9, 2)]


def test_search_location_propagates_geocoding_errors():
    geocoder = MagicMock()
    geocoder.geocode.side_effect = GeocodingError("Location not found")
    loader = FakeWeatherLoader()

    with pytest.raises(GeocodingError):
        make_service(loader, geocoder).search_location("Atlantis", 50, 9, 2)
    assert loader.requests == []


def test_search_fails_when_every_point_fails():
    loader = FakeWeatherLoader(failing=set(range(9)))
    with pytest.raises(NoUsableDataError):
        make_service(loader).search_location("Bern", 50, 9, 2)


def test_search_area_uses_drawn_shape():
    service = make_service()
    shape = GeoShape.rectangle(south=46.0, west=7.0, north=47.0, east=8.0)

    result = service.search_area(shape, grid_size=16, days=3)

    assert result.center is None
    assert len(result.grid_points) == 16
    assert result.to_dict()["grid_points"] == 16


def test_search_area_requires_shape():
    with pytest.raises(InputValidationError):
        make_service().search_area(None, grid_size=9, days=2)


def test_build_route_from_search_results():
    service = make_service()
    result = service.search_location("Bern", radius_km=20, grid_size=9, days=2)

    route = service.build_route(result.locations, max_travel_per_day_km=100, total_days=3)

    assert route.is_feasible
    assert [stop.day for stop in route.stops] == [1, 2, 3]
    assert route.stops[0].location == result.locations[0]
    assert len({stop.location.index for stop in route.stops}) == 3


def test_build_route_with_start_index():
    service = make_service()
    result = service.search_location("Bern", radius_km=20, grid_size=9, days=2)

    route = service.build_route(result.locations, 100, 2, start=2)

    assert [stop.day for stop in route.stops] == [1, 2]
    with pytest.raises(InputValidationError):
        service.build_route(result.locations, 100, 2, start=len(result.locations))
    with pytest.raises(InputValidationError):
        service.build_route(result.locations, 100, 2, start=True)
