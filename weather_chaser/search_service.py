"""
Weather Search Service
======================

Runs a full search cycle: resolve the area, generate grid points, fetch
weather for every point, score and rank the results, and optionally plan a
route over them. Nothing is kept between searches.

Author: Weather Chaser Team
"""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Union

from .data_pipeline.data_models import Coordinates, GeoShape, GridPoint, Route, ScoredLocation
from .data_pipeline.geocoder import Geocoder
from .data_pipeline.weather_loader import WeatherDataLoader
from .ml_engine.grid_generator import GridGenerator
from .ml_engine.route_planner import RoutePlanner
from .ml_engine.weather_scorer import WeatherScorer
from .utils.error_handler import InputValidationError, NoUsableDataError

# Import configuration
from config import config


@dataclass(frozen=True)
class SearchResult:
    """
    Outcome of one search

    Attributes:
        center (Coordinates): Search center, None for drawn areas
        grid_points (List[GridPoint]): Points that were queried
        locations (List[ScoredLocation]): Ranked locations, best first
        failed_points (int): Points without usable weather
    """
    center: Optional[Coordinates]
    grid_points: List[GridPoint] = field(default_factory=list)
    locations: List[ScoredLocation] = field(default_factory=list)
    failed_points: int = 0

    def to_dict(self):
        return {
            "center": self.center.to_dict() if self.center else None,
            "grid_points": len(self.grid_points),
            "failed_points": self.failed_points,
            "locations": [loc.to_dict() for loc in self.locations],
        }


class WeatherSearchService:
    """
    Orchestrates geocoding, grid generation, weather retrieval, scoring and routing
    """

    def __init__(self, geocoder: Optional[Geocoder] = None,
                 weather_loader: Optional[WeatherDataLoader] = None,
                 grid_generator: Optional[GridGenerator] = None,
                 scorer: Optional[WeatherScorer] = None,
                 route_planner: Optional[RoutePlanner] = None):
        self.logger = logging.getLogger(__name__)
        self.geocoder = geocoder or Geocoder()
        self.weather_loader = weather_loader or WeatherDataLoader()
        self.grid_generator = grid_generator or GridGenerator()
        self.scorer = scorer or WeatherScorer()
        self._route_planner = route_planner

    def search_location(self, location: str,
                        radius_km: float = None,
                        grid_size: int = None,
                        days: int = None) -> SearchResult:
        """
        Search around a place name or "lat,lon"

        Raises:
            InputValidationError: Invalid parameters
            GeocodingError: Location could not be resolved
            NoUsableDataError: No grid point returned weather
        """
        radius_km = radius_km if radius_km is not None else config.DEFAULT_RADIUS_KM
        grid_size = grid_size if grid_size is not None else config.DEFAULT_GRID_SIZE
        days = days if days is not None else config.DEFAULT_FORECAST_DAYS

        center = self.geocoder.geocode(location)
        points = self.grid_generator.generate_from_center(center.lat, center.lon,
                                                          radius_km, grid_size)
        return self._run(points, days, center)

    def search_area(self, shape: Optional[GeoShape], grid_size: int = None,
                    days: int = None) -> SearchResult:
        """Search inside a drawn rectangle or polygon"""
        grid_size = grid_size if grid_size is not None else config.DEFAULT_GRID_SIZE
        days = days if days is not None else config.DEFAULT_FORECAST_DAYS

        points = self.grid_generator.generate_from_shape(shape, grid_size)
        if not points:
            raise InputValidationError("The drawn area contains no grid points")
        return self._run(points, days, None)

    def _run(self, points: List[GridPoint], days: int,
             center: Optional[Coordinates]) -> SearchResult:
        results = self.weather_loader.fetch_weather_for_grid(points, days)
        locations = self.scorer.score_locations(results)

        if not locations:
            raise NoUsableDataError(
                f"No usable weather data for any of the {len(points)} grid points"
            )

        return SearchResult(
            center=center,
            grid_points=points,
            locations=locations,
            failed_points=len(points) - len(locations)
        )

    @property
    def route_planner(self) -> RoutePlanner:
        # Built lazily so searches never construct a routing client
        if self._route_planner is None:
            self._route_planner = RoutePlanner()
        return self._route_planner

    def build_route(self, locations: Sequence[ScoredLocation],
                    max_travel_per_day_km: float, total_days: int,
                    start: Union[None, int, Coordinates] = None) -> Route:
        """
        Plan a route over search results

        Args:
            locations: Ranked locations from a search
            max_travel_per_day_km (float): Daily travel budget
            total_days (int): Trip length
            start: None to start at the best location, an index into
                ``locations`` or a coordinate pair to start from

        Returns:
            Route: Planned route, infeasible when constraints cannot be met
        """
        explicit_start = None
        if isinstance(start, bool):
            raise InputValidationError(f"Invalid start location: {start}")
        if isinstance(start, int):
            if not 0 <= start < len(locations):
                raise InputValidationError(f"Start location index {start} is out of range")
            selected = locations[start]
            explicit_start = Coordinates(lat=selected.lat, lon=selected.lon)
        elif start is not None:
            explicit_start = start

        return self.route_planner.build_route(locations, max_travel_per_day_km,
                                              total_days, explicit_start)
