"""
Route Planning Algorithm
========================

Greedy multi-day itinerary over scored locations, one stop per day:
- Starts at the best-scoring location, or from an explicit start position
- Each day moves to the reachable unvisited location with the highest
  suitability = weather score + distance efficiency bonus - direction penalty
- Respects a per-day travel budget; road distances preferred, great-circle
  distance as fallback
- Penalizes candidates that would make the route backtrack

The day loop is sequential because each choice depends on the previous
day's position.

Author: Weather Chaser Team
"""

import logging
from typing import Dict, List, Optional, Sequence, Tuple, Union

from ..data_pipeline.data_models import Coordinates, Route, RouteStop, ScoredLocation, TravelLeg
from ..data_pipeline.weather_loader import WeatherAnalyzer
from ..utils.data_utils import format_duration
from ..utils.error_handler import InputValidationError
from .distance_provider import DistanceProvider

# Import configuration
from config import config


INFEASIBLE_MESSAGE = "Could not build a valid route with the given constraints"
GOOGLE_MAPS_DIR_URL = "https://www.google.com/maps/dir/"
GOOGLE_MAPS_PLACE_URL = "https://www.google.com/maps?q="

Position = Union[ScoredLocation, Coordinates]


class RoutePlanner:
    """
    Greedy day-by-day route construction over scored locations
    """

    def __init__(self, distance_provider: Optional[DistanceProvider] = None,
                 direction_penalty: Optional[float] = None,
                 efficiency_bonus_max: Optional[float] = None,
                 road_prefilter_factor: Optional[float] = None):
        """
        Initialize Route Planner

        Args:
            distance_provider (DistanceProvider): Distance source, built from config if omitted
            direction_penalty (float): Suitability deduction for backtracking candidates
            efficiency_bonus_max (float): Bonus for a candidate at zero distance
            road_prefilter_factor (float): Air-distance multiple of the budget within
                which candidates get a road lookup
        """
        self.logger = logging.getLogger(__name__)
        self.distance_provider = distance_provider or DistanceProvider.from_config()

        self.direction_penalty = (direction_penalty if direction_penalty is not None
                                  else config.DIRECTION_PENALTY)
        self.efficiency_bonus_max = (efficiency_bonus_max if efficiency_bonus_max is not None
                                     else config.EFFICIENCY_BONUS_MAX)
        self.road_prefilter_factor = (road_prefilter_factor if road_prefilter_factor is not None
                                      else config.ROAD_PREFILTER_FACTOR)

    def build_route(self, locations: Sequence[ScoredLocation],
                    max_travel_per_day_km: float, total_days: int,
                    explicit_start: Optional[Position] = None) -> Route:
        """
        Build a multi-day route

        Args:
            locations (Sequence[ScoredLocation]): Scored locations
            max_travel_per_day_km (float): Daily travel budget
            total_days (int): Trip length in days
            explicit_start (Coordinates): Starting position that is not itself a stop

        Returns:
            Route: Ordered stops; an infeasible route when nothing is reachable
                on the first planned day

        Raises:
            InputValidationError: Fewer than 2 locations or invalid constraints
        """
        if not locations or len(locations) < 2:
            raise InputValidationError("Need at least 2 weather spots to build a route")
        if max_travel_per_day_km is None or max_travel_per_day_km <= 0:
            raise InputValidationError(
                f"Maximum travel per day must be positive, got {max_travel_per_day_km}"
            )
        if total_days is None or total_days < 1:
            raise InputValidationError(f"Trip length must be at least 1 day, got {total_days}")

        spots = sorted(locations, key=lambda loc: loc.score, reverse=True)
        visited = set()
        stops: List[RouteStop] = []

        if explicit_start is None:
            # Start from the best weather spot
            current: Position = spots[0]
            stops.append(RouteStop(day=1, location=current, distance_km=0.0,
                                   drive_time_min=0.0, weather=current.raw_series))
            visited.add(0)
            first_day = 2
        else:
            current = explicit_start
            first_day = 1

        self.logger.info(
            f"Planning {total_days}-day route over {len(spots)} locations, "
            f"max {max_travel_per_day_km}km/day"
        )

        for day in range(first_day, total_days + 1):
            if len(visited) == len(spots):
                break

            # Stop before the current position, not the current stop itself
            previous = stops[-2].location if len(stops) >= 2 else None
            choice = self._find_next_location(current, spots, visited,
                                              max_travel_per_day_km, previous)

            if choice is None:
                if day == first_day:
                    self.logger.warning(f"No location reachable on day {day}: {INFEASIBLE_MESSAGE}")
                    return Route.infeasible(INFEASIBLE_MESSAGE)
                self.logger.info(f"No more reachable locations after day {day - 1}")
                break

            index, location, leg = choice
            stops.append(RouteStop(
                day=day,
                location=location,
                distance_km=round(leg.distance_km, 1),
                drive_time_min=float(round(leg.duration_min)),
                weather=location.raw_series
            ))
            visited.add(index)
            current = location

            self.logger.debug(
                f"Day {day}: rank {location.rank} (score {location.score}), "
                f"{leg.distance_km:.1f}km via {leg.source}"
            )

        route = Route(stops=tuple(stops))
        self.logger.info(f"Built route with {len(route)} stops")
        return route

    def _find_next_location(self, current: Position, spots: List[ScoredLocation],
                            visited: set, max_travel: float,
                            previous: Optional[Position]
                            ) -> Optional[Tuple[int, ScoredLocation, TravelLeg]]:
        """
        Pick the unvisited candidate with the highest suitability

        Ties keep the earlier (better ranked) candidate.
        """
        best: Optional[Tuple[int, ScoredLocation, TravelLeg]] = None
        best_suitability = None
        provider = self.distance_provider

        for i, candidate in enumerate(spots):
            if i in visited:
                continue

            # Air distance filter keeps road lookups to plausible candidates
            air_distance = provider.great_circle_km(current.lat, current.lon,
                                                    candidate.lat, candidate.lon)
            if air_distance > max_travel * self.road_prefilter_factor:
                continue

            leg = provider.travel(current.lat, current.lon, candidate.lat, candidate.lon)
            if leg.distance_km > max_travel:
                continue

            suitability = candidate.score + self._efficiency_bonus(leg.distance_km, max_travel)
            if previous is not None:
                suitability -= self._direction_penalty(candidate, previous, leg.distance_km)

            if best_suitability is None or suitability > best_suitability:
                best_suitability = suitability
                best = (i, candidate, leg)

        return best

    def _efficiency_bonus(self, distance_km: float, max_travel: float) -> float:
        return (max_travel - distance_km) / max_travel * self.efficiency_bonus_max

    def _direction_penalty(self, candidate: ScoredLocation, previous: Position,
                           forward_distance_km: float) -> float:
        """Penalty when the candidate lies closer to the previous stop than to the current one"""
        backtrack_distance = self.distance_provider.great_circle_km(
            candidate.lat, candidate.lon, previous.lat, previous.lon
        )
        return self.direction_penalty if backtrack_distance < forward_distance_km else 0.0

    def get_route_statistics(self, route: Route) -> Dict:
        """
        Get statistics about a route

        Args:
            route (Route): Route to analyze

        Returns:
            Dict: Route statistics, empty for an empty route
        """
        if not route.stops:
            return {}

        scores = [stop.score for stop in route.stops if stop.score is not None]
        best_stop = max(route.stops, key=lambda s: s.score if s.score is not None else -1)

        return {
            'total_days': len(route.stops),
            'total_distance_km': round(sum(s.distance_km for s in route.stops), 1),
            'total_drive_time_min': sum(s.drive_time_min for s in route.stops),
            'avg_score': round(sum(scores) / len(scores), 1) if scores else None,
            'best_weather_day': best_stop.day,
            'google_maps_url': self.google_maps_url(route),
        }

    @staticmethod
    def google_maps_url(route: Route) -> str:
        """Directions URL through every stop in order"""
        waypoints = "/".join(f"{s.location.lat},{s.location.lon}" for s in route.stops)
        return GOOGLE_MAPS_DIR_URL + waypoints

    def build_itinerary(self, route: Route) -> List[Dict]:
        """
        Plain per-day entries for the itinerary timeline
        """
        itinerary = []
        for stop in route.stops:
            itinerary.append({
                'day': stop.day,
                'lat': stop.location.lat,
                'lon': stop.location.lon,
                'score': stop.score,
                'distance_km': stop.distance_km,
                'drive_time': format_duration(stop.drive_time_min) if stop.distance_km > 0 else None,
                'is_start': stop.distance_km == 0,
                'condition': (WeatherAnalyzer.describe_series(stop.weather)
                              if stop.weather is not None else None),
                'map_link': f"{GOOGLE_MAPS_PLACE_URL}{stop.location.lat},{stop.location.lon}",
            })
        return itinerary
