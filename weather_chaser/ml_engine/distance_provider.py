"""
Distance Provider
=================

Travel distance between coordinates for route planning. Road distances from
the routing service are preferred; when the lookup is unavailable the
great-circle distance is used with a drive time synthesized from an average
driving speed. Fallbacks never raise; they are logged and counted.

Author: Weather Chaser Team
"""

import logging
from typing import Dict, Optional, Tuple

from ..data_pipeline.data_models import RoadInfo, TravelLeg
from ..data_pipeline.road_router import OSRMRouter
from ..utils.data_utils import calculate_distance

# Import configuration
from config import config


class DistanceProvider:
    """
    Great-circle distances with optional road-routing lookups
    """

    def __init__(self, road_router: Optional[OSRMRouter] = None,
                 average_speed_kmh: Optional[float] = None):
        """
        Args:
            road_router (OSRMRouter): Routing client; None disables road lookups
            average_speed_kmh (float): Speed used to synthesize drive times
        """
        self.logger = logging.getLogger(__name__)
        self.road_router = road_router
        self.average_speed_kmh = average_speed_kmh or config.AVERAGE_DRIVING_SPEED_KMH

        self._road_cache: Dict[Tuple[float, float, float, float], Optional[RoadInfo]] = {}
        self._stats = {"road_lookups": 0, "road_hits": 0, "fallbacks": 0}

    @classmethod
    def from_config(cls) -> "DistanceProvider":
        router = OSRMRouter() if config.USE_ROAD_ROUTING else None
        return cls(road_router=router)

    def great_circle_km(self, lat1: float, lon1: float, lat2: float, lon2: float) -> float:
        """Haversine distance in km"""
        return calculate_distance(lat1, lon1, lat2, lon2)

    def road_distance(self, lat1: float, lon1: float,
                      lat2: float, lon2: float) -> Optional[RoadInfo]:
        """Road distance and duration, None when unavailable"""
        if self.road_router is None:
            return None

        key = (lat1, lon1, lat2, lon2)
        if key in self._road_cache:
            return self._road_cache[key]

        self._stats["road_lookups"] += 1
        info = self.road_router.get_route(lat1, lon1, lat2, lon2)
        if info is not None:
            self._stats["road_hits"] += 1

        self._road_cache[key] = info
        return info

    def travel(self, lat1: float, lon1: float, lat2: float, lon2: float) -> TravelLeg:
        """
        Distance and drive time between two points

        Returns:
            TravelLeg: Road figures when available, great-circle estimate otherwise
        """
        info = self.road_distance(lat1, lon1, lat2, lon2)
        if info is not None:
            return TravelLeg(distance_km=info.distance_km, duration_min=info.duration_min,
                             source=TravelLeg.ROAD)

        distance = self.great_circle_km(lat1, lon1, lat2, lon2)

        if self.road_router is not None:
            self._stats["fallbacks"] += 1
            self.logger.warning(
                f"Road distance unavailable for ({lat1:.4f}, {lon1:.4f}) -> "
                f"({lat2:.4f}, {lon2:.4f}), using great-circle {distance:.1f}km"
            )

        return TravelLeg(distance_km=distance,
                         duration_min=self.estimate_drive_time(distance),
                         source=TravelLeg.GREAT_CIRCLE)

    def estimate_drive_time(self, distance_km: float) -> float:
        """Drive time in minutes at the average driving speed"""
        return distance_km / self.average_speed_kmh * 60

    def get_statistics(self) -> Dict:
        return dict(self._stats)
