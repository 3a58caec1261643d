"""
OSRM Road Router
================

Driving distance and duration between two coordinates from the public OSRM
demo server. Every failure answers ``None`` so callers can fall back to the
great-circle distance.

Author: Weather Chaser Team
"""

import logging
from typing import Optional

import requests

from .data_models import RoadInfo

# Import configuration
from config import config


class OSRMRouter:
    """Thin client for the OSRM route service"""

    def __init__(self, session: Optional[requests.Session] = None):
        self.logger = logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.base_url = config.OSRM_URL
        self.timeout = config.ROUTING_TIMEOUT
        self.headers = {"User-Agent": config.USER_AGENT}

    def get_route(self, origin_lat: float, origin_lon: float,
                  dest_lat: float, dest_lon: float) -> Optional[RoadInfo]:
        """
        Look up the driving route between two points

        Returns:
            RoadInfo: Distance in km and duration in minutes
            None: On non-success status, timeout or malformed response
        """
        # OSRM expects lon,lat order
        url = f"{self.base_url}/{origin_lon},{origin_lat};{dest_lon},{dest_lat}"

        try:
            response = self.session.get(
                url, params={"overview": "false"},
                headers=self.headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            self.logger.warning(f"OSRM request failed: {e}")
            return None

        if not response.ok:
            self.logger.warning(f"OSRM API returned status {response.status_code}")
            return None

        try:
            data = response.json()
            if data.get("code") != "Ok" or not data.get("routes"):
                self.logger.warning(f"OSRM found no route (code={data.get('code')})")
                return None

            route = data["routes"][0]
            return RoadInfo(
                distance_km=float(route["distance"]) / 1000,
                duration_min=float(route["duration"]) / 60
            )
        except (ValueError, KeyError, TypeError, AttributeError) as e:
            self.logger.warning(f"Malformed OSRM response: {e}")
            return None
