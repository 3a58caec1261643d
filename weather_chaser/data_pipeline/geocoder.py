"""
Nominatim Geocoder
==================

Turns the user's location text into a coordinate pair. A literal "lat,lon"
string is parsed locally and never reaches the service.

Author: Weather Chaser Team
"""

import logging
from typing import Optional

import requests

from .data_models import Coordinates
from ..utils.data_utils import parse_coordinate_string, validate_coordinates
from ..utils.error_handler import ErrorHandler, GeocodingError, InputValidationError

# Import configuration
from config import config


class Geocoder:
    """Resolve free-text locations with OpenStreetMap Nominatim"""

    def __init__(self, session: Optional[requests.Session] = None):
        self.logger = logging.getLogger(__name__)
        self.session = session or requests.Session()
        self.error_handler = ErrorHandler()

        self.search_endpoint = config.NOMINATIM_URL
        self.timeout = config.GEOCODING_TIMEOUT
        self.headers = {"User-Agent": config.USER_AGENT}

    def geocode(self, location: str) -> Coordinates:
        """
        Resolve a location to coordinates

        Args:
            location (str): Address, place name, or "lat,lon"

        Returns:
            Coordinates: Resolved coordinates

        Raises:
            InputValidationError: Empty input or out-of-range "lat,lon"
            GeocodingError: Service failure or location not found
        """
        text = (location or "").strip()
        if not text:
            raise InputValidationError("Please enter a location")

        parsed = parse_coordinate_string(text)
        if parsed is not None:
            lat, lon = parsed
            if not validate_coordinates(lat, lon):
                raise InputValidationError(f"Coordinates out of range: {text}")
            self.logger.debug(f"Parsed coordinates locally: {lat}, {lon}")
            return Coordinates(lat=lat, lon=lon)

        return self._lookup(text)

    def _lookup(self, text: str) -> Coordinates:
        params = {"format": "json", "q": text, "limit": 1}

        try:
            self.logger.info(f"Geocoding '{text}' with Nominatim...")
            response = self.session.get(
                self.search_endpoint, params=params,
                headers=self.headers, timeout=self.timeout
            )
        except requests.exceptions.RequestException as e:
            self.error_handler.handle_api_error("Nominatim", self.search_endpoint, exception=e)
            raise GeocodingError("Geocoding failed") from e

        if not response.ok:
            self.error_handler.handle_api_error(
                "Nominatim", self.search_endpoint, status_code=response.status_code
            )
            raise GeocodingError("Geocoding failed")

        try:
            results = response.json()
        except ValueError as e:
            raise GeocodingError("Geocoding failed") from e

        if not results:
            self.logger.warning(f"No geocoding results for '{text}'")
            raise GeocodingError("Location not found")

        try:
            coords = Coordinates(lat=float(results[0]["lat"]), lon=float(results[0]["lon"]))
        except (KeyError, IndexError, TypeError, ValueError) as e:
            raise GeocodingError("Geocoding failed") from e

        self.logger.info(f"Resolved '{text}' to {coords.lat:.4f}, {coords.lon:.4f}")
        return coords
