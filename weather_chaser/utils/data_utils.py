"""
Data Validation and Processing Utilities
=======================================

Small numeric and geographic helpers shared by the grid, scoring and routing
code.

Key Features:
- Geographic coordinate validation
- Haversine distance formula for coordinate pairs
- Local parsing of "lat,lon" strings
- Null-aware aggregation of weather series
- Duration formatting for itineraries

Functions:
    validate_coordinates: Check if latitude/longitude are valid
    calculate_distance: Great-circle distance between two coordinate pairs
    parse_coordinate_string: Parse "lat,lon" text into a coordinate pair
    average_valid: Mean of the non-missing entries of a sequence
    sum_valid: Sum of the non-missing entries of a sequence
    format_duration: Format minutes as "1h 5m" / "45m"

Author: Weather Chaser Team
"""

import re
import math
import logging
from typing import Iterable, Optional, Tuple


# Module logger
logger = logging.getLogger(__name__)

# Constants for geographic calculations
EARTH_RADIUS_KM = 6371.0  # Earth's radius in kilometers
KM_PER_DEGREE_LAT = 111.0
MAX_LATITUDE = 90.0
MIN_LATITUDE = -90.0
MAX_LONGITUDE = 180.0
MIN_LONGITUDE = -180.0

COORDINATE_PATTERN = re.compile(r'^(-?\d+\.?\d*)\s*,\s*(-?\d+\.?\d*)$')


def validate_coordinates(latitude: float, longitude: float) -> bool:
    """
    Validate if latitude and longitude coordinates are within valid ranges

    Args:
        latitude (float): Latitude coordinate
        longitude (float): Longitude coordinate

    Returns:
        bool: True if coordinates are valid, False otherwise

    Examples:
        >>> validate_coordinates(46.95, 7.45)  # Bern
        True
        >>> validate_coordinates(91.0, 181.0)  # Invalid
        False
    """
    try:
        lat = float(latitude)
        lon = float(longitude)

        if math.isnan(lat) or math.isnan(lon):
            return False

        if not (MIN_LATITUDE <= lat <= MAX_LATITUDE):
            return False

        if not (MIN_LONGITUDE <= lon <= MAX_LONGITUDE):
            return False

        return True

    except (ValueError, TypeError):
        return False


def calculate_distance(lat1: float, lon1: float, lat2: float, lon2: float) -> float:
    """
    Calculate the great circle distance between two points on Earth using Haversine formula

    Args:
        lat1 (float): Latitude of first point
        lon1 (float): Longitude of first point
        lat2 (float): Latitude of second point
        lon2 (float): Longitude of second point

    Returns:
        float: Distance in kilometers

    Examples:
        >>> round(calculate_distance(46.9480, 7.4474, 47.3769, 8.5417), 1)  # Bern -> Zurich
        95.5
    """
    lat1_rad = math.radians(lat1)
    lat2_rad = math.radians(lat2)
    dlat = math.radians(lat2 - lat1)
    dlon = math.radians(lon2 - lon1)

    a = (math.sin(dlat / 2) ** 2 +
         math.cos(lat1_rad) * math.cos(lat2_rad) * math.sin(dlon / 2) ** 2)
    c = 2 * math.atan2(math.sqrt(a), math.sqrt(1 - a))

    return EARTH_RADIUS_KM * c


def parse_coordinate_string(text: str) -> Optional[Tuple[float, float]]:
    """
    Parse a "lat,lon" string into a coordinate pair

    Args:
        text (str): User input such as "46.95, 7.45"

    Returns:
        Tuple[float, float]: (lat, lon), None if the text is not a coordinate pair
    """
    if not text or not isinstance(text, str):
        return None

    match = COORDINATE_PATTERN.match(text.strip())
    if not match:
        return None

    return float(match.group(1)), float(match.group(2))


def _valid_values(values: Optional[Iterable[Optional[float]]]) -> list:
    if not values:
        return []
    return [v for v in values if v is not None and not math.isnan(v)]


def average_valid(values: Optional[Iterable[Optional[float]]],
                  default: Optional[float] = 0.0) -> Optional[float]:
    """
    Average the non-missing entries of a sequence

    Missing entries (None/NaN) are excluded from both the sum and the count.
    Returns ``default`` when nothing is left to average.
    """
    valid = _valid_values(values)
    if not valid:
        return default
    return sum(valid) / len(valid)


def sum_valid(values: Optional[Iterable[Optional[float]]]) -> float:
    """Sum the non-missing entries of a sequence"""
    return float(sum(_valid_values(values)))


def format_duration(minutes: float) -> str:
    """
    Format a drive time for display

    Examples:
        >>> format_duration(65)
        '1h 5m'
        >>> format_duration(45)
        '45m'
    """
    total = int(round(minutes or 0))
    hours, mins = divmod(total, 60)
    return f"{hours}h {mins}m" if hours > 0 else f"{mins}m"
