"""
Utilities Module
===============

Common helpers used across all modules:
- Coordinate validation, haversine distance and null-aware aggregation
- Error taxonomy, error reporting and the bounded retry combinator
"""

from .error_handler import (
    ErrorHandler,
    ErrorCategory,
    RetryConfig,
    WeatherChaserError,
    InputValidationError,
    GeocodingError,
    WeatherFetchError,
    RateLimitError,
    NoUsableDataError,
)
from .data_utils import (
    validate_coordinates,
    calculate_distance,
    parse_coordinate_string,
    average_valid,
    sum_valid,
    format_duration,
)

__all__ = [
    "ErrorHandler",
    "ErrorCategory",
    "RetryConfig",
    "WeatherChaserError",
    "InputValidationError",
    "GeocodingError",
    "WeatherFetchError",
    "RateLimitError",
    "NoUsableDataError",
    "validate_coordinates",
    "calculate_distance",
    "parse_coordinate_string",
    "average_valid",
    "sum_valid",
    "format_duration",
]
