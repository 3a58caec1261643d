"""
Utility Tests
=============

Verifies the data helpers, the error taxonomy and the retry combinator.

Usage:
    pytest test_utils.py

Author: Weather Chaser Team
"""

from concurrent.futures import ThreadPoolExecutor

import pytest
import requests

from config import Config, config
from weather_chaser.utils.data_utils import (
    average_valid, calculate_distance, format_duration,
    parse_coordinate_string, sum_valid, validate_coordinates
)
from weather_chaser.utils.error_handler import (
    ErrorCategory, ErrorHandler, ErrorSeverity, GeocodingError, InputValidationError,
    RateLimitError, RetryConfig, WeatherFetchError, retry_on_failure,
    weather_retry_config
)


class SleepRecorder:
    def __init__(self):
        self.calls = []

    def __call__(self, seconds):
        self.calls.append(seconds)


class FlakyCall:
    """Raises the queued exceptions in order, then returns 'done'"""

    def __init__(self, *failures):
        self.failures = list(failures)
        self.calls = 0
        self.__name__ = "flaky_call"

    def __call__(self, *args, **kwargs):
        self.calls += 1
        if self.failures:
            raise self.failures.pop(0)
        return "done"


# =============================================================================
# DATA UTILS
# =============================================================================

def test_validate_coordinates():
    assert validate_coordinates(46.95, 7.45)
    assert validate_coordinates(-90, 180)
    assert not validate_coordinates(91.0, 0)
    assert not validate_coordinates(0, -181)
    assert not validate_coordinates("north", 0)
    assert not validate_coordinates(float("nan"), 0)


def test_calculate_distance():
    assert calculate_distance(46.9480, 7.4474, 46.9480, 7.4474) == 0.0
    assert calculate_distance(0, 0, 1, 0) == pytest.approx(111.195, abs=0.01)
    assert calculate_distance(46.9480, 7.4474, 47.3769, 8.5417) == pytest.approx(95.5, abs=0.5)


@pytest.mark.parametrize("text,expected", [
    ("46.95,7.45", (46.95, 7.45)),
    (" -33.86 , 151.2 ", (-33.86, 151.2)),
    ("10,20", (10.0, 20.0)),
    ("Bern", None),
    ("46.95;7.45", None),
    ("", None),
])
def test_parse_coordinate_string(text, expected):
    assert parse_coordinate_string(text) == expected


def test_null_aware_aggregation():
    assert average_valid([1.0, None, 3.0]) == 2.0
    assert average_valid([None, None]) == 0.0
    assert average_valid([], default=None) is None
    assert average_valid([float("nan"), 4.0]) == 4.0
    assert sum_valid([2.0, None, 4.0]) == 6.0
    assert sum_valid(None) == 0.0


@pytest.mark.parametrize("minutes,expected", [
    (0, "0m"), (45, "45m"), (60, "1h 0m"), (65, "1h 5m"), (184.6, "3h 5m"),
])
def test_format_duration(minutes, expected):
    assert format_duration(minutes) == expected


# =============================================================================
# CONFIGURATION
# =============================================================================

def test_default_configuration_is_valid():
    assert config.validate_configuration()
    weights = (config.RAIN_AMOUNT_WEIGHT + config.RAIN_CHANCE_WEIGHT + config.SUN_WEIGHT +
               config.TEMPERATURE_WEIGHT + config.WIND_WEIGHT)
    assert weights == pytest.approx(1.0)
    assert config.USER_AGENT.startswith("WeatherChaser")


def test_configuration_rejects_bad_log_level():
    with pytest.raises(ValueError):
        Config(LOG_LEVEL="LOUD")


# =============================================================================
# ERROR HANDLING
# =============================================================================

def test_exception_hierarchy():
    assert issubclass(InputValidationError, ValueError)
    assert issubclass(RateLimitError, WeatherFetchError)
    assert RateLimitError("slow down", status_code=429).status_code == 429


@pytest.mark.parametrize("exception,category", [
    (InputValidationError("bad"), ErrorCategory.INPUT_VALIDATION),
    (GeocodingError("missing"), ErrorCategory.GEOCODING_FAILED),
    (RateLimitError("429"), ErrorCategory.API_RATE_LIMIT),
    (WeatherFetchError("500"), ErrorCategory.WEATHER_FETCH_FAILED),
    (requests.exceptions.Timeout(), ErrorCategory.API_TIMEOUT),
    (requests.exceptions.ConnectionError(), ErrorCategory.NETWORK_ERROR),
    (requests.exceptions.HTTPError(), ErrorCategory.API_CONNECTION),
    (KeyError("lat"), ErrorCategory.DATA_CORRUPTION),
    (RuntimeError("?"), ErrorCategory.UNKNOWN),
])
def test_categorize_exception(exception, category):
    assert ErrorHandler().categorize_exception(exception) == category


def test_retry_config_backoff_schedule():
    assert RetryConfig(max_attempts=4, base_delay=1.0).delays() == [1.0, 2.0, 4.0]
    assert RetryConfig(max_attempts=3, base_delay=2.0, exponential_backoff=False).delays() == [2.0, 2.0]
    assert RetryConfig(max_attempts=5, base_delay=10.0, max_delay=25.0).delays() == [10.0, 20.0, 25.0, 25.0]
    assert RetryConfig(max_attempts=1).delays() == []


def test_weather_retry_config_only_retries_rate_limits():
    retry = weather_retry_config()
    assert retry.max_attempts == config.WEATHER_MAX_RETRIES + 1
    assert retry.retryable_errors == [ErrorCategory.API_RATE_LIMIT]


def test_retry_on_error_recovers():
    sleeper = SleepRecorder()
    handler = ErrorHandler(sleep_func=sleeper)
    call = FlakyCall(RateLimitError("1"), RateLimitError("2"))

    result = handler.retry_on_error(call, retry_config=RetryConfig(max_attempts=4, base_delay=1.0))

    assert result == "done"
    assert call.calls == 3
    assert sleeper.calls == [1.0, 2.0]
    assert handler.get_error_statistics()["total_errors"] == 0


def test_retry_on_error_raises_last_error_when_exhausted():
    sleeper = SleepRecorder()
    handler = ErrorHandler(sleep_func=sleeper)
    last = RateLimitError("third")
    call = FlakyCall(RateLimitError("first"), RateLimitError("second"), last)

    with pytest.raises(RateLimitError) as excinfo:
        handler.retry_on_error(call, retry_config=RetryConfig(max_attempts=3, base_delay=0.5))

    assert excinfo.value is last
    assert sleeper.calls == [0.5, 1.0]
    stats = handler.get_error_statistics()
    assert stats["errors_by_category"] == {"api_rate_limit": 1}


def test_retry_on_error_does_not_retry_other_categories():
    sleeper = SleepRecorder()
    handler = ErrorHandler(sleep_func=sleeper)
    call = FlakyCall(WeatherFetchError("500"))

    with pytest.raises(WeatherFetchError):
        handler.retry_on_error(call, retry_config=weather_retry_config())

    assert call.calls == 1
    assert sleeper.calls == []


def test_handle_api_error_records_statistics():
    handler = ErrorHandler()
    report = handler.handle_api_error("Open-Meteo", "https://example.invalid", status_code=429)
    handler.handle_api_error("Nominatim", "https://example.invalid", status_code=503)
    handler.handle_api_error("Nominatim", "https://example.invalid", status_code=503)

    assert report.category == ErrorCategory.API_RATE_LIMIT
    assert "HTTP 429" in report.message
    stats = handler.get_error_statistics()
    assert stats["total_errors"] == 3
    assert stats["most_common_error"] == "api_connection"

    handler.reset_statistics()
    assert handler.get_error_statistics()["total_errors"] == 0


def test_retry_on_failure_decorator():
    attempts = []

    @retry_on_failure(max_attempts=3, base_delay=0.0,
                      retryable_errors=[ErrorCategory.NETWORK_ERROR])
    def connect():
        attempts.append(1)
        if len(attempts) < 2:
            raise requests.exceptions.ConnectionError("refused")
        return "connected"

    assert connect() == "connected"
    assert len(attempts) == 2


def test_retry_on_error_can_leave_reporting_to_caller():
    handler = ErrorHandler(sleep_func=SleepRecorder())
    call = FlakyCall(RateLimitError("1"), RateLimitError("2"))

    with pytest.raises(RateLimitError):
        handler.retry_on_error(call, retry_config=RetryConfig(max_attempts=2, base_delay=0.0),
                               report_exhausted=False)

    assert handler.get_error_statistics()["total_errors"] == 0


def test_error_counts_are_thread_safe():
    handler = ErrorHandler()

    def report_many():
        for _ in range(200):
            handler.handle_error("worker failure", category=ErrorCategory.API_TIMEOUT,
                                 severity=ErrorSeverity.LOW)

    with ThreadPoolExecutor(max_workers=5) as executor:
        for future in [executor.submit(report_many) for _ in range(5)]:
            future.result()

    stats = handler.get_error_statistics()
    assert stats["total_errors"] == 1000
    assert stats["errors_by_category"] == {"api_timeout": 1000}
