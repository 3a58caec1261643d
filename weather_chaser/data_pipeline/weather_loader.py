"""
Open-Meteo Weather Data Loader
==============================

Fetches multi-day forecasts from Open-Meteo for every grid point of a search.

Requests are issued in small concurrent batches with a pause between batches
to respect the service's rate limits. A point answered with HTTP 429 is
retried with exponential backoff; any other failure degrades to "no weather
data for this point" and never aborts the search.

Author: Weather Chaser Team
"""

import logging
import time
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Callable, Dict, List, Optional

import requests

from .data_models import DailyWeatherSeries, GridPoint, PointWeather
from ..utils.data_utils import average_valid
from ..utils.error_handler import (
    ErrorHandler, ErrorSeverity, InputValidationError, RateLimitError,
    WeatherFetchError, weather_retry_config
)

# Import configuration
from config import config


DAILY_FIELDS = [
    "temperature_2m_max",
    "temperature_2m_min",
    "precipitation_sum",
    "precipitation_probability_max",
    "sunshine_duration",
    "windspeed_10m_max",
]
HUMIDITY_FIELD = "relative_humidity_2m_mean"


class WeatherAnalyzer:
    """Helper class for describing the weather of a series in words"""

    SNOW = "snow"
    HEAVY_RAIN = "heavy_rain"
    LIGHT_RAIN = "light_rain"
    CLOUDY = "cloudy"
    PARTLY_CLOUDY = "partly_cloudy"
    SUNNY = "sunny"

    @staticmethod
    def classify_conditions(rain_mm: float, rain_chance: float, sun_hours: float,
                            temp_max: float) -> str:
        """Classify average daily conditions into a single label"""
        # Snow (cold + precipitation)
        if temp_max <= 2 and (rain_mm > 0 or rain_chance > 30):
            return WeatherAnalyzer.SNOW

        if rain_mm > 10 or rain_chance > 70:
            return WeatherAnalyzer.HEAVY_RAIN

        # Light rain or drizzle
        if rain_mm > 2 or rain_chance > 40:
            return WeatherAnalyzer.LIGHT_RAIN

        if sun_hours < 4:
            return WeatherAnalyzer.CLOUDY

        if sun_hours < 8:
            return WeatherAnalyzer.PARTLY_CLOUDY

        return WeatherAnalyzer.SUNNY

    @staticmethod
    def describe_series(series: DailyWeatherSeries) -> str:
        """Classify a whole series using its daily averages"""
        return WeatherAnalyzer.classify_conditions(
            average_valid(series.precipitation_sum),
            average_valid(series.precipitation_probability),
            average_valid(series.sunshine_seconds) / 3600,
            average_valid(series.temp_max),
        )


class WeatherDataLoader:
    """Main class for loading weather data from Open-Meteo"""

    def __init__(self, session: Optional[requests.Session] = None,
                 sleep_func: Callable[[float], None] = time.sleep):
        """
        Initialize Weather Data Loader with Open-Meteo configuration

        Args:
            session (requests.Session): HTTP session, a new one if omitted
            sleep_func (Callable): Used for backoff and inter-batch pauses
        """
        self.logger = logging.getLogger(__name__)
        self.session = session or requests.Session()
        self._sleep = sleep_func
        self.error_handler = ErrorHandler(sleep_func=sleep_func)

        self.forecast_endpoint = config.OPEN_METEO_URL
        self.timeout = config.WEATHER_API_TIMEOUT
        self.batch_size = config.WEATHER_BATCH_SIZE
        self.batch_delay = config.WEATHER_BATCH_DELAY
        self.include_humidity = config.INCLUDE_HUMIDITY
        self.max_days = config.MAX_FORECAST_DAYS
        self.retry_config = weather_retry_config()

        self.logger.debug("Open-Meteo Data Loader initialized")

    def fetch_weather_for_grid(self, points: List[GridPoint], days: int) -> List[PointWeather]:
        """
        Fetch weather for all grid points in rate-limited batches

        Args:
            points (List[GridPoint]): Points to query
            days (int): Forecast length in days

        Returns:
            List[PointWeather]: One result per point, in point order
        """
        self._validate_days(days)

        results: List[PointWeather] = []
        total = len(points)

        with ThreadPoolExecutor(max_workers=self.batch_size) as executor:
            for start in range(0, total, self.batch_size):
                batch = points[start:start + self.batch_size]
                results.extend(executor.map(lambda p: self.fetch_weather_for_point(p, days), batch))

                # Pause between batches (except after the last one)
                if start + self.batch_size < total:
                    self._sleep(self.batch_delay)

                progress = min(100, round(len(results) / total * 100))
                self.logger.debug(f"Weather data progress: {progress}%")

        failed = sum(1 for r in results if not r.ok)
        self.logger.info(
            f"Retrieved weather for {total - failed}/{total} grid points ({failed} failed)"
        )
        return results

    def fetch_weather_for_point(self, point: GridPoint, days: int) -> PointWeather:
        """
        Fetch weather for a single point

        Rate-limit answers are retried with backoff; every other failure, and a
        rate limit that outlasts the retries, yields a result without series.
        """
        try:
            series = self.error_handler.retry_on_error(
                self._request_series, point, days,
                retry_config=self.retry_config, report_exhausted=False
            )
            return PointWeather(point=point, series=series)
        except (WeatherFetchError, requests.exceptions.RequestException) as e:
            self.error_handler.handle_api_error(
                "Open-Meteo", self.forecast_endpoint,
                status_code=getattr(e, "status_code", None),
                exception=e,
                severity=ErrorSeverity.MEDIUM
            )
            return PointWeather(point=point, series=None)

    def _request_series(self, point: GridPoint, days: int) -> DailyWeatherSeries:
        """Issue one forecast request; raises RateLimitError on HTTP 429"""
        fields = list(DAILY_FIELDS)
        if self.include_humidity:
            fields.append(HUMIDITY_FIELD)

        params = {
            "latitude": point.lat,
            "longitude": point.lon,
            "daily": ",".join(fields),
            "timezone": "auto",
            "forecast_days": days,
        }

        response = self.session.get(self.forecast_endpoint, params=params, timeout=self.timeout)

        if response.status_code == 429:
            raise RateLimitError(f"Rate limited for point {point.index}", status_code=429)

        if response.status_code != 200:
            raise WeatherFetchError(
                f"Weather API error for point {point.index}: {response.status_code}",
                status_code=response.status_code
            )

        try:
            data = response.json()
        except ValueError as e:
            raise WeatherFetchError(f"Malformed weather response for point {point.index}") from e

        return self.parse_daily_series(data)

    def parse_daily_series(self, data: Dict[str, Any]) -> DailyWeatherSeries:
        """
        Transform a raw Open-Meteo payload into a DailyWeatherSeries

        Raises:
            WeatherFetchError: Missing daily block or a daily field that is not a list
        """
        daily = data.get("daily") if isinstance(data, dict) else None
        if not isinstance(daily, dict):
            raise WeatherFetchError("Weather response has no daily block")

        humidity = daily.get(HUMIDITY_FIELD)
        dates = self._field_list(daily, "time")

        return DailyWeatherSeries(
            dates=tuple(str(d) for d in dates),
            temp_max=self._to_series(self._field_list(daily, "temperature_2m_max")),
            temp_min=self._to_series(self._field_list(daily, "temperature_2m_min")),
            precipitation_sum=self._to_series(self._field_list(daily, "precipitation_sum")),
            precipitation_probability=self._to_series(
                self._field_list(daily, "precipitation_probability_max")
            ),
            sunshine_seconds=self._to_series(self._field_list(daily, "sunshine_duration")),
            wind_speed_max=self._to_series(self._field_list(daily, "windspeed_10m_max")),
            humidity=(self._to_series(self._field_list(daily, HUMIDITY_FIELD))
                      if humidity is not None else None),
        )

    @staticmethod
    def _field_list(daily: Dict[str, Any], name: str) -> List[Any]:
        """Daily field as a list; absent fields are empty, anything else is malformed"""
        values = daily.get(name)
        if values is None:
            return []
        if not isinstance(values, list):
            raise WeatherFetchError(
                f"Malformed weather response: daily '{name}' is {type(values).__name__}, not a list"
            )
        return values

    @staticmethod
    def _to_series(values: List[Any]) -> tuple:
        series = []
        for v in values:
            try:
                series.append(None if v is None else float(v))
            except (TypeError, ValueError):
                series.append(None)
        return tuple(series)

    def _validate_days(self, days: int) -> None:
        if not isinstance(days, int) or not 1 <= days <= self.max_days:
            raise InputValidationError(
                f"Forecast days must be between 1 and {self.max_days}, got {days}"
            )
