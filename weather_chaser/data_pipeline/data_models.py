"""
Data Models for Weather Chaser
==============================

Centralized data models to avoid circular imports.
Contains grid points, drawn shapes, weather series, scored locations and
route structures shared by the data pipeline and the ML engine.

All models are immutable value objects; ``to_dict`` produces the plain
structures handed to the rendering layer.

Author: Weather Chaser Team
"""

from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple, Union, Any


Series = Tuple[Optional[float], ...]


@dataclass(frozen=True)
class Coordinates:
    """A bare latitude/longitude pair"""
    lat: float
    lon: float

    def to_dict(self) -> Dict:
        return {"lat": self.lat, "lon": self.lon}


@dataclass(frozen=True)
class GridPoint:
    """
    One sampled coordinate awaiting a weather query

    Attributes:
        lat (float): Latitude
        lon (float): Longitude
        index (int): Position in generation order
    """
    lat: float
    lon: float
    index: int


@dataclass(frozen=True)
class GeoShape:
    """
    Area drawn by the user

    Attributes:
        kind (str): "rectangle" or "polygon"
        vertices (Tuple): Ordered (lat, lon) vertex ring
    """
    kind: str
    vertices: Tuple[Tuple[float, float], ...]

    RECTANGLE = "rectangle"
    POLYGON = "polygon"

    @classmethod
    def rectangle(cls, south: float, west: float, north: float, east: float) -> "GeoShape":
        return cls(kind=cls.RECTANGLE, vertices=(
            (south, west), (north, west), (north, east), (south, east)
        ))

    @classmethod
    def polygon(cls, vertices) -> "GeoShape":
        return cls(kind=cls.POLYGON, vertices=tuple((float(lat), float(lon)) for lat, lon in vertices))

    @property
    def is_rectangle(self) -> bool:
        return self.kind == self.RECTANGLE

    def bounds(self) -> Tuple[float, float, float, float]:
        """Return the bounding box as (south, north, west, east)"""
        lats = [v[0] for v in self.vertices]
        lons = [v[1] for v in self.vertices]
        return min(lats), max(lats), min(lons), max(lons)


@dataclass(frozen=True)
class DailyWeatherSeries:
    """
    Daily weather for one point, as parallel sequences indexed by day

    Entries may be None when the provider has no value for that day.

    Attributes:
        dates (Tuple[str]): ISO dates of each day
        temp_max (Series): Daily maximum temperature in Celsius
        temp_min (Series): Daily minimum temperature in Celsius
        precipitation_sum (Series): Daily precipitation in mm
        precipitation_probability (Series): Maximum precipitation probability in %
        sunshine_seconds (Series): Sunshine duration in seconds
        wind_speed_max (Series): Maximum wind speed in km/h
        humidity (Series): Mean relative humidity in %, None if not provided
    """
    dates: Tuple[str, ...] = ()
    temp_max: Series = ()
    temp_min: Series = ()
    precipitation_sum: Series = ()
    precipitation_probability: Series = ()
    sunshine_seconds: Series = ()
    wind_speed_max: Series = ()
    humidity: Optional[Series] = None

    def _all_series(self) -> List[Series]:
        series = [self.temp_max, self.temp_min, self.precipitation_sum,
                  self.precipitation_probability, self.sunshine_seconds,
                  self.wind_speed_max]
        if self.humidity is not None:
            series.append(self.humidity)
        return series

    @property
    def num_days(self) -> int:
        if self.dates:
            return len(self.dates)
        return max((len(s) for s in self._all_series()), default=0)

    @property
    def has_data(self) -> bool:
        """False when every entry of every series is missing"""
        return any(v is not None for s in self._all_series() for v in s)

    def to_dict(self) -> Dict:
        data = {
            "time": list(self.dates),
            "temperature_2m_max": list(self.temp_max),
            "temperature_2m_min": list(self.temp_min),
            "precipitation_sum": list(self.precipitation_sum),
            "precipitation_probability_max": list(self.precipitation_probability),
            "sunshine_duration": list(self.sunshine_seconds),
            "windspeed_10m_max": list(self.wind_speed_max),
        }
        if self.humidity is not None:
            data["relative_humidity_2m_mean"] = list(self.humidity)
        return data


@dataclass(frozen=True)
class PointWeather:
    """Weather fetch result for one grid point; series is None on failure"""
    point: GridPoint
    series: Optional[DailyWeatherSeries]

    @property
    def ok(self) -> bool:
        return self.series is not None


@dataclass(frozen=True)
class ScoredLocation:
    """
    Grid point with composite weather score and summary statistics

    Attributes:
        lat (float): Latitude
        lon (float): Longitude
        score (float): Composite desirability score (0-100)
        rank (int): 1-based position in the current ordering
        avg_temp (float): Mean of daily max/min averages in Celsius
        sun_hours_per_day (float): Average sunshine hours per day
        total_rain_mm (float): Total precipitation over the period
        avg_rain_chance_pct (float): Average precipitation probability
        avg_wind_speed (float): Average maximum wind speed in km/h
        avg_humidity (float): Average relative humidity, None if not provided
        raw_series (DailyWeatherSeries): Series the score was computed from
        index (int): Grid point index the location came from
    """
    lat: float
    lon: float
    score: float
    rank: int
    avg_temp: float
    sun_hours_per_day: float
    total_rain_mm: float
    avg_rain_chance_pct: float
    avg_wind_speed: float
    avg_humidity: Optional[float] = None
    raw_series: DailyWeatherSeries = field(default_factory=DailyWeatherSeries, repr=False)
    index: int = -1

    def to_dict(self) -> Dict:
        return {
            "lat": self.lat,
            "lon": self.lon,
            "score": self.score,
            "rank": self.rank,
            "avg_temp": self.avg_temp,
            "sun_hours_per_day": self.sun_hours_per_day,
            "total_rain_mm": self.total_rain_mm,
            "avg_rain_chance_pct": self.avg_rain_chance_pct,
            "avg_wind_speed": self.avg_wind_speed,
            "avg_humidity": self.avg_humidity,
            "index": self.index,
            "raw_series": self.raw_series.to_dict(),
        }


@dataclass(frozen=True)
class RoadInfo:
    """Successful road-routing lookup"""
    distance_km: float
    duration_min: float


@dataclass(frozen=True)
class TravelLeg:
    """
    Travel between two coordinates

    Attributes:
        distance_km (float): Travel distance
        duration_min (float): Drive time
        source (str): "road" when from the routing service, "great_circle" otherwise
    """
    distance_km: float
    duration_min: float
    source: str

    ROAD = "road"
    GREAT_CIRCLE = "great_circle"


Location = Union[ScoredLocation, Coordinates]


@dataclass(frozen=True)
class RouteStop:
    """
    One day of an itinerary

    Attributes:
        day (int): 1-based day number
        location (ScoredLocation | Coordinates): Where the day is spent
        distance_km (float): Distance travelled to get there
        drive_time_min (float): Drive time to get there
        weather (DailyWeatherSeries): Weather series of the location
    """
    day: int
    location: Location
    distance_km: float
    drive_time_min: float
    weather: Optional[DailyWeatherSeries] = None

    @property
    def score(self) -> Optional[float]:
        return getattr(self.location, "score", None)

    def to_dict(self) -> Dict:
        return {
            "day": self.day,
            "location": self.location.to_dict(),
            "distance_km": self.distance_km,
            "drive_time_min": self.drive_time_min,
            "weather": self.weather.to_dict() if self.weather is not None else None,
        }


@dataclass(frozen=True)
class Route:
    """
    Multi-day itinerary

    Attributes:
        stops (Tuple[RouteStop]): Ordered stops, one per day
        is_feasible (bool): False when no itinerary satisfies the constraints
        message (str): Explanation for an infeasible route
    """
    stops: Tuple[RouteStop, ...] = ()
    is_feasible: bool = True
    message: Optional[str] = None

    @classmethod
    def infeasible(cls, message: str) -> "Route":
        return cls(stops=(), is_feasible=False, message=message)

    def __len__(self) -> int:
        return len(self.stops)

    def __iter__(self):
        return iter(self.stops)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "is_feasible": self.is_feasible,
            "message": self.message,
            "stops": [stop.to_dict() for stop in self.stops],
        }


# Export classes for easy import
__all__ = [
    'Coordinates', 'GridPoint', 'GeoShape', 'DailyWeatherSeries', 'PointWeather',
    'ScoredLocation', 'RoadInfo', 'TravelLeg', 'RouteStop', 'Route'
]
