"""
Configuration Management for Weather Chaser
===========================================

This module handles:
- Loading environment variables from .env file
- Validating service endpoints, timeouts and scoring weights
- Providing centralized configuration access
- Setting up default values and logging

Usage:
    from config import config
    batch_size = config.WEATHER_BATCH_SIZE
    penalty = config.DIRECTION_PENALTY
"""

import os
import logging
from typing import Optional
from pathlib import Path
from dotenv import load_dotenv
from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Config(BaseSettings):
    """
    Centralized configuration class using Pydantic for validation
    Loads settings from environment variables with type checking
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
    )

    # =============================================================================
    # APPLICATION SETTINGS
    # =============================================================================

    APP_NAME: str = "Weather Chaser"
    APP_VERSION: str = "1.0.0"
    DEBUG_MODE: bool = False
    LOG_LEVEL: str = "INFO"
    LOG_FILE_PATH: Optional[str] = None

    @field_validator('LOG_LEVEL')
    @classmethod
    def validate_log_level(cls, v):
        """Ensure log level is a name the logging module knows"""
        if v.upper() not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
            raise ValueError(f"Unknown log level: {v}")
        return v.upper()

    # =============================================================================
    # EXTERNAL SERVICES
    # =============================================================================

    OPEN_METEO_URL: str = "https://api.open-meteo.com/v1/forecast"
    NOMINATIM_URL: str = "https://nominatim.openstreetmap.org/search"
    OSRM_URL: str = "https://router.project-osrm.org/route/v1/driving"
    USER_AGENT: str = "WeatherChaser/1.0"

    @field_validator('OPEN_METEO_URL', 'NOMINATIM_URL', 'OSRM_URL')
    @classmethod
    def validate_service_url(cls, v):
        """Ensure service URLs are absolute http(s) URLs"""
        if not v.startswith(('http://', 'https://')):
            raise ValueError(f"Service URL must start with http:// or https://, got {v}")
        return v.rstrip('/')

    # =============================================================================
    # API TIMEOUTS AND RATE LIMITS
    # =============================================================================

    WEATHER_API_TIMEOUT: int = 15
    GEOCODING_TIMEOUT: int = 10
    ROUTING_TIMEOUT: int = 10

    WEATHER_BATCH_SIZE: int = 5          # Concurrent weather requests per batch
    WEATHER_BATCH_DELAY: float = 1.0     # Pause between batches in seconds
    WEATHER_MAX_RETRIES: int = 3         # Retries on HTTP 429
    WEATHER_RETRY_BASE_DELAY: float = 1.0

    @field_validator('WEATHER_BATCH_SIZE')
    @classmethod
    def validate_batch_size(cls, v):
        if v < 1:
            raise ValueError(f"Batch size must be at least 1, got {v}")
        return v

    # =============================================================================
    # SEARCH DEFAULTS
    # =============================================================================

    MAX_FORECAST_DAYS: int = 16
    DEFAULT_FORECAST_DAYS: int = 7
    DEFAULT_RADIUS_KM: float = 100.0
    DEFAULT_GRID_SIZE: int = 25
    INCLUDE_HUMIDITY: bool = True

    # =============================================================================
    # SCORING PARAMETERS
    # =============================================================================

    # 5-factor weighting (must sum to 1.0)
    RAIN_AMOUNT_WEIGHT: float = 0.25
    RAIN_CHANCE_WEIGHT: float = 0.25
    SUN_WEIGHT: float = 0.30
    TEMPERATURE_WEIGHT: float = 0.15
    WIND_WEIGHT: float = 0.05

    @field_validator('RAIN_AMOUNT_WEIGHT', 'RAIN_CHANCE_WEIGHT', 'SUN_WEIGHT',
                     'TEMPERATURE_WEIGHT', 'WIND_WEIGHT')
    @classmethod
    def validate_weights(cls, v):
        """Ensure all weights are between 0 and 1"""
        if not 0 <= v <= 1:
            raise ValueError(f"Weight must be between 0 and 1, got {v}")
        return v

    OPTIMAL_TEMPERATURE: float = 22.5

    # =============================================================================
    # ROUTE PLANNING PARAMETERS
    # =============================================================================

    DIRECTION_PENALTY: float = 20.0
    EFFICIENCY_BONUS_MAX: float = 30.0
    AVERAGE_DRIVING_SPEED_KMH: float = 80.0
    ROAD_PREFILTER_FACTOR: float = 1.2   # Air-distance buffer before road lookups
    USE_ROAD_ROUTING: bool = True

    @field_validator('AVERAGE_DRIVING_SPEED_KMH', 'ROAD_PREFILTER_FACTOR')
    @classmethod
    def validate_positive(cls, v):
        if v <= 0:
            raise ValueError(f"Value must be positive, got {v}")
        return v

    # =============================================================================
    # CONFIGURATION SETUP
    # =============================================================================

    def create_directories(self) -> None:
        """Create the log directory if file logging is enabled"""
        if self.LOG_FILE_PATH:
            directory = os.path.dirname(self.LOG_FILE_PATH)
            if directory:
                Path(directory).mkdir(parents=True, exist_ok=True)

    def setup_logging(self) -> None:
        """Configure application logging"""
        log_format = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

        handlers = [logging.StreamHandler()]  # Console output
        if self.LOG_FILE_PATH:
            handlers.append(logging.FileHandler(self.LOG_FILE_PATH))

        logging.basicConfig(
            level=getattr(logging, self.LOG_LEVEL),
            format=log_format,
            handlers=handlers
        )

        # Keep third-party HTTP chatter out of INFO output
        logging.getLogger("urllib3").setLevel(logging.WARNING)

    def validate_configuration(self) -> bool:
        """
        Validate that all critical configuration is properly set
        Returns True if configuration is valid, raises exception otherwise
        """
        try:
            weight_sum = (self.RAIN_AMOUNT_WEIGHT + self.RAIN_CHANCE_WEIGHT +
                          self.SUN_WEIGHT + self.TEMPERATURE_WEIGHT + self.WIND_WEIGHT)

            if not 0.999 <= weight_sum <= 1.001:  # Allow small floating point errors
                raise ValueError(f"Scoring weights must sum to 1.0, got {weight_sum}")

            if self.DEFAULT_FORECAST_DAYS > self.MAX_FORECAST_DAYS:
                raise ValueError(
                    f"Default forecast days ({self.DEFAULT_FORECAST_DAYS}) exceeds "
                    f"maximum ({self.MAX_FORECAST_DAYS})"
                )

            return True

        except Exception as e:
            logging.error(f"Configuration validation failed: {e}")
            raise


def load_configuration() -> Config:
    """
    Load and validate configuration from environment
    Creates directories and sets up logging
    """
    try:
        # Load environment variables from .env file
        load_dotenv()

        config = Config()
        config.create_directories()
        config.setup_logging()
        config.validate_configuration()

        logging.info(f"Configuration loaded successfully for {config.APP_NAME} v{config.APP_VERSION}")
        return config

    except Exception as e:
        print(f"Failed to load configuration: {e}")
        raise


# =============================================================================
# GLOBAL CONFIGURATION INSTANCE
# =============================================================================

config = load_configuration()

DEBUG_MODE = config.DEBUG_MODE
