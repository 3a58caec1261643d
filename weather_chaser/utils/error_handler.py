"""
Error Handler Utility
====================

Provides centralized error handling and logging for Weather Chaser.
Defines the error taxonomy, retry logic, and structured error reporting.

Key Features:
- Exception hierarchy mapping onto error categories
- Bounded retry combinator with exponential backoff for transient failures
- Structured error logging with context information
- Error statistics for diagnosing degraded searches

Classes:
    ErrorHandler: Main error handling interface
    ErrorCategory: Enumeration of error categories
    ErrorContext: Context information for errors
    RetryConfig: Configuration for retry behavior
    WeatherChaserError: Base class of all application exceptions

Propagation policy:
    InputValidationError and GeocodingError abort a search and bubble up.
    WeatherFetchError is absorbed per grid point (the point is excluded).
    NoUsableDataError is raised only when every grid point failed.
    An infeasible route is a normal result value, never an exception.

Author: Weather Chaser Team
"""

import logging
import random
import threading
import time
import traceback
from typing import Any, Optional, Dict, Callable, List
from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime
import functools

import requests

# Import configuration
from config import config


class ErrorCategory(Enum):
    """
    Error categories for classification
    """
    # Input errors
    INPUT_VALIDATION = "input_validation"

    # Data-related errors
    DATA_NOT_FOUND = "data_not_found"
    DATA_CORRUPTION = "data_corruption"

    # API-related errors
    API_CONNECTION = "api_connection"
    API_TIMEOUT = "api_timeout"
    API_RATE_LIMIT = "api_rate_limit"

    # Collaborator failures
    GEOCODING_FAILED = "geocoding_failed"
    WEATHER_FETCH_FAILED = "weather_fetch_failed"
    ROUTING_FAILED = "routing_failed"

    # System errors
    NETWORK_ERROR = "network_error"

    # Unknown errors
    UNKNOWN = "unknown"


class ErrorSeverity(Enum):
    """
    Error severity levels
    """
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"
    CRITICAL = "critical"


class WeatherChaserError(Exception):
    """Base class for errors raised by Weather Chaser"""
    category = ErrorCategory.UNKNOWN


class InputValidationError(WeatherChaserError, ValueError):
    """Missing or invalid search parameters"""
    category = ErrorCategory.INPUT_VALIDATION


class GeocodingError(WeatherChaserError):
    """Address not found or geocoding service failure"""
    category = ErrorCategory.GEOCODING_FAILED


class WeatherFetchError(WeatherChaserError):
    """Weather could not be retrieved for a single grid point"""
    category = ErrorCategory.WEATHER_FETCH_FAILED

    def __init__(self, message: str, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class RateLimitError(WeatherFetchError):
    """The weather service answered HTTP 429"""
    category = ErrorCategory.API_RATE_LIMIT


class NoUsableDataError(WeatherChaserError):
    """Every grid point failed to return weather data"""
    category = ErrorCategory.DATA_NOT_FOUND


@dataclass
class ErrorContext:
    """
    Context information for errors

    Attributes:
        module (str): Module where error occurred
        function (str): Function where error occurred
        system_state (Dict): Relevant system state
        timestamp (datetime): When error occurred
    """
    module: str
    function: str
    system_state: Optional[Dict] = None
    timestamp: Optional[datetime] = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


@dataclass
class RetryConfig:
    """
    Configuration for retry behavior

    Attributes:
        max_attempts (int): Total attempts including the first call
        base_delay (float): Delay before the first retry in seconds
        max_delay (float): Maximum delay between retries
        exponential_backoff (bool): Double the delay after each failed attempt
        jitter (bool): Whether to add random jitter to delays
        retryable_errors (List[ErrorCategory]): Error categories that should trigger retry
    """
    max_attempts: int = 3
    base_delay: float = 1.0
    max_delay: float = 30.0
    exponential_backoff: bool = True
    jitter: bool = False
    retryable_errors: List[ErrorCategory] = field(default_factory=lambda: [
        ErrorCategory.API_CONNECTION,
        ErrorCategory.API_TIMEOUT,
        ErrorCategory.API_RATE_LIMIT,
        ErrorCategory.NETWORK_ERROR
    ])

    def delays(self) -> List[float]:
        """Backoff schedule, one entry per retry"""
        schedule = []
        for attempt in range(max(self.max_attempts - 1, 0)):
            if self.exponential_backoff:
                delay = self.base_delay * (2 ** attempt)
            else:
                delay = self.base_delay
            schedule.append(min(delay, self.max_delay))
        return schedule


def weather_retry_config() -> RetryConfig:
    """Retry on HTTP 429 only: 3 retries waiting 1s, 2s, 4s by default"""
    return RetryConfig(
        max_attempts=config.WEATHER_MAX_RETRIES + 1,
        base_delay=config.WEATHER_RETRY_BASE_DELAY,
        exponential_backoff=True,
        jitter=False,
        retryable_errors=[ErrorCategory.API_RATE_LIMIT]
    )


@dataclass
class ErrorReport:
    """
    Structured error report

    Attributes:
        category (ErrorCategory): Error category
        severity (ErrorSeverity): Error severity
        message (str): Human-readable error message
        technical_details (str): Technical error details
        context (ErrorContext): Error context information
        stack_trace (str): Stack trace if available
        occurred_at (datetime): When error occurred
    """
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    technical_details: str
    context: ErrorContext
    stack_trace: Optional[str] = None
    occurred_at: Optional[datetime] = None

    def __post_init__(self):
        if self.occurred_at is None:
            self.occurred_at = datetime.now()


class ErrorHandler:
    """
    Main error handling interface
    Provides centralized error management with logging, retry logic, and reporting
    """

    def __init__(self, sleep_func: Callable[[float], None] = time.sleep):
        """Initialize Error Handler"""
        self.logger = logging.getLogger(__name__)
        self._sleep = sleep_func

        # Error statistics
        self._lock = threading.RLock()
        self._error_counts = {}
        self._total_errors = 0

        self.default_retry_config = RetryConfig()

    def handle_error(self, message: str, exception: Exception = None,
                     category: ErrorCategory = None,
                     severity: ErrorSeverity = ErrorSeverity.MEDIUM,
                     context: ErrorContext = None,
                     raise_exception: bool = False) -> ErrorReport:
        """
        Handle an error with logging and reporting

        Args:
            message (str): Human-readable error message
            exception (Exception): Original exception if available
            category (ErrorCategory): Error category, derived from the exception if omitted
            severity (ErrorSeverity): Error severity
            context (ErrorContext): Error context
            raise_exception (bool): Whether to re-raise the exception

        Returns:
            ErrorReport: Structured error report
        """
        if category is None:
            category = self.categorize_exception(exception) if exception else ErrorCategory.UNKNOWN

        # Shared by worker threads
        with self._lock:
            self._total_errors += 1
            self._error_counts[category] = self._error_counts.get(category, 0) + 1

        technical_details = str(exception) if exception else "No exception details"
        stack_trace = None
        if exception is not None and exception.__traceback__ is not None:
            stack_trace = "".join(traceback.format_exception(
                type(exception), exception, exception.__traceback__
            ))

        error_report = ErrorReport(
            category=category,
            severity=severity,
            message=message,
            technical_details=technical_details,
            context=context or ErrorContext(module="unknown", function="unknown"),
            stack_trace=stack_trace
        )

        self._log_error(error_report)

        if raise_exception and exception:
            raise exception

        return error_report

    def handle_api_error(self, api_name: str, endpoint: str, status_code: int = None,
                         exception: Exception = None,
                         severity: ErrorSeverity = ErrorSeverity.MEDIUM) -> ErrorReport:
        """
        Handle API-specific errors

        Args:
            api_name (str): Name of the API
            endpoint (str): API endpoint
            status_code (int): HTTP status code
            exception (Exception): Original exception
            severity (ErrorSeverity): Error severity

        Returns:
            ErrorReport: Structured error report
        """
        if status_code == 429:
            category = ErrorCategory.API_RATE_LIMIT
        elif status_code:
            category = ErrorCategory.API_CONNECTION
        elif exception is not None:
            category = self.categorize_exception(exception)
        else:
            category = ErrorCategory.API_CONNECTION

        context = ErrorContext(
            module="api_client",
            function=f"{api_name}_request",
            system_state={
                "api_name": api_name,
                "endpoint": endpoint,
                "status_code": status_code
            }
        )

        message = f"{api_name} API error"
        if status_code:
            message += f" (HTTP {status_code})"

        return self.handle_error(
            message=message,
            exception=exception,
            category=category,
            severity=severity,
            context=context
        )

    def retry_on_error(self, func: Callable, *args,
                       retry_config: RetryConfig = None,
                       report_exhausted: bool = True, **kwargs) -> Any:
        """
        Execute function with bounded retry

        Args:
            func (Callable): Function to execute
            *args: Function arguments
            retry_config (RetryConfig): Retry configuration
            report_exhausted (bool): Record an error report when attempts run out;
                callers that report the failure themselves pass False
            **kwargs: Function keyword arguments

        Returns:
            Any: Function result

        Raises:
            Exception: The last error once attempts are exhausted, or the first
                error whose category is not retryable
        """
        retry = retry_config or self.default_retry_config
        delays = retry.delays()
        name = getattr(func, "__name__", repr(func))
        last_exception = None

        for attempt in range(retry.max_attempts):
            try:
                result = func(*args, **kwargs)

                if attempt > 0:
                    self.logger.info(f"{name} succeeded on attempt {attempt + 1}")

                return result

            except Exception as e:
                last_exception = e

                error_category = self.categorize_exception(e)
                if error_category not in retry.retryable_errors:
                    raise

                if attempt == retry.max_attempts - 1:
                    break

                delay = delays[attempt]
                if retry.jitter:
                    delay *= (0.5 + random.random() * 0.5)  # 50-100% of calculated delay

                self.logger.warning(
                    f"{name} failed on attempt {attempt + 1}, "
                    f"retrying in {delay:.1f}s: {e}"
                )

                self._sleep(delay)

        if report_exhausted:
            self.handle_error(
                message=f"{name} failed after {retry.max_attempts} attempts",
                exception=last_exception,
                severity=ErrorSeverity.HIGH
            )
        else:
            self.logger.debug(f"{name} failed after {retry.max_attempts} attempts")

        raise last_exception

    def _log_error(self, error_report: ErrorReport) -> None:
        """Log error report"""
        log_message = (
            f"[{error_report.category.value}] {error_report.message} - "
            f"{error_report.technical_details} "
            f"({error_report.context.module}.{error_report.context.function})"
        )

        if error_report.context.system_state:
            log_message += f" state={error_report.context.system_state}"

        if error_report.severity == ErrorSeverity.CRITICAL:
            self.logger.critical(log_message)
        elif error_report.severity == ErrorSeverity.HIGH:
            self.logger.error(log_message)
        elif error_report.severity == ErrorSeverity.MEDIUM:
            self.logger.warning(log_message)
        else:
            self.logger.info(log_message)

        if (error_report.severity in [ErrorSeverity.HIGH, ErrorSeverity.CRITICAL]
                and error_report.stack_trace):
            self.logger.debug(f"Stack trace:\n{error_report.stack_trace}")

    def categorize_exception(self, exception: Exception) -> ErrorCategory:
        """Categorize exception into error category"""
        if isinstance(exception, WeatherChaserError):
            return exception.category
        elif isinstance(exception, requests.exceptions.Timeout):
            return ErrorCategory.API_TIMEOUT
        elif isinstance(exception, requests.exceptions.ConnectionError):
            return ErrorCategory.NETWORK_ERROR
        elif isinstance(exception, requests.exceptions.RequestException):
            return ErrorCategory.API_CONNECTION
        elif isinstance(exception, TimeoutError):
            return ErrorCategory.API_TIMEOUT
        elif isinstance(exception, ConnectionError):
            return ErrorCategory.NETWORK_ERROR
        elif isinstance(exception, (ValueError, KeyError, TypeError)):
            return ErrorCategory.DATA_CORRUPTION
        else:
            return ErrorCategory.UNKNOWN

    def get_error_statistics(self) -> Dict:
        """Get error statistics"""
        with self._lock:
            return {
                "total_errors": self._total_errors,
                "errors_by_category": {k.value: v for k, v in self._error_counts.items()},
                "most_common_error": (max(self._error_counts, key=self._error_counts.get).value
                                      if self._error_counts else None)
            }

    def reset_statistics(self) -> None:
        """Reset error statistics"""
        with self._lock:
            self._error_counts.clear()
            self._total_errors = 0


def retry_on_failure(max_attempts: int = 3, base_delay: float = 1.0,
                     retryable_errors: List[ErrorCategory] = None):
    """
    Decorator for automatic retry on function failure

    Args:
        max_attempts (int): Maximum attempts
        base_delay (float): Base delay between retries
        retryable_errors (List[ErrorCategory]): Error categories to retry on

    Returns:
        Function decorator
    """
    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            error_handler = ErrorHandler()
            retry_config = RetryConfig(max_attempts=max_attempts, base_delay=base_delay)
            if retryable_errors is not None:
                retry_config.retryable_errors = list(retryable_errors)
            return error_handler.retry_on_error(func, *args, retry_config=retry_config, **kwargs)
        return wrapper
    return decorator
