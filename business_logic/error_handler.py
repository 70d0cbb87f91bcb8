"""
Centralized error handling and user feedback.

This module classifies failures from the profile service, the chat-completion
service and the Meta interest search, provides retry with backoff, and turns
errors into notifications the UI can render.
"""

import logging
import time
from typing import Dict, Any, Optional, Callable, Tuple
from enum import Enum
from dataclasses import dataclass
from datetime import datetime, timedelta

import openai
import requests
from pydantic import ValidationError

from models.errors import (
    AIResponseFormatError,
    AISchemaError,
    AIServiceError,
    MetaInterestError,
    ProfileFetchError,
    ProfileNotFoundError,
    ProfileSchemaError,
)

# Set up logging
logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


class ErrorSeverity(Enum):
    """Error severity levels."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(Enum):
    """Error categories for better classification."""
    API_ERROR = "api_error"
    SCHEMA_ERROR = "schema_error"
    NOT_FOUND_ERROR = "not_found_error"
    VALIDATION_ERROR = "validation_error"
    NETWORK_ERROR = "network_error"
    SYSTEM_ERROR = "system_error"
    USER_ERROR = "user_error"


@dataclass
class ErrorInfo:
    """Structured error information."""
    category: ErrorCategory
    severity: ErrorSeverity
    message: str
    user_message: str
    technical_details: Optional[str] = None
    suggested_action: Optional[str] = None
    retry_possible: bool = False
    timestamp: datetime = None

    def __post_init__(self):
        if self.timestamp is None:
            self.timestamp = datetime.now()


class RetryConfig:
    """Configuration for retry mechanisms."""

    def __init__(self, max_attempts: int = 3, base_delay: float = 1.0,
                 exponential_backoff: bool = True, max_delay: float = 60.0):
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.exponential_backoff = exponential_backoff
        self.max_delay = max_delay


class ErrorHandler:
    """
    Centralized error handling and user feedback system.

    Provides retry mechanisms and user-friendly error messages for the
    profile, AI and interest-search integrations.
    """

    def __init__(self):
        self.error_history = []
        self.rate_limit_tracker = {}

    def handle_ai_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle chat-completion API errors with appropriate user feedback.

        Args:
            error: The OpenAI client exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        status_code = self._status_code(error)

        if status_code == 401:
            return ErrorInfo(
                category=ErrorCategory.API_ERROR,
                severity=ErrorSeverity.CRITICAL,
                message=f"AI service authentication failed: {str(error)}",
                user_message="AI service authentication failed. Please check your API key configuration.",
                suggested_action="Verify OPENROUTER_API_KEY in the app secrets.",
                retry_possible=False
            )

        if status_code == 429:
            self._track_rate_limit()
            return ErrorInfo(
                category=ErrorCategory.API_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"AI service rate limit exceeded: {str(error)}",
                user_message="The AI service is busy. The system will automatically retry in a moment.",
                suggested_action="Please wait a moment and try again.",
                retry_possible=True
            )

        if status_code is not None and status_code >= 500:
            return ErrorInfo(
                category=ErrorCategory.API_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"AI service server error: {str(error)}",
                user_message="The AI service encountered an internal error. Please try again.",
                suggested_action="Retry the operation. If the problem persists, try again later.",
                retry_possible=True
            )

        if isinstance(error, openai.APITimeoutError) or isinstance(error.__cause__, openai.APITimeoutError):
            return ErrorInfo(
                category=ErrorCategory.NETWORK_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"AI service timeout: {str(error)}",
                user_message="The AI service request timed out. Please try again.",
                suggested_action="Check your internet connection and retry.",
                retry_possible=True
            )

        return ErrorInfo(
            category=ErrorCategory.API_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"AI service error in {context}: {str(error)}",
            user_message=getattr(error, 'user_message', None) or
                "Failed to get a response from the AI service. The API key might be invalid or the service may be down.",
            technical_details=str(error),
            suggested_action="Please try again. If the problem persists, check the service status.",
            retry_possible=True
        )

    def handle_schema_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle data that arrived but did not match the expected schema.

        Args:
            error: AISchemaError, AIResponseFormatError, ProfileSchemaError or pydantic ValidationError
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, ValidationError):
            details = ", ".join(issue.get('msg', '') for issue in error.errors())
        else:
            details = ", ".join(getattr(error, 'issues', [])) or str(error)

        if isinstance(error, ProfileSchemaError):
            user_message = f"Data format error: {details}"
        else:
            user_message = f"AI response format error: {details}"

        return ErrorInfo(
            category=ErrorCategory.SCHEMA_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Schema validation failed in {context}: {str(error)}",
            user_message=user_message,
            technical_details=details,
            suggested_action="Try again. AI responses vary between attempts.",
            retry_possible=not isinstance(error, ProfileSchemaError)
        )

    def handle_not_found_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """Handle a profile that does not exist or is private."""
        return ErrorInfo(
            category=ErrorCategory.NOT_FOUND_ERROR,
            severity=ErrorSeverity.WARNING,
            message=f"Not found in {context}: {str(error)}",
            user_message=getattr(error, 'user_message', str(error)),
            suggested_action="Check the username and ensure the profile is public.",
            retry_possible=False
        )

    def handle_network_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Handle network-related errors.

        Args:
            error: The network exception
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        error_str = str(error).lower()

        if isinstance(error, (requests.Timeout, TimeoutError)) or "timeout" in error_str or "timed out" in error_str:
            return ErrorInfo(
                category=ErrorCategory.NETWORK_ERROR,
                severity=ErrorSeverity.WARNING,
                message=f"Network timeout: {str(error)}",
                user_message="The request timed out. This may be due to slow internet or high server load.",
                suggested_action="Check your internet connection and try again.",
                retry_possible=True
            )

        if "connection" in error_str and ("refused" in error_str or "failed" in error_str):
            return ErrorInfo(
                category=ErrorCategory.NETWORK_ERROR,
                severity=ErrorSeverity.ERROR,
                message=f"Network connection failed: {str(error)}",
                user_message="Network error while trying to reach the service. Please check your connection.",
                suggested_action="Check your internet connection and firewall settings, then try again.",
                retry_possible=True
            )

        return ErrorInfo(
            category=ErrorCategory.NETWORK_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Network error in {context}: {str(error)}",
            user_message=getattr(error, 'user_message', None) or
                "A network error occurred while communicating with external services.",
            technical_details=str(error),
            suggested_action="Check your internet connection and try again.",
            retry_possible=True
        )

    def retry_with_backoff(self, func: Callable, config: RetryConfig = None,
                           context: str = "") -> Tuple[bool, Any, Optional[ErrorInfo]]:
        """
        Execute a function with retry logic and exponential backoff.

        Args:
            func: Function to execute
            config: Retry configuration
            context: Context for error reporting

        Returns:
            Tuple of (success, result, error_info)
        """
        if config is None:
            config = RetryConfig()

        last_error = None

        for attempt in range(config.max_attempts):
            try:
                result = func()
                return True, result, None

            except Exception as e:
                last_error = e
                logger.warning(f"Attempt {attempt + 1}/{config.max_attempts} failed in {context}: {str(e)}")

                # Don't retry on the last attempt
                if attempt == config.max_attempts - 1:
                    break

                error_info = self.classify_error(e, context)
                if not error_info.retry_possible:
                    break

                if config.exponential_backoff:
                    delay = min(config.base_delay * (2 ** attempt), config.max_delay)
                else:
                    delay = config.base_delay

                if self._status_code(e) == 429:
                    delay = min(max(delay, self.get_rate_limit_delay()), config.max_delay)

                logger.info(f"Retrying in {delay} seconds...")
                time.sleep(delay)

        error_info = self.classify_error(last_error, context)
        return False, None, error_info

    def classify_error(self, error: Exception, context: str = "") -> ErrorInfo:
        """
        Classify an error and return appropriate ErrorInfo.

        Args:
            error: The exception to classify
            context: Additional context about the operation

        Returns:
            ErrorInfo object with structured error information
        """
        if isinstance(error, ProfileNotFoundError):
            return self.handle_not_found_error(error, context)

        if isinstance(error, (AISchemaError, AIResponseFormatError, ProfileSchemaError, ValidationError)):
            return self.handle_schema_error(error, context)

        if isinstance(error, (openai.APIError, openai.OpenAIError, AIServiceError)):
            return self.handle_ai_error(error, context)

        if isinstance(error, (requests.RequestException, ConnectionError, TimeoutError,
                              ProfileFetchError, MetaInterestError)):
            return self.handle_network_error(error, context)

        return ErrorInfo(
            category=ErrorCategory.SYSTEM_ERROR,
            severity=ErrorSeverity.ERROR,
            message=f"Unexpected error in {context}: {str(error)}",
            user_message="An unexpected error occurred. Please try again.",
            technical_details=str(error),
            suggested_action="Try again. If the problem persists, contact support with the error details.",
            retry_possible=True
        )

    @staticmethod
    def _status_code(error: Exception) -> Optional[int]:
        status_code = getattr(error, 'status_code', None)
        if status_code is None:
            response = getattr(error, 'response', None)
            status_code = getattr(response, 'status_code', None)
        return status_code

    def _track_rate_limit(self):
        """Track rate limiting for retry delays."""
        now = datetime.now()
        self.rate_limit_tracker['last_rate_limit'] = now
        self.rate_limit_tracker['count'] = self.rate_limit_tracker.get('count', 0) + 1

    def get_rate_limit_delay(self) -> float:
        """Get recommended delay based on rate limiting history."""
        if 'last_rate_limit' not in self.rate_limit_tracker:
            return 1.0

        count = self.rate_limit_tracker.get('count', 1)
        base_delay = 10.0
        multiplier = min(count, 5)  # Cap at 5x multiplier

        return base_delay * multiplier

    def create_user_notification(self, error_info: ErrorInfo) -> Dict[str, Any]:
        """
        Create a user-friendly notification from error information.

        Args:
            error_info: Structured error information

        Returns:
            Dictionary with notification data for UI display
        """
        notification_type_map = {
            ErrorSeverity.INFO: "info",
            ErrorSeverity.WARNING: "warning",
            ErrorSeverity.ERROR: "error",
            ErrorSeverity.CRITICAL: "error"
        }

        notification = {
            'type': notification_type_map[error_info.severity],
            'title': self._get_error_title(error_info),
            'message': error_info.user_message,
            'timestamp': error_info.timestamp.isoformat(),
            'dismissible': error_info.severity in [ErrorSeverity.INFO, ErrorSeverity.WARNING],
            'retry_possible': error_info.retry_possible
        }

        if error_info.suggested_action:
            notification['action'] = error_info.suggested_action

        if error_info.technical_details and error_info.severity == ErrorSeverity.CRITICAL:
            notification['technical_details'] = error_info.technical_details

        return notification

    def _get_error_title(self, error_info: ErrorInfo) -> str:
        """Get appropriate title for error notification."""
        title_map = {
            ErrorCategory.API_ERROR: "AI Service Error",
            ErrorCategory.SCHEMA_ERROR: "Response Format Error",
            ErrorCategory.NOT_FOUND_ERROR: "Profile Not Found",
            ErrorCategory.VALIDATION_ERROR: "Input Validation Error",
            ErrorCategory.NETWORK_ERROR: "Connection Error",
            ErrorCategory.SYSTEM_ERROR: "System Error",
            ErrorCategory.USER_ERROR: "Input Error"
        }

        return title_map.get(error_info.category, "Error")

    def log_error(self, error_info: ErrorInfo, context: str = ""):
        """
        Log error information for monitoring and debugging.

        Args:
            error_info: Structured error information
            context: Additional context
        """
        self.error_history.append(error_info)

        # Keep only recent errors (last 100)
        if len(self.error_history) > 100:
            self.error_history = self.error_history[-100:]

        log_message = f"{context}: {error_info.message}"

        if error_info.severity == ErrorSeverity.CRITICAL:
            logger.critical(log_message)
        elif error_info.severity == ErrorSeverity.ERROR:
            logger.error(log_message)
        elif error_info.severity == ErrorSeverity.WARNING:
            logger.warning(log_message)
        else:
            logger.info(log_message)

    def get_error_statistics(self) -> Dict[str, Any]:
        """
        Get error statistics for monitoring.

        Returns:
            Dictionary with error statistics
        """
        if not self.error_history:
            return {'total_errors': 0}

        category_counts = {}
        severity_counts = {}

        recent_errors = [
            err for err in self.error_history
            if err.timestamp > datetime.now() - timedelta(hours=24)
        ]

        for error in recent_errors:
            category_counts[error.category.value] = category_counts.get(error.category.value, 0) + 1
            severity_counts[error.severity.value] = severity_counts.get(error.severity.value, 0) + 1

        return {
            'total_errors': len(self.error_history),
            'recent_errors_24h': len(recent_errors),
            'category_breakdown': category_counts,
            'severity_breakdown': severity_counts,
            'rate_limit_info': self.rate_limit_tracker
        }


# Global error handler instance
error_handler = ErrorHandler()
