"""
Error Handling Module
---------------------
Typed errors for the ShieldAPI bridge.

Every failure a tool invocation can hit is one of these. Errors are
logged and re-raised; the MCP SDK turns them into error results.
Nothing here converts a failure into a successful reply.
"""

from enum import Enum, auto
from typing import Dict, Optional
import logging


class ErrorCategory(Enum):
    """Categories of errors for logging and reporting."""
    API_ERROR = auto()             # Remote API returned non-2xx
    PAYMENT_ERROR = auto()         # Payment authorization failed or refused
    NETWORK_ERROR = auto()         # Request never got a response
    CLASSIFICATION_ERROR = auto()  # Target could not be classified
    STARTUP_ERROR = auto()         # Fatal, raised before serving
    UNKNOWN_TOOL = auto()          # Tool name not in the registry
    INVALID_ARGUMENTS = auto()     # Tool arguments failed validation


class ShieldError(Exception):
    """Base class for all bridge errors."""

    category: ErrorCategory = ErrorCategory.API_ERROR

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({self.category.name}: {self})"


class ApiError(ShieldError):
    """Raised when ShieldAPI answers with a non-2xx status."""

    category = ErrorCategory.API_ERROR

    # Keeps error messages bounded while retaining the diagnostic prefix
    MAX_BODY_CHARS = 200

    def __init__(self, endpoint: str, status_code: int, body: str = ""):
        self.endpoint = endpoint
        self.status_code = status_code
        self.body = body[:self.MAX_BODY_CHARS]
        super().__init__(
            f"ShieldAPI {endpoint} failed ({status_code}): {self.body}"
        )


class PaymentError(ShieldError):
    """Raised when x402 payment authorization cannot be produced or is refused."""

    category = ErrorCategory.PAYMENT_ERROR

    def __init__(self, message: str, endpoint: Optional[str] = None):
        self.endpoint = endpoint
        prefix = f"ShieldAPI {endpoint} payment failed" if endpoint else "Payment failed"
        super().__init__(f"{prefix}: {message}")


class NetworkError(ShieldError):
    """Raised when the request fails before any HTTP response arrives."""

    category = ErrorCategory.NETWORK_ERROR

    def __init__(self, endpoint: str, reason: str):
        self.endpoint = endpoint
        self.reason = reason
        super().__init__(f"ShieldAPI {endpoint} request failed: {reason}")


class ClassificationError(ShieldError):
    """Declared for completeness; classify_target() is total and never raises it."""

    category = ErrorCategory.CLASSIFICATION_ERROR


class StartupError(ShieldError):
    """Signing capability or transport initialization failed. Fatal."""

    category = ErrorCategory.STARTUP_ERROR


class UnknownToolError(ShieldError):
    """Raised when a call names a tool that was never registered."""

    category = ErrorCategory.UNKNOWN_TOOL

    def __init__(self, tool_name: str):
        self.tool_name = tool_name
        super().__init__(f"Unknown tool: {tool_name}")


class ToolArgumentError(ShieldError):
    """Raised when tool arguments do not match the declared parameter."""

    category = ErrorCategory.INVALID_ARGUMENTS

    def __init__(self, tool_name: str, message: str):
        self.tool_name = tool_name
        super().__init__(f"Invalid arguments for {tool_name}: {message}")


class ErrorHandler:
    """
    Central error logging.

    handle() records the error and returns the message to surface;
    callers re-raise the original exception afterwards.
    """

    LEVELS: Dict[ErrorCategory, int] = {
        ErrorCategory.INVALID_ARGUMENTS: logging.WARNING,
        ErrorCategory.UNKNOWN_TOOL: logging.WARNING,
        ErrorCategory.API_ERROR: logging.ERROR,
        ErrorCategory.PAYMENT_ERROR: logging.ERROR,
        ErrorCategory.NETWORK_ERROR: logging.ERROR,
        ErrorCategory.CLASSIFICATION_ERROR: logging.ERROR,
        ErrorCategory.STARTUP_ERROR: logging.CRITICAL,
    }

    def __init__(self, logger_name: str = "shieldapi.errors"):
        self._logger = logging.getLogger(logger_name)
        self._counts: Dict[str, int] = {}

    def handle(self, error: Exception, tool_name: str = "") -> str:
        """Log an error and return its human-readable message."""
        if isinstance(error, ShieldError):
            category = error.category
            level = self.LEVELS.get(category, logging.ERROR)
            key = category.name
        else:
            level = logging.ERROR
            key = type(error).__name__

        self._counts[key] = self._counts.get(key, 0) + 1

        message = str(error) or type(error).__name__
        self._logger.log(
            level,
            f"{key}: {message}",
            extra={"tool_name": tool_name},
            exc_info=not isinstance(error, ShieldError),
        )
        return message

    def get_error_stats(self) -> Dict[str, int]:
        """Get error counts by category."""
        return dict(self._counts)
