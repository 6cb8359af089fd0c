# Core module - error taxonomy and target classification
# Pure code with no I/O; everything else builds on it

from .classifier import classify_target
from .errors import (
    ErrorCategory, ErrorHandler, ShieldError,
    ApiError, PaymentError, NetworkError, ClassificationError,
    StartupError, UnknownToolError, ToolArgumentError,
)

__all__ = [
    "classify_target",
    "ErrorCategory", "ErrorHandler", "ShieldError",
    "ApiError", "PaymentError", "NetworkError", "ClassificationError",
    "StartupError", "UnknownToolError", "ToolArgumentError",
]
