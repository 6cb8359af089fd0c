# Infrastructure module - settings, logging and the MCP server
# Settings are frozen at startup; logs go to stderr, stdout is the MCP stream

from .security_config import (
    ServerSettings, OperatingMode, SecretManager, ConfigManager,
    load_settings, DEFAULT_BASE_URL, SUPPORTED_NETWORKS,
)
from .logging import (
    get_logger, configure_logging, InvocationContext,
    log_invocation_end, get_invocation_id, generate_invocation_id,
)

__all__ = [
    # Settings
    "ServerSettings",
    "OperatingMode",
    "SecretManager",
    "ConfigManager",
    "load_settings",
    "DEFAULT_BASE_URL",
    "SUPPORTED_NETWORKS",
    # Logging
    "get_logger",
    "configure_logging",
    "InvocationContext",
    "log_invocation_end",
    "get_invocation_id",
    "generate_invocation_id",
]
