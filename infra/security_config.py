"""
Security Configuration Manager
------------------------------
Settings, secrets and operating mode for the ShieldAPI bridge.

Rules:
- The wallet key comes from the environment only, never from a file
- Absence of the wallet key selects DEMO mode
- Settings are resolved once at startup and frozen

Precedence: explicit overrides (CLI) > environment > YAML file > defaults.
"""

from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Mapping, Optional
import logging
import os

import yaml

from core.errors import StartupError

DEFAULT_BASE_URL = "https://shield.vainplex.dev"
DEFAULT_NETWORK = "base"
SUPPORTED_NETWORKS = ("base", "base-sepolia")


class OperatingMode(str, Enum):
    """Process-wide operating mode, fixed at startup."""
    DEMO = "demo"   # No wallet, requests tagged demo=true
    PAID = "paid"   # x402 payments signed with the configured wallet


@dataclass
class SecretConfig:
    """Configuration for a secret."""
    name: str
    env_var: str
    description: str = ""


class SecretManager:
    """
    Loads secrets from the environment.

    Values are never logged; only their names are.
    """

    SECRETS: List[SecretConfig] = [
        SecretConfig("wallet_private_key", "SHIELDAPI_WALLET_PRIVATE_KEY",
                     description="EVM private key paying for x402 requests"),
    ]

    def __init__(self, environ: Optional[Mapping[str, str]] = None):
        self._environ = os.environ if environ is None else environ
        self._secrets: Dict[str, str] = {}
        self._logger = logging.getLogger("shieldapi.infra.secrets")
        self._load_secrets()

    def _load_secrets(self) -> None:
        for secret in self.SECRETS:
            value = self._environ.get(secret.env_var)
            if value:
                self._secrets[secret.name] = value
                self._logger.debug(f"Loaded secret: {secret.name}")

    def get(self, name: str) -> Optional[str]:
        """Get a secret by name."""
        return self._secrets.get(name)


class ConfigManager:
    """
    Configuration from an optional YAML file with environment overrides.

    get('base_url') checks the variable mapped in ENV_KEYS (SHIELDAPI_URL)
    first, then the file.
    """

    ENV_KEYS: Dict[str, str] = {
        "base_url": "SHIELDAPI_URL",
        "network": "SHIELDAPI_NETWORK",
        "timeout_seconds": "SHIELDAPI_TIMEOUT",
        "log_level": "SHIELDAPI_LOG_LEVEL",
    }

    def __init__(
        self,
        config_path: Optional[str] = None,
        environ: Optional[Mapping[str, str]] = None,
    ):
        self._config_path = Path(config_path) if config_path else None
        self._environ = os.environ if environ is None else environ
        self._config: Dict[str, Any] = {}
        self._logger = logging.getLogger("shieldapi.infra.config")

        self._load_config()

    def _load_config(self) -> None:
        if self._config_path is None:
            return
        if not self._config_path.exists():
            self._logger.debug(f"Config file not found: {self._config_path}")
            return

        try:
            with open(self._config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as e:
            raise StartupError(f"Invalid config file {self._config_path}: {e}") from e

        if not isinstance(data, dict):
            raise StartupError(f"Config file {self._config_path} must contain a mapping")

        self._config = data
        self._logger.info(f"Loaded config from {self._config_path}")

    def get(self, key: str, default: Any = None) -> Any:
        """Get a configuration value; environment variables override the file."""
        env_key = self.ENV_KEYS.get(key)
        if env_key:
            env_value = self._environ.get(env_key)
            if env_value:
                return env_value

        return self._config.get(key, default)


@dataclass(frozen=True)
class ServerSettings:
    """Resolved, immutable process settings."""
    base_url: str = DEFAULT_BASE_URL
    network: str = DEFAULT_NETWORK
    timeout_seconds: Optional[float] = None
    log_level: str = "INFO"
    wallet_private_key: Optional[str] = field(default=None, repr=False)

    @property
    def mode(self) -> OperatingMode:
        return OperatingMode.PAID if self.wallet_private_key else OperatingMode.DEMO

    @property
    def demo(self) -> bool:
        return self.mode is OperatingMode.DEMO


def _parse_timeout(value: Any) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        timeout = float(value)
    except (TypeError, ValueError) as e:
        raise StartupError(f"Invalid timeout: {value!r}") from e
    if timeout <= 0:
        raise StartupError(f"Timeout must be positive, got {timeout}")
    return timeout


def load_settings(
    config_path: Optional[str] = None,
    overrides: Optional[Dict[str, Any]] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> ServerSettings:
    """
    Resolve settings once at startup.

    Raises StartupError on invalid values so the process never serves
    with a half-valid configuration.
    """
    config = ConfigManager(config_path, environ=environ)
    secrets = SecretManager(environ=environ)
    overrides = {k: v for k, v in (overrides or {}).items() if v is not None}

    def resolve(key: str, default: Any) -> Any:
        if key in overrides:
            return overrides[key]
        return config.get(key, default)

    base_url = str(resolve("base_url", DEFAULT_BASE_URL)).rstrip("/")
    if not base_url.startswith(("http://", "https://")):
        raise StartupError(f"Base URL must be http(s): {base_url!r}")

    network = str(resolve("network", DEFAULT_NETWORK))
    if network not in SUPPORTED_NETWORKS:
        raise StartupError(
            f"Unsupported network {network!r}; expected one of {', '.join(SUPPORTED_NETWORKS)}"
        )

    log_level = str(resolve("log_level", "INFO")).upper()
    if log_level not in ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"):
        raise StartupError(f"Invalid log level: {log_level!r}")

    return ServerSettings(
        base_url=base_url,
        network=network,
        timeout_seconds=_parse_timeout(resolve("timeout_seconds", None)),
        log_level=log_level,
        wallet_private_key=secrets.get("wallet_private_key"),
    )
