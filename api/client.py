"""
API Client
----------
ShieldAPI invoker: builds /api/{endpoint} URLs and performs the GET.

The transport is decided once at startup (plain or payment-aware) and
passed in by reference; the client never knows which one it holds.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Mapping, Optional
from urllib.parse import urlencode
import logging

import httpx

from core.errors import ApiError, NetworkError, PaymentError
from infra.security_config import OperatingMode, ServerSettings

from .payment import PAYMENT_REQUIRED, create_payment_transport

CLIENT_VERSION = "1.0.2"


def build_url(
    base_url: str,
    endpoint: str,
    params: Mapping[str, str],
    demo: bool = False,
) -> str:
    """
    Build '{base_url}/api/{endpoint}?{params}'.

    Parameters keep their insertion order and are form-encoded
    ('https://evil.com' -> 'https%3A%2F%2Fevil.com'). demo=true is
    set last when *demo* is true.
    """
    query = dict(params)
    if demo:
        query["demo"] = "true"

    url = f"{base_url.rstrip('/')}/api/{endpoint}"
    if query:
        url = f"{url}?{urlencode(query)}"
    return url


@dataclass
class APIConfig:
    """Configuration for the ShieldAPI client."""
    base_url: str
    mode: OperatingMode = OperatingMode.DEMO
    timeout_seconds: Optional[float] = None  # None keeps httpx defaults
    headers: Dict[str, str] = field(default_factory=lambda: {
        "Accept": "application/json",
        "User-Agent": f"ShieldAPI-MCP/{CLIENT_VERSION}",
    })

    @property
    def demo(self) -> bool:
        return self.mode is OperatingMode.DEMO


class ShieldApiClient:
    """
    Async client for the ShieldAPI service.

    Rules:
    - One outbound request per invoke() (plus at most one payment retry
      inside the transport)
    - Non-2xx never becomes a result: it raises ApiError
    - Response bodies are returned as parsed, without validation
    """

    def __init__(
        self,
        config: APIConfig,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.config = config
        self.transport = transport
        self._logger = logging.getLogger("shieldapi.api.client")

        client_kwargs: Dict[str, Any] = {"headers": config.headers}
        if transport is not None:
            client_kwargs["transport"] = transport
        if config.timeout_seconds is not None:
            client_kwargs["timeout"] = config.timeout_seconds
        self._client = httpx.AsyncClient(**client_kwargs)

    @property
    def mode(self) -> OperatingMode:
        return self.config.mode

    def build_url(self, endpoint: str, params: Mapping[str, str]) -> str:
        """Build the request URL for this client's base URL and mode."""
        return build_url(self.config.base_url, endpoint, params, demo=self.config.demo)

    async def invoke(self, endpoint: str, params: Mapping[str, str]) -> Any:
        """GET /api/{endpoint} and return the parsed JSON body."""
        url = self.build_url(endpoint, params)
        start_time = datetime.now()

        try:
            response = await self._client.get(url)
        except httpx.TimeoutException as e:
            raise NetworkError(endpoint, f"timed out ({type(e).__name__})") from e
        except httpx.HTTPError as e:
            raise NetworkError(endpoint, str(e) or type(e).__name__) from e

        response_time = (datetime.now() - start_time).total_seconds() * 1000
        self._logger.debug(
            f"GET {endpoint} -> {response.status_code} ({response_time:.0f}ms)",
            extra={"endpoint": endpoint, "status_code": response.status_code},
        )

        if not response.is_success:
            body = response.text
            # In PAID mode a 402 here means the authorized retry was refused
            if response.status_code == PAYMENT_REQUIRED and not self.config.demo:
                raise PaymentError(
                    f"payment rejected ({response.status_code}): {body[:ApiError.MAX_BODY_CHARS]}",
                    endpoint=endpoint,
                )
            raise ApiError(endpoint, response.status_code, body)

        try:
            return response.json()
        except ValueError as e:
            raise ApiError(
                endpoint, response.status_code, f"invalid JSON body: {response.text}"
            ) from e

    async def aclose(self) -> None:
        await self._client.aclose()

    async def __aenter__(self) -> "ShieldApiClient":
        return self

    async def __aexit__(self, *args) -> None:
        await self.aclose()


def create_shield_client(
    settings: ServerSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> ShieldApiClient:
    """
    Create the process-wide client.

    PAID mode installs the payment-aware transport around *transport*
    (or a fresh HTTP transport); failures there raise StartupError.
    """
    config = APIConfig(
        base_url=settings.base_url,
        mode=settings.mode,
        timeout_seconds=settings.timeout_seconds,
    )

    if settings.mode is OperatingMode.PAID:
        transport = create_payment_transport(settings, transport=transport)

    return ShieldApiClient(config, transport=transport)
