"""
ShieldAPI Test Configuration
----------------------------
Shared fixtures and configuration for all tests.

Network access is blocked: every HTTP exchange goes through
httpx.MockTransport handlers defined here.
"""

import json
import sys
from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

# Add project root to path
PROJECT_ROOT = Path(__file__).parent.parent
sys.path.insert(0, str(PROJECT_ROOT))

from api.payment import PaymentSigner, PaymentTerms
from core.errors import PaymentError
from infra.security_config import ServerSettings

BASE_URL = "https://shield.vainplex.dev"

# Well-known test key (hardhat account #0); never holds real funds
TEST_PRIVATE_KEY = "0xac0974bec39a17e36ba4a4b4d238ff944bacb478cbed5efcae784d7bf4f2ff80"

PAYMENT_TERMS = {
    "x402Version": 1,
    "error": "X-PAYMENT header is required",
    "accepts": [
        {
            "scheme": "exact",
            "network": "base",
            "maxAmountRequired": "1000",
            "resource": f"{BASE_URL}/api/check-url",
            "description": "ShieldAPI check-url",
            "mimeType": "application/json",
            "payTo": "0x209693Bc6afc0C5328bA36FaF03C514EF312287C",
            "maxTimeoutSeconds": 60,
            "asset": "0x833589fCD6eDb6E08f4c7C32D4f71b54bdA02913",
            "extra": {"name": "USD Coin", "version": "2"},
        }
    ],
}


# =============================================================================
# Test Isolation: Block Side Effects
# =============================================================================

@pytest.fixture(autouse=True)
def block_real_network(monkeypatch):
    """
    Block real HTTP traffic during tests.

    Anything that reaches httpx.AsyncHTTPTransport raises RuntimeError;
    tests must inject a MockTransport.
    """
    async def _blocked(self, request):
        raise RuntimeError(
            f"Real network access is forbidden during tests: {request.url}"
        )

    monkeypatch.setattr(httpx.AsyncHTTPTransport, "handle_async_request", _blocked)


@pytest.fixture(autouse=True)
def clean_environment(monkeypatch):
    """Drop SHIELDAPI_* and proxy variables so the developer's shell cannot leak in."""
    for key in (
        "SHIELDAPI_URL",
        "SHIELDAPI_WALLET_PRIVATE_KEY",
        "SHIELDAPI_NETWORK",
        "SHIELDAPI_TIMEOUT",
        "SHIELDAPI_LOG_LEVEL",
        "HTTP_PROXY", "HTTPS_PROXY", "ALL_PROXY",
        "http_proxy", "https_proxy", "all_proxy",
    ):
        monkeypatch.delenv(key, raising=False)


# =============================================================================
# HTTP doubles
# =============================================================================

class RecordingHandler:
    """
    MockTransport handler replaying queued responses and recording requests.

    When the queue runs dry the last response is repeated.
    """

    def __init__(self, responses: List[httpx.Response]):
        self.responses = list(responses)
        self.requests: List[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        if len(self.responses) > 1:
            return self.responses.pop(0)
        return self.responses[0]

    @property
    def call_count(self) -> int:
        return len(self.requests)

    @property
    def last_url(self) -> str:
        return str(self.requests[-1].url)


class FakeSigner(PaymentSigner):
    """Signer double returning a fixed header, or failing on demand."""

    network = "base"

    def __init__(self, header: str = "signed-payment", fail: Optional[Exception] = None):
        self.header = header
        self.fail = fail
        self.calls: List[PaymentTerms] = []

    async def authorize(self, terms: PaymentTerms) -> Dict[str, str]:
        self.calls.append(terms)
        if self.fail is not None:
            raise self.fail
        return {"X-PAYMENT": self.header}


def json_response(data: Any, status_code: int = 200) -> httpx.Response:
    # Explicit content: httpx treats json=None as "no body"
    return httpx.Response(
        status_code,
        content=json.dumps(data).encode("utf-8"),
        headers={"Content-Type": "application/json"},
    )


def payment_required(terms: Optional[Dict[str, Any]] = None) -> httpx.Response:
    return json_response(terms if terms is not None else PAYMENT_TERMS, status_code=402)


@pytest.fixture
def recording_handler() -> Callable[..., RecordingHandler]:
    """Factory: recording_handler(resp1, resp2, ...)."""
    def _make(*responses: httpx.Response) -> RecordingHandler:
        return RecordingHandler(list(responses) or [json_response({})])
    return _make


@pytest.fixture
def fake_signer() -> FakeSigner:
    return FakeSigner()


@pytest.fixture
def failing_signer() -> FakeSigner:
    return FakeSigner(fail=PaymentError("insufficient USDC balance"))


@pytest.fixture
def demo_settings() -> ServerSettings:
    return ServerSettings(base_url=BASE_URL)


@pytest.fixture
def paid_settings() -> ServerSettings:
    return ServerSettings(base_url=BASE_URL, wallet_private_key=TEST_PRIVATE_KEY)


@pytest.fixture
def payment_terms() -> Dict[str, Any]:
    return json.loads(json.dumps(PAYMENT_TERMS))
