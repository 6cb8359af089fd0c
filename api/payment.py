"""
Payment-Aware Transport
-----------------------
httpx transport that settles x402 "402 Payment Required" challenges.

Per request:
    INITIAL            -> send unmodified
    CHALLENGE_RECEIVED -> 402 with x402 terms: ask the signer for a payment header
    RETRIED            -> resend once with the header attached
    RESOLVED           -> whatever came back is returned to the caller

Never more than one retry. Installed only in PAID mode; DEMO mode uses a
plain transport and tags requests with demo=true instead.
"""

from abc import ABC, abstractmethod
from typing import Any, Dict, List, Optional
import json
import logging

import httpx
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from core.errors import PaymentError, StartupError
from infra.security_config import SUPPORTED_NETWORKS, ServerSettings

PAYMENT_REQUIRED = 402

PAYMENT_HEADER = "X-PAYMENT"
PAYMENT_RESPONSE_HEADER = "X-PAYMENT-RESPONSE"


class PaymentTerms(BaseModel):
    """Machine-readable terms carried by a 402 response body."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    x402_version: int = Field(default=1, alias="x402Version")
    accepts: List[Dict[str, Any]] = Field(min_length=1)
    error: Optional[str] = None

    @classmethod
    def from_response_body(cls, body: bytes) -> "PaymentTerms":
        """Parse a 402 body, raising PaymentError when it carries no usable terms."""
        try:
            data = json.loads(body or b"null")
        except ValueError as e:
            raise PaymentError(f"402 response is not JSON: {e}") from e

        if not isinstance(data, dict):
            raise PaymentError("402 response carries no payment terms")

        try:
            return cls.model_validate(data)
        except ValidationError as e:
            raise PaymentError(f"Malformed payment terms: {e.errors()[0]['msg']}") from e


class PaymentSigner(ABC):
    """
    Signing capability that turns payment terms into request headers.

    Owned by PaymentAwareTransport for the life of the process.
    """

    network: str = ""

    @abstractmethod
    async def authorize(self, terms: PaymentTerms) -> Dict[str, str]:
        """
        Produce headers authorizing payment for *terms*.
        Raise PaymentError when no authorization can be produced.
        """


class X402Signer(PaymentSigner):
    """Signs x402 'exact' payments with a local EVM account."""

    def __init__(self, account: Any, network: str = "base"):
        # Imported here: only PAID mode needs the payment stack
        from x402.clients.base import x402Client

        self.network = network
        self.address = account.address
        self._client = x402Client(account)
        self._logger = logging.getLogger("shieldapi.api.signer")

    async def authorize(self, terms: PaymentTerms) -> Dict[str, str]:
        from x402.types import PaymentRequirements

        try:
            requirements = [PaymentRequirements.model_validate(r) for r in terms.accepts]
            selected = self._client.select_payment_requirements(
                requirements, network_filter=self.network
            )
            header = self._client.create_payment_header(selected, terms.x402_version)
        except Exception as e:
            raise PaymentError(f"Could not authorize payment on {self.network}: {e}") from e

        self._logger.info(
            f"Authorized payment of {selected.max_amount_required} to {selected.pay_to} "
            f"on {selected.network}"
        )
        return {
            PAYMENT_HEADER: header,
            "Access-Control-Expose-Headers": PAYMENT_RESPONSE_HEADER,
        }


class PaymentAwareTransport(httpx.AsyncBaseTransport):
    """
    Wraps an inner transport and retries once with payment on 402.

    The retried response is final, including another 402.
    """

    def __init__(
        self,
        signer: PaymentSigner,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.signer = signer
        self._transport = transport or httpx.AsyncHTTPTransport()
        self._logger = logging.getLogger("shieldapi.api.payment")

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        response = await self._transport.handle_async_request(request)
        if response.status_code != PAYMENT_REQUIRED:
            return response

        body = await response.aread()
        await response.aclose()
        self._logger.info(f"Payment required for {request.url.path}, authorizing")

        terms = PaymentTerms.from_response_body(body)
        try:
            payment_headers = await self.signer.authorize(terms)
        except PaymentError:
            raise
        except Exception as e:
            raise PaymentError(f"Signer failed: {e}") from e

        retry = httpx.Request(
            request.method,
            request.url,
            headers=request.headers,
            extensions=request.extensions,
        )
        retry.headers.update(payment_headers)

        retried = await self._transport.handle_async_request(retry)
        self._logger.debug(f"Payment retry for {request.url.path} -> {retried.status_code}")
        return retried

    async def aclose(self) -> None:
        await self._transport.aclose()


def create_payment_transport(
    settings: ServerSettings,
    transport: Optional[httpx.AsyncBaseTransport] = None,
) -> PaymentAwareTransport:
    """
    Build the PAID mode transport once at startup.

    Any failure raises StartupError: the process must not serve
    with a half-configured payment path.
    """
    if not settings.wallet_private_key:
        raise StartupError("PAID mode requires SHIELDAPI_WALLET_PRIVATE_KEY")
    if settings.network not in SUPPORTED_NETWORKS:
        raise StartupError(f"Unsupported network: {settings.network}")

    try:
        from eth_account import Account
    except ImportError as e:
        raise StartupError(
            "Payment support not installed. Run: pip install 'shieldapi-mcp[paid]'"
        ) from e

    try:
        account = Account.from_key(settings.wallet_private_key)
    except Exception as e:
        # The key itself must never reach the log
        raise StartupError(f"Invalid wallet private key ({type(e).__name__})") from None

    try:
        signer = X402Signer(account, network=settings.network)
    except ImportError as e:
        raise StartupError(
            "Payment support not installed. Run: pip install 'shieldapi-mcp[paid]'"
        ) from e

    logging.getLogger("shieldapi.api.payment").info(
        f"Payments enabled for wallet {signer.address} on {settings.network}"
    )
    return PaymentAwareTransport(signer, transport=transport)
