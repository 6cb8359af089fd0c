# API module - ShieldAPI client and x402 payment transport
# One long-lived client per process, transport chosen once at startup

from .client import APIConfig, ShieldApiClient, build_url, create_shield_client
from .payment import (
    PaymentAwareTransport, PaymentSigner, PaymentTerms, X402Signer,
    create_payment_transport,
)

__all__ = [
    "APIConfig",
    "ShieldApiClient",
    "build_url",
    "create_shield_client",
    "PaymentAwareTransport",
    "PaymentSigner",
    "PaymentTerms",
    "X402Signer",
    "create_payment_transport",
]
