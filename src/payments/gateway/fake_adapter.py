"""Configurable fake payment gateway for development and testing.

This adapter simulates a real payment gateway without any external calls.
It can be configured at runtime to succeed or fail, making it useful for:
- Automated tests with predictable outcomes
- Development without real gateway credentials

Signatures are real HMAC-SHA256 digests over the configured key secret, so
``sign()`` produces exactly what the live gateway would send back.
"""

from uuid import uuid4

from payments.gateway.port import IntentResult, PaymentGateway
from payments.gateway.signature import compute_signature, verify_signature
from shared.config import get_settings


class FakeGateway(PaymentGateway):
    """Configurable fake payment gateway."""

    def __init__(self, key_secret: str | None = None) -> None:
        self.key_secret = key_secret or get_settings().gateway_key_secret.get_secret_value()
        self.should_succeed: bool = True
        self.failure_reason: str = "Gateway unavailable"
        self.calls: list[dict] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Gateway unavailable") -> None:
        """Configure gateway behavior at runtime."""
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def create_intent(
        self,
        amount: int,
        currency: str,
        idempotency_key: str,
        metadata: dict | None = None,
    ) -> IntentResult:
        call = {
            "method": "create_intent",
            "amount": amount,
            "currency": currency,
            "idempotency_key": idempotency_key,
            "metadata": dict(metadata or {}),
        }
        self.calls.append(call)

        if self.should_succeed:
            return IntentResult(
                success=True,
                gateway_order_id=f"order_fake{uuid4().hex[:12]}",
                gateway_status="created",
            )
        return IntentResult(
            success=False,
            gateway_status="failed",
            failure_reason=self.failure_reason,
        )

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        self.calls.append(
            {
                "method": "verify_payment_signature",
                "gateway_order_id": gateway_order_id,
                "gateway_payment_id": gateway_payment_id,
            }
        )
        return verify_signature(gateway_order_id, gateway_payment_id, signature, self.key_secret)

    def sign(self, gateway_order_id: str, gateway_payment_id: str) -> str:
        """Produce the signature the gateway would attach to a successful payment."""
        return compute_signature(gateway_order_id, gateway_payment_id, self.key_secret)
