"""Razorpay payment gateway adapter.

Creates gateway orders through the Razorpay Orders API using HTTP basic auth
(key id / key secret). Every failure is reported as an unsuccessful
``IntentResult``; the caller never receives a half-created intent.
"""

import httpx
import structlog

from payments.gateway.port import IntentResult, PaymentGateway
from payments.gateway.signature import verify_signature

logger = structlog.get_logger(__name__)


class RazorpayGateway(PaymentGateway):
    """Production gateway adapter backed by the Razorpay REST API."""

    def __init__(
        self,
        key_id: str,
        key_secret: str,
        base_url: str = "https://api.razorpay.com/v1",
        timeout: float = 10.0,
        client: httpx.Client | None = None,
    ) -> None:
        self.key_id = key_id
        self.key_secret = key_secret
        self._client = client or httpx.Client(
            base_url=base_url,
            auth=(key_id, key_secret),
            timeout=httpx.Timeout(timeout),
        )

    def create_intent(
        self,
        amount: int,
        currency: str,
        idempotency_key: str,
        metadata: dict | None = None,
    ) -> IntentResult:
        payload = {
            "amount": amount,
            "currency": currency,
            "receipt": idempotency_key,
            "notes": {key: str(value) for key, value in (metadata or {}).items()},
        }
        try:
            response = self._client.post("/orders", json=payload)
            response.raise_for_status()
            body = response.json()
        except httpx.HTTPStatusError as e:
            logger.warning(
                "Gateway rejected intent",
                receipt=idempotency_key,
                status_code=e.response.status_code,
            )
            return IntentResult(
                success=False,
                gateway_status="rejected",
                failure_reason=f"Gateway responded with HTTP {e.response.status_code}",
            )
        except (httpx.HTTPError, ValueError) as e:
            logger.warning("Gateway request failed", receipt=idempotency_key, error=str(e))
            return IntentResult(success=False, gateway_status="error", failure_reason=str(e) or type(e).__name__)

        gateway_order_id = body.get("id")
        if not gateway_order_id:
            return IntentResult(
                success=False, gateway_status="invalid", failure_reason="Gateway response had no order id"
            )

        return IntentResult(
            success=True,
            gateway_order_id=gateway_order_id,
            gateway_status=body.get("status", "created"),
        )

    def verify_payment_signature(self, gateway_order_id: str, gateway_payment_id: str, signature: str) -> bool:
        return verify_signature(gateway_order_id, gateway_payment_id, signature, self.key_secret)
