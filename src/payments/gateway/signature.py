"""HMAC-SHA256 payment callback signatures.

The gateway signs ``"<gateway_order_id>|<gateway_payment_id>"`` with the
merchant key secret and sends the hex digest with the payment callback.
"""

import hashlib
import hmac


def compute_signature(gateway_order_id: str, gateway_payment_id: str, secret: str) -> str:
    payload = f"{gateway_order_id}|{gateway_payment_id}".encode()
    return hmac.new(secret.encode(), payload, hashlib.sha256).hexdigest()


def verify_signature(gateway_order_id: str, gateway_payment_id: str, signature: str, secret: str) -> bool:
    """Constant-time comparison of ``signature`` against the expected digest.

    Both sides are compared as UTF-8 bytes, so a signature holding non-ASCII
    characters is simply a mismatch.
    """
    if not signature:
        return False
    expected = compute_signature(gateway_order_id, gateway_payment_id, secret)
    return hmac.compare_digest(expected.encode(), signature.strip().lower().encode("utf-8"))
