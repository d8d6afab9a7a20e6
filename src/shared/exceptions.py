"""Errors the storefront adds on top of ``protean.exceptions``.

Domain code raises protean's own exceptions wherever one fits:

- ``ValidationError``: malformed input the caller can correct (400)
- ``ObjectNotFoundError``: an unknown order, account, address, or item (404)
- ``InvalidStateError``: an illegal transition, e.g. cancel-after-cancel (409)
- ``ExpectedVersionError``: a concurrent write that outlived the retries (409)

The classes below cover the cases protean has no exception for. Every error
reaches API clients as ``{"error": <type>, "messages": {field: [...]}}``.
"""

from protean.exceptions import (
    ExpectedVersionError,
    InvalidOperationError,
    InvalidStateError,
    ObjectNotFoundError,
    ProteanExceptionWithMessage,
    ValidationError,
)


class AuthError(ProteanExceptionWithMessage):
    """The requester is unauthenticated or not allowed to perform the operation."""


class PaymentVerificationError(ProteanExceptionWithMessage):
    """The gateway signature on a payment callback did not match."""


class GatewayError(ProteanExceptionWithMessage):
    """The upstream payment provider rejected or failed a request."""


STATUS_CODES = {
    ValidationError: 400,
    PaymentVerificationError: 402,
    AuthError: 403,
    ObjectNotFoundError: 404,
    InvalidStateError: 409,
    InvalidOperationError: 409,
    ExpectedVersionError: 409,
    GatewayError: 502,
}


def status_code_for(exc: Exception) -> int:
    for exc_cls, status_code in STATUS_CODES.items():
        if isinstance(exc, exc_cls):
            return status_code
    return 500


def messages_for(exc: Exception) -> dict:
    """Field-keyed messages of an error, whichever way it was raised."""
    messages = getattr(exc, "messages", None)
    if messages is None and exc.args:
        messages = exc.args[0]

    if isinstance(messages, dict):
        return messages
    if isinstance(messages, list):
        return {"_entity": [str(message) for message in messages]}
    return {"_entity": [str(messages or exc)]}
