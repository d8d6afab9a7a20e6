"""Requester identity supplied by the session layer.

Authentication happens upstream; requests reaching this service carry the
verified customer id in ``X-Customer-Id`` and the administrator flag in
``X-Admin``.
"""

from dataclasses import dataclass

from fastapi import Header

from shared.exceptions import AuthError


@dataclass(frozen=True)
class Requester:
    """The verified identity behind a request."""

    customer_id: str
    is_admin: bool = False


def get_requester(
    x_customer_id: str | None = Header(default=None),
    x_admin: bool = Header(default=False),
) -> Requester:
    """FastAPI dependency resolving the requester from request headers."""
    if not x_customer_id or not x_customer_id.strip():
        raise AuthError({"requester": ["Unauthorized access"]})
    return Requester(customer_id=x_customer_id.strip(), is_admin=x_admin)
