"""Wallet domain API package."""

from wallet.api.routes import router

__all__ = ["router"]
