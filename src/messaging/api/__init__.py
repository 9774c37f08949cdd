"""Messaging API package."""

from messaging.api.routes import router

__all__ = ["router"]
