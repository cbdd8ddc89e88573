"""
ChatGate API package.

Provides the FastAPI application for subscription-gated access, account
provisioning and payment webhooks.
"""

from .app import app, create_app

__all__ = ["app", "create_app"]
