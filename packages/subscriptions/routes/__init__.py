"""Subscription API routes."""

from packages.subscriptions.routes import subscriptions, webhooks, redirects

__all__ = ["subscriptions", "webhooks", "redirects"]
