"""
Reference HTTP service for the NovaMart storefront.

This package provides a FastAPI application exposing:
- Catalog search, lookup and re-seeding
- Demo, password and Google-style authentication
- Order placement, history and admin status changes
- A health endpoint that stays up while the database is offline
"""

from api.main import app, create_app

__all__ = ["app", "create_app"]
