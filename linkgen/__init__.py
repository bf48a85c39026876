"""Personalized link generator - shareable pages keyed by a user-chosen slug."""

from .api import app, create_app
from .links import LinkService
from .models import LinkRecord

__version__ = "1.0.0"

__all__ = [
    "LinkRecord",
    "LinkService",
    "app",
    "create_app",
]
