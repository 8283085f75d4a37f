"""Flask JSON API for ShipTrack."""

from .app import create_app

__all__ = ["create_app"]
