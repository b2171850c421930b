"""The gauntlet web application: candidate portal and admin monitor API."""

__all__ = ["create_app"]

from .main import create_app
