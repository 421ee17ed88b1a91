"""Cake shop ordering backend: cake pricing, daily order numbers and counter orders."""

from .app import create_app

__all__ = ["create_app"]
