"""Firefly inventory API client."""

from .firefly_client import FireflyClient

__all__ = ["FireflyClient"]
