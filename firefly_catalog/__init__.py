"""Sync Firefly cloud inventory into a Backstage-style software catalog."""

__version__ = "0.1.0"
