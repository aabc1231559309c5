# src/__init__.py — v1
"""aicommit: diff preparation and commit-message cache."""

from aicommit.version import __version__

__all__ = ["__version__"]
