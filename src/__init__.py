# src/__init__.py — v1
"""inspectcache — provider-hosted context caching for field inspection analysis."""

from inspectcache.version import __version__

__all__ = ["__version__"]
