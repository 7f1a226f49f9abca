# src/extraction/base_extractor.py — v2
"""Abstract text extractor interface for reference documents."""

from __future__ import annotations

from abc import ABC, abstractmethod


class BaseExtractor(ABC):
    """Turns raw document bytes into plain text."""

    @property
    @abstractmethod
    def supported_extensions(self) -> list[str]:
        """File extensions this extractor handles (e.g., ['.pdf'])."""

    @abstractmethod
    async def extract(self, content: bytes) -> str:
        """Extract plain text. May return an empty string."""
