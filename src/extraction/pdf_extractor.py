# src/extraction/pdf_extractor.py — v2
"""PDF text extractor using PyMuPDF (fitz).

Requires the 'pymupdf' package.
"""

from __future__ import annotations

import logging

from inspectcache.extraction.base_extractor import BaseExtractor

logger = logging.getLogger(__name__)


class PdfExtractor(BaseExtractor):
    """Extractor for PDF files using PyMuPDF."""

    @property
    def supported_extensions(self) -> list[str]:
        return [".pdf"]

    async def extract(self, content: bytes) -> str:
        """Extract the text layer of every page, in page order."""
        try:
            import fitz  # PyMuPDF
        except ImportError as e:
            raise ImportError(
                "pymupdf package required for PDF extraction: pip install pymupdf"
            ) from e

        doc = fitz.open(stream=content, filetype="pdf")
        try:
            pages = [page.get_text("text") for page in doc]
        finally:
            doc.close()

        logger.debug("Extracted %d page(s) from PDF", len(pages))
        return "\n".join(pages)
