# src/extraction/__init__.py — v1
"""Reference document text extraction."""
