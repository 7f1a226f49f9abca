# src/analysis/__init__.py — v1
"""Analysis flows and model answer validation."""
