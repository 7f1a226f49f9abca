# src/storage/__init__.py — v1
"""Reference document object stores."""
