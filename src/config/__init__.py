# src/config/__init__.py — v1
"""Configuration: typed settings and scope family layout."""
