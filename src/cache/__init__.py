# src/cache/__init__.py — v1
"""Context cache records: fingerprint, stores, lookup, materialization, invalidation."""
