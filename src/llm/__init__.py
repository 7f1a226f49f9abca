# src/llm/__init__.py — v1
"""Inference provider clients."""
