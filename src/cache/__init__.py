# src/cache/__init__.py — v1
"""Per-document cache stores and validation."""
