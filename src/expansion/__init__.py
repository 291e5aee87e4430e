# src/expansion/__init__.py — v1
"""Container expansion into leaf artifacts."""
