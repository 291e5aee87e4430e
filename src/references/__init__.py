# src/references/__init__.py — v1
"""Document reference parsing."""
