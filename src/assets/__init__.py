# src/assets/__init__.py — v1
"""Rendered image retrieval."""
