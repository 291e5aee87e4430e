# src/core/__init__.py — v1
"""Shared models, geometry, naming and errors."""
