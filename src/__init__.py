# src/__init__.py — v1
"""designscan: analysis workflow for design document screens."""

__version__ = "0.1.0"
