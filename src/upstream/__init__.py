# src/upstream/__init__.py — v1
"""Design document service interfaces and the Figma client."""
