# src/annotations/__init__.py — v1
"""Comment threads and note association."""
