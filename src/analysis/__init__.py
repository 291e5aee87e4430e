# src/analysis/__init__.py — v1
"""Structural digest and per-artifact analysis."""
