# src/pipeline/__init__.py — v1
"""Workflow orchestration."""
