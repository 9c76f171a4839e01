# examplan/__init__.py
"""Automated exam scheduling service."""

__version__ = "1.0.0"
