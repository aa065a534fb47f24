"""Scribe: a small blog backend with session-based accounts."""

__version__ = "0.1.0"
