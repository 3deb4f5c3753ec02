"""Encrypted, text-safe file archives."""

__version__ = "1.0.0"
