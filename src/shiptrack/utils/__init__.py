"""Utility modules: configuration, constants, datetime and validation helpers."""
