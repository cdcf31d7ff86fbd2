"""Minimal JSON CRUD service for a single User resource."""

__version__ = "0.1.0"
