"""Staffing vacancy and consent lifecycle classification for the ETT registry."""

__version__ = "0.1.0"
