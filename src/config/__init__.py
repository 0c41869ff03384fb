"""Configuration module for the inheritance tax service."""

from .settings import Settings, get_settings

__all__ = [
    "Settings",
    "get_settings",
]
