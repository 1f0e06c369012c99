"""
Package: config
Description: Application configuration for the Turn Relay service.
"""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
