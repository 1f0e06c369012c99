"""
Module: handlers
Description: Package initialization for API endpoint handlers.

This package contains FastAPI route handlers for the Turn Relay:
- turns: Turn ingestion endpoint and shared dependencies
- queue: Retry queue inspection and manual sweep endpoints
"""

__all__ = []
