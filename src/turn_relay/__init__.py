"""
Package: turn_relay
Description: Relay of "turn resolved" game events to a Notion database.

Delivers turns to Notion immediately when possible and falls back to a
DynamoDB-backed retry queue when Notion rate limits the request.
"""

__version__ = "0.1.0"
