"""
Package: delivery
Description: Turn delivery to Notion for the Turn Relay.

Provides the single-attempt Notion delivery client and the retry
queue manager that redelivers rate-limited turns.
"""
