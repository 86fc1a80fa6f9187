"""Logging setup, event log and replay recording."""
