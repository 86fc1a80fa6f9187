"""Horde AI: behavior-tree driven hostile agents with adaptive difficulty."""
